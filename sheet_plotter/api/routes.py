"""REST API blueprint."""

from __future__ import annotations

import io
import uuid
from datetime import datetime, timezone

from flask import Blueprint, abort, current_app, jsonify, request, send_file
from rq.exceptions import NoSuchJobError
from rq.job import Job

from ..config import APP_CONFIG
from ..pipelines import PlotSession
from ..services import BundleExporter, SheetReader
from ..utils import safe_filename
from .sessions import SessionStore

api_bp = Blueprint("api", __name__)

KML_MIMETYPE = "application/vnd.google-earth.kml+xml"
KMZ_MIMETYPE = "application/vnd.google-earth.kmz"


@api_bp.post("/sessions")
def create_session():
    """Start a plotting session from an uploaded spreadsheet."""

    uploaded = request.files.get("sheet")
    if uploaded is None or not uploaded.filename:
        return jsonify({"error": "sheet field is required"}), 400
    if not _allowed(uploaded.filename, APP_CONFIG.allowed_sheet_extensions):
        return jsonify({"error": f"Invalid spreadsheet: {uploaded.filename}"}), 400

    sheet = SheetReader().load(uploaded.read(), filename=safe_filename(uploaded.filename))

    session = PlotSession.default()
    session.load_sheet(sheet)
    session_id = str(uuid.uuid4())
    _sessions()[session_id] = session

    return jsonify({"session_id": session_id, **session.as_dict()}), 201


@api_bp.get("/sessions/<session_id>")
def session_state(session_id: str):
    return jsonify(_session(session_id).as_dict())


@api_bp.delete("/sessions/<session_id>")
def close_session(session_id: str):
    _session(session_id)
    del _sessions()[session_id]
    return "", 204


@api_bp.post("/sessions/<session_id>/points")
def add_point(session_id: str):
    session = _session(session_id)
    config = session.add_point()
    return jsonify(config.as_dict()), 201


@api_bp.delete("/sessions/<session_id>/points")
def remove_last_point(session_id: str):
    session = _session(session_id)
    session.remove_last_point()
    return jsonify({"points": [config.as_dict() for config in session.point_configs]})


@api_bp.put("/sessions/<session_id>/points/<int:index>")
def update_point(session_id: str, index: int):
    """Assign latitude and/or longitude columns to point ``index`` (0-based)."""

    session = _session(session_id)
    payload = request.get_json(silent=True) or {}
    for axis in ("lat", "lng"):
        if axis in payload:
            session.assign_column(index, axis, str(payload[axis] or ""))
    return jsonify(session.point(index).as_dict())


@api_bp.put("/sessions/<session_id>/mode")
def update_mode(session_id: str):
    session = _session(session_id)
    payload = request.get_json(silent=True) or {}
    mode = payload.get("mode")
    if mode not in ("area", "distance"):
        return jsonify({"error": "mode must be 'area' or 'distance'"}), 400
    session.set_mode(mode)
    return jsonify(session.status())


@api_bp.post("/sessions/<session_id>/plot")
def plot(session_id: str):
    session = _session(session_id)
    session.plot()
    return jsonify({**session.status(), "features": session.summaries()})


@api_bp.post("/sessions/<session_id>/undo")
def undo(session_id: str):
    session = _session(session_id)
    session.undo()
    return jsonify({**session.status(), "features": session.summaries()})


@api_bp.post("/sessions/<session_id>/redo")
def redo(session_id: str):
    session = _session(session_id)
    session.redo()
    return jsonify({**session.status(), "features": session.summaries()})


@api_bp.delete("/sessions/<session_id>/features")
def clear_features(session_id: str):
    session = _session(session_id)
    session.clear_all()
    return jsonify(session.status())


@api_bp.get("/sessions/<session_id>/layers")
def layers(session_id: str):
    session = _session(session_id)
    return jsonify(session.layers.renderer.payload())


@api_bp.get("/sessions/<session_id>/export/kml")
def export_kml(session_id: str):
    session = _session(session_id)
    content = session.export_kml().encode("utf-8")
    return _download(content, f"{APP_CONFIG.export_basename}.kml", KML_MIMETYPE)


@api_bp.get("/sessions/<session_id>/export/kmz")
def export_kmz(session_id: str):
    session = _session(session_id)
    return _download(session.export_kmz(), f"{APP_CONFIG.export_basename}.kmz", KMZ_MIMETYPE)


@api_bp.get("/sessions/<session_id>/export/bundle")
def export_bundle(session_id: str):
    session = _session(session_id)
    return _download(
        session.export_bundle(),
        session.bundle_exporter.archive_filename,
        "application/zip",
    )


@api_bp.post("/sessions/<session_id>/export-jobs")
def create_export_job(session_id: str):
    """Queue a bundle export for large sessions."""

    session = _session(session_id)
    created_at = datetime.now(timezone.utc).isoformat()
    job = _queue().enqueue(
        "sheet_plotter.tasks.export_bundle_job",
        kwargs={
            "features": [feature.as_record() for feature in session.features],
            "columns": list(session.columns),
        },
        meta={"created_at": created_at, "session_id": session_id},
    )
    return jsonify({"job_id": job.id, "status": job.get_status(refresh=False), "created_at": created_at}), 202


@api_bp.get("/export-jobs/<job_id>")
def export_job_status(job_id: str):
    job = _fetch_job(job_id)

    payload: dict[str, object] = {
        "job_id": job.id,
        "status": job.get_status(refresh=True),
        "created_at": job.meta.get("created_at"),
    }
    if job.is_failed:
        payload["error"] = job.meta.get("error", job.exc_info)
        return jsonify(payload), 500
    return jsonify(payload), 200


@api_bp.get("/export-jobs/<job_id>/download")
def export_job_download(job_id: str):
    job = _fetch_job(job_id)
    if not job.is_finished:
        return jsonify({"error": "Export is not ready"}), 409
    return _download(job.return_value(), BundleExporter().archive_filename, "application/zip")


def _download(content: bytes, filename: str, mimetype: str):
    return send_file(
        io.BytesIO(content),
        mimetype=mimetype,
        as_attachment=True,
        download_name=filename,
    )


def _fetch_job(job_id: str) -> Job:
    try:
        return Job.fetch(job_id, connection=_connection())
    except NoSuchJobError:
        abort(404, description="Job not found")


def _allowed(filename: str, extensions: tuple[str, ...]) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in extensions


def _session(session_id: str) -> PlotSession:
    session = _sessions().get(session_id)
    if session is None:
        abort(404, description="Session not found")
    return session


def _sessions() -> SessionStore:
    return current_app.extensions["sessions"]


def _queue():
    return current_app.extensions["rq"]["queue"]


def _connection():
    return current_app.extensions["rq"]["connection"]
