from __future__ import annotations

import io
import zipfile

import pytest

from sheet_plotter import create_app

CSV_CONTENT = (
    "Name,Lat1,Lng1,Lat2,Lng2,Lat3,Lng3\n"
    "Plot A,1.0,1.0,1.0,1.001,1.001,1.001\n"
    "Plot B,2.0,2.0,2.0,2.002,,\n"
)


class FakeJob:
    def __init__(self, job_id: str):
        self.id = job_id

    def get_status(self, refresh: bool = True) -> str:
        return "queued"


class FakeQueue:
    connection = None

    def __init__(self) -> None:
        self.enqueued: list[tuple[str, dict]] = []

    def enqueue(self, func: str, kwargs: dict, **options) -> FakeJob:
        self.enqueued.append((func, kwargs))
        return FakeJob(f"job-{len(self.enqueued)}")


@pytest.fixture()
def queue() -> FakeQueue:
    return FakeQueue()


@pytest.fixture()
def client(queue):
    app = create_app(queue=queue)
    app.config["TESTING"] = True
    return app.test_client()


def upload(client, content: str = CSV_CONTENT, filename: str = "plots.csv"):
    return client.post(
        "/api/sessions",
        data={"sheet": (io.BytesIO(content.encode("utf-8")), filename)},
        content_type="multipart/form-data",
    )


@pytest.fixture()
def session_id(client) -> str:
    response = upload(client)
    assert response.status_code == 201
    session_id = response.get_json()["session_id"]

    assert client.post(f"/api/sessions/{session_id}/points").status_code == 201
    for index in range(3):
        response = client.put(
            f"/api/sessions/{session_id}/points/{index}",
            json={"lat": f"Lat{index + 1}", "lng": f"Lng{index + 1}"},
        )
        assert response.status_code == 200
    return session_id


def test_health(client):
    assert client.get("/health").get_json() == {"status": "healthy"}


def test_upload_reports_sheet_and_default_points(client):
    payload = upload(client).get_json()

    assert payload["sheet"]["row_count"] == 2
    assert payload["sheet"]["columns"][0] == "Name"
    assert len(payload["points"]) == 2


def test_upload_rejects_other_file_types(client):
    response = upload(client, filename="plots.txt")
    assert response.status_code == 400


def test_upload_reports_parse_faults(client):
    response = upload(client, content="not a workbook", filename="plots.xlsx")

    assert response.status_code == 400
    assert response.get_json()["error"] == "ParseFault"


def test_plot_and_undo_redo(client, session_id):
    plotted = client.post(f"/api/sessions/{session_id}/plot").get_json()
    assert (plotted["plotted"], plotted["skipped"], plotted["total"]) == (1, 1, 1)

    undone = client.post(f"/api/sessions/{session_id}/undo").get_json()
    assert undone["total"] == 0

    redone = client.post(f"/api/sessions/{session_id}/redo").get_json()
    assert [feature["title"] for feature in redone["features"]] == ["Area 1"]

    layers = client.get(f"/api/sessions/{session_id}/layers").get_json()
    assert len(layers["layers"]) == 1
    assert layers["layers"][0]["kind"] == "polygon"
    assert layers["bounds"] is not None


def test_empty_history_is_a_conflict(client, session_id):
    response = client.post(f"/api/sessions/{session_id}/undo")

    assert response.status_code == 409
    assert response.get_json()["error"] == "EmptyHistory"


def test_incomplete_points_are_rejected(client, session_id):
    client.post(f"/api/sessions/{session_id}/points")

    response = client.post(f"/api/sessions/{session_id}/plot")

    assert response.status_code == 400
    assert response.get_json()["details"] == {"incomplete_points": [4]}


def test_removing_below_two_points_is_rejected(client, session_id):
    assert client.delete(f"/api/sessions/{session_id}/points").status_code == 200
    assert client.delete(f"/api/sessions/{session_id}/points").status_code == 400


def test_mode_switch_and_kml_download(client, session_id):
    assert client.get(f"/api/sessions/{session_id}/export/kml").status_code == 422

    client.put(f"/api/sessions/{session_id}/mode", json={"mode": "distance"})
    client.post(f"/api/sessions/{session_id}/plot")

    response = client.get(f"/api/sessions/{session_id}/export/kml")
    assert response.status_code == 200
    assert response.headers["Content-Disposition"].startswith("attachment")
    body = response.get_data(as_text=True)
    assert "<LineString>" in body
    assert "Distance 2" in body


def test_bundle_download(client, session_id):
    client.post(f"/api/sessions/{session_id}/plot")

    response = client.get(f"/api/sessions/{session_id}/export/bundle")

    assert response.status_code == 200
    with zipfile.ZipFile(io.BytesIO(response.get_data())) as archive:
        assert "attributes.csv" in archive.namelist()


def test_export_job_is_queued_with_plain_records(client, queue, session_id):
    client.post(f"/api/sessions/{session_id}/plot")

    response = client.post(f"/api/sessions/{session_id}/export-jobs")

    assert response.status_code == 202
    func, kwargs = queue.enqueued[0]
    assert func == "sheet_plotter.tasks.export_bundle_job"
    assert kwargs["columns"][:3] == ["Name", "Lat1", "Lng1"]
    assert kwargs["features"][0]["type"] == "area"


def test_clear_and_close_session(client, session_id):
    client.post(f"/api/sessions/{session_id}/plot")

    assert client.delete(f"/api/sessions/{session_id}/features").get_json()["total"] == 0
    assert client.delete(f"/api/sessions/{session_id}").status_code == 204
    assert client.get(f"/api/sessions/{session_id}").status_code == 404
