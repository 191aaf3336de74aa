"""RQ task definitions for offloaded exports."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from rq import get_current_job

from .core import feature_from_record
from .core.exceptions import ProcessingError
from .services import BundleExporter


def export_bundle_job(*, features: Iterable[Mapping], columns: Sequence[str]) -> bytes:
    """Build the GeoJSON + CSV bundle from plain feature records."""

    job = get_current_job()
    if job:
        job.meta["progress"] = 0
        job.save_meta()

    exporter = BundleExporter()
    try:
        archive = exporter.export_structured_bundle(
            [feature_from_record(record) for record in features],
            list(columns),
        )
    except ProcessingError as exc:
        if job:
            job.meta["error"] = exc.as_dict()
            job.save_meta()
        raise

    if job:
        job.meta["progress"] = 100
        job.save_meta()

    return archive
