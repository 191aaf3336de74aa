"""Core domain primitives for the Sheet Plotter."""

from .models import (
    AreaFeature,
    BatchResult,
    CoordinatePair,
    Feature,
    HistorySnapshot,
    PathFeature,
    PlotMode,
    PointConfig,
    SheetData,
    feature_from_record,
)
from .exceptions import (
    EmptyExport,
    EmptyHistory,
    ParseFault,
    ProcessingError,
    ValidationFault,
)

__all__ = [
    "AreaFeature",
    "BatchResult",
    "CoordinatePair",
    "Feature",
    "HistorySnapshot",
    "PathFeature",
    "PlotMode",
    "PointConfig",
    "SheetData",
    "feature_from_record",
    "EmptyExport",
    "EmptyHistory",
    "ParseFault",
    "ProcessingError",
    "ValidationFault",
]
