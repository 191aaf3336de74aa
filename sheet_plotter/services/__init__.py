"""Service layer exports."""

from .sheet_reader import SheetReader
from .feature_builder import FeatureBuilder, GapPolicy, build_feature, extract_points
from .history import HistoryManager
from .layers import LayerRegistry, LeafletLayerRenderer, MapRenderer
from .kml_exporter import KmlExporter
from .bundle_exporter import BundleExporter

__all__ = [
    "SheetReader",
    "FeatureBuilder",
    "GapPolicy",
    "build_feature",
    "extract_points",
    "HistoryManager",
    "LayerRegistry",
    "LeafletLayerRenderer",
    "MapRenderer",
    "KmlExporter",
    "BundleExporter",
]
