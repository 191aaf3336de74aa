"""Plotting session orchestrator."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..config import APP_CONFIG
from ..core import BatchResult, Feature, PlotMode, PointConfig, SheetData, ValidationFault
from ..services import (
    BundleExporter,
    FeatureBuilder,
    HistoryManager,
    KmlExporter,
    LayerRegistry,
    LeafletLayerRenderer,
)
from ..utils.formatting import list_entry

logger = logging.getLogger(__name__)

AXES = ("lat", "lng")


@dataclass(slots=True)
class PlotSession:
    """Owns one user's sheet, point configuration, features and history."""

    builder: FeatureBuilder
    history: HistoryManager
    layers: LayerRegistry
    kml_exporter: KmlExporter
    bundle_exporter: BundleExporter
    sheet: SheetData = field(default_factory=lambda: SheetData(rows=[], columns=[]))
    point_configs: list[PointConfig] = field(default_factory=list)
    features: list[Feature] = field(default_factory=list)
    mode: PlotMode = PlotMode.AREA
    last_batch: BatchResult | None = None

    @property
    def columns(self) -> list[str]:
        return self.sheet.columns

    def load_sheet(self, sheet: SheetData) -> None:
        """Use ``sheet`` for the next plots and reset the point configuration."""

        self.sheet = sheet
        self.point_configs = []
        for _ in range(APP_CONFIG.min_points):
            self.add_point()
        logger.info("Session loaded %s (%d rows)", sheet.source_name or "sheet", len(sheet))

    def set_mode(self, mode: PlotMode | str) -> None:
        self.mode = PlotMode(mode)

    def add_point(self) -> PointConfig:
        config = PointConfig(id=len(self.point_configs) + 1)
        self.point_configs.append(config)
        return config

    def point(self, index: int) -> PointConfig:
        if not 0 <= index < len(self.point_configs):
            raise ValidationFault("No such point", details={"index": index})
        return self.point_configs[index]

    def remove_last_point(self) -> None:
        if len(self.point_configs) <= APP_CONFIG.min_points:
            raise ValidationFault(f"Minimum {APP_CONFIG.min_points} points required")
        self.point_configs.pop()

    def assign_column(self, index: int, axis: str, column: str) -> None:
        """Bind ``column`` as the latitude or longitude source of point ``index``."""

        if axis not in AXES:
            raise ValidationFault("Axis must be 'lat' or 'lng'", details={"axis": axis})
        config = self.point(index)
        if column and column not in self.columns:
            raise ValidationFault("Unknown column", details={"column": column})

        if axis == "lat":
            config.lat_column = column
        else:
            config.lng_column = column

    def plot(self) -> BatchResult:
        """Plot every loaded row and append the new features."""

        result = self.builder.run_batch(self.sheet.rows, self.point_configs, self.mode)

        self.history.capture(self.features)
        self.features.extend(result.features)
        self.layers.render(result.features)
        self.layers.fit_all()

        self.last_batch = result
        return result

    def undo(self) -> None:
        self._swap(self.history.undo(self.features))

    def redo(self) -> None:
        self._swap(self.history.redo(self.features))

    def clear_all(self) -> None:
        self.layers.retract_all()
        self.layers.fit_all()
        self.features = []
        self.history.clear()
        self.last_batch = None
        logger.info("Session cleared")

    def _swap(self, features: list[Feature]) -> None:
        self.layers.retract_all()
        self.features = features
        self.layers.render(self.features)
        self.layers.fit_all()

    def summaries(self) -> list[dict]:
        return [list_entry(feature) for feature in self.features]

    def status(self) -> dict:
        payload: dict[str, object] = {
            "total": len(self.features),
            "mode": self.mode.value,
            "history": self.history.depths(),
        }
        if self.last_batch is not None:
            payload["plotted"] = self.last_batch.plotted_count
            payload["skipped"] = self.last_batch.skipped_count
        return payload

    def export_kml(self) -> str:
        return self.kml_exporter.export_map_markup(self.features)

    def export_kmz(self) -> bytes:
        return self.kml_exporter.export_kmz(self.features)

    def export_bundle(self) -> bytes:
        return self.bundle_exporter.export_structured_bundle(self.features, self.columns)

    def as_dict(self) -> dict:
        return {
            "sheet": self.sheet.as_dict(),
            "points": [config.as_dict() for config in self.point_configs],
            "status": self.status(),
            "features": self.summaries(),
        }

    @classmethod
    def default(cls) -> "PlotSession":
        return cls(
            builder=FeatureBuilder(),
            history=HistoryManager(),
            layers=LayerRegistry(LeafletLayerRenderer()),
            kml_exporter=KmlExporter(),
            bundle_exporter=BundleExporter(),
        )
