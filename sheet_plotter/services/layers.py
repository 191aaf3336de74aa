"""Map layer bookkeeping kept apart from the feature data."""

from __future__ import annotations

import itertools
import logging
from typing import Hashable, Iterable, Protocol, Sequence

from ..config import APP_CONFIG
from ..core import AreaFeature, CoordinatePair, Feature
from ..utils import bounding_box, popup_content

logger = logging.getLogger(__name__)

Bounds = tuple[tuple[float, float], tuple[float, float]]

POLYGON_STYLE = {"color": "#3498db", "fillOpacity": 0.5, "weight": 2}
POLYLINE_STYLE = {"color": "#e74c3c", "weight": 3}


class MapRenderer(Protocol):
    """What the session needs from a map surface."""

    def add_layer(self, geometry_type: str, points: Sequence[CoordinatePair], popup: str) -> Hashable:
        ...

    def remove_layer(self, handle: Hashable) -> None:
        ...

    def fit_bounds(self, handles: Iterable[Hashable]) -> Bounds | None:
        ...


class LeafletLayerRenderer:
    """In-process renderer producing Leaflet-ready layer payloads."""

    def __init__(self, *, padding: float | None = None):
        self.padding = APP_CONFIG.fit_bounds_padding if padding is None else padding
        self.layers: dict[int, dict] = {}
        self.viewport: Bounds | None = None
        self._ids = itertools.count(1)

    def add_layer(self, geometry_type: str, points: Sequence[CoordinatePair], popup: str) -> int:
        handle = next(self._ids)
        style = POLYGON_STYLE if geometry_type == "polygon" else POLYLINE_STYLE
        self.layers[handle] = {
            "handle": handle,
            "kind": geometry_type,
            "latlngs": [[point.lat, point.lng] for point in points],
            "style": dict(style),
            "popup": popup,
        }
        return handle

    def remove_layer(self, handle: int) -> None:
        self.layers.pop(handle, None)

    def fit_bounds(self, handles: Iterable[int]) -> Bounds | None:
        points = [
            CoordinatePair(lat, lng)
            for handle in handles
            if handle in self.layers
            for lat, lng in self.layers[handle]["latlngs"]
        ]
        self.viewport = bounding_box(points, pad=self.padding)
        return self.viewport

    def payload(self) -> dict:
        return {
            "layers": list(self.layers.values()),
            "bounds": [list(corner) for corner in self.viewport] if self.viewport else None,
        }


class LayerRegistry:
    """Side-table of rendering handles keyed by feature id.

    Row ids repeat across batches, so each id maps to a list of handles.
    """

    def __init__(self, renderer: MapRenderer):
        self.renderer = renderer
        self._handles: dict[int, list[Hashable]] = {}

    def __len__(self) -> int:
        return sum(len(handles) for handles in self._handles.values())

    def handles_for(self, feature_id: int) -> list[Hashable]:
        return list(self._handles.get(feature_id, ()))

    def render(self, features: Iterable[Feature]) -> None:
        for feature in features:
            geometry_type = "polygon" if isinstance(feature, AreaFeature) else "polyline"
            handle = self.renderer.add_layer(geometry_type, feature.points, popup_content(feature))
            self._handles.setdefault(feature.id, []).append(handle)

    def retract_all(self) -> None:
        logger.debug("Retracting %d layer(s)", len(self))
        for handles in self._handles.values():
            for handle in handles:
                self.renderer.remove_layer(handle)
        self._handles.clear()

    def fit_all(self) -> Bounds | None:
        """Fit the map to every rendered feature; no features clears the viewport."""

        handles = [handle for group in self._handles.values() for handle in group]
        return self.renderer.fit_bounds(handles)
