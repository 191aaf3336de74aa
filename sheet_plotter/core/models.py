"""Domain models used throughout the Sheet Plotter."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, NamedTuple, Sequence, Union


class PlotMode(str, Enum):
    """What a batch turns each row into."""

    AREA = "area"
    PATH = "distance"


class CoordinatePair(NamedTuple):
    """A latitude/longitude pair in degrees (storage order)."""

    lat: float
    lng: float


@dataclass(slots=True)
class PointConfig:
    """Column bindings used to extract one vertex from a row."""

    id: int
    lat_column: str = ""
    lng_column: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.lat_column) and bool(self.lng_column)

    def as_dict(self) -> dict:
        return {"id": self.id, "lat_column": self.lat_column, "lng_column": self.lng_column}


@dataclass(frozen=True, slots=True)
class AreaFeature:
    """A closed ring built from one row, with its surface measures.

    ``hectares`` and ``sq_km`` are derived from ``area_sq_meters`` on access so
    the three measures can never drift apart.
    """

    id: int
    attributes: dict
    points: tuple[CoordinatePair, ...]
    area_sq_meters: float

    type = PlotMode.AREA

    def __post_init__(self) -> None:
        if len(self.points) < 3:
            raise ValueError(f"Area feature {self.id} needs at least 3 points")

    @property
    def hectares(self) -> float:
        return self.area_sq_meters / 10_000

    @property
    def sq_km(self) -> float:
        return self.area_sq_meters / 1_000_000

    def clone(self) -> "AreaFeature":
        return AreaFeature(
            id=self.id,
            attributes=copy.deepcopy(self.attributes),
            points=tuple(self.points),
            area_sq_meters=self.area_sq_meters,
        )

    def as_record(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "attributes": copy.deepcopy(self.attributes),
            "points": [list(point) for point in self.points],
            "area": self.area_sq_meters,
            "hectares": self.hectares,
            "sq_km": self.sq_km,
        }


@dataclass(frozen=True, slots=True)
class PathFeature:
    """An open polyline built from one row, with its segment distances."""

    id: int
    attributes: dict
    points: tuple[CoordinatePair, ...]
    segment_distances: tuple[float, ...]
    total_distance_meters: float

    type = PlotMode.PATH

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise ValueError(f"Path feature {self.id} needs at least 2 points")
        if len(self.segment_distances) != len(self.points) - 1:
            raise ValueError(
                f"Path feature {self.id} has {len(self.segment_distances)} segments "
                f"for {len(self.points)} points"
            )

    @property
    def total_distance_km(self) -> float:
        return self.total_distance_meters / 1000

    def clone(self) -> "PathFeature":
        return PathFeature(
            id=self.id,
            attributes=copy.deepcopy(self.attributes),
            points=tuple(self.points),
            segment_distances=tuple(self.segment_distances),
            total_distance_meters=self.total_distance_meters,
        )

    def as_record(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "attributes": copy.deepcopy(self.attributes),
            "points": [list(point) for point in self.points],
            "distances": list(self.segment_distances),
            "total_distance": self.total_distance_meters,
        }


Feature = Union[AreaFeature, PathFeature]


def feature_from_record(record: Mapping[str, Any]) -> Feature:
    """Rebuild a feature from the plain dict produced by ``as_record``.

    Stored measures are taken as-is rather than recomputed.
    """

    points = tuple(CoordinatePair(float(lat), float(lng)) for lat, lng in record["points"])
    attributes = copy.deepcopy(dict(record.get("attributes") or {}))
    kind = PlotMode(record["type"])
    if kind is PlotMode.AREA:
        return AreaFeature(
            id=int(record["id"]),
            attributes=attributes,
            points=points,
            area_sq_meters=float(record["area"]),
        )
    return PathFeature(
        id=int(record["id"]),
        attributes=attributes,
        points=points,
        segment_distances=tuple(float(d) for d in record["distances"]),
        total_distance_meters=float(record["total_distance"]),
    )


@dataclass(frozen=True, slots=True)
class HistorySnapshot:
    """Immutable copy of the feature collection at one point in time."""

    features: tuple[Feature, ...]

    @classmethod
    def capture(cls, features: Sequence[Feature]) -> "HistorySnapshot":
        return cls(features=tuple(feature.clone() for feature in features))

    def restore(self) -> list[Feature]:
        """Return fresh copies so the snapshot outlives later edits."""
        return [feature.clone() for feature in self.features]


@dataclass(slots=True)
class BatchResult:
    """Outcome of plotting every loaded row once."""

    features: list[Feature]
    plotted_count: int
    skipped_count: int

    def as_dict(self) -> dict:
        return {
            "plotted": self.plotted_count,
            "skipped": self.skipped_count,
            "features": [feature.as_record() for feature in self.features],
        }


@dataclass(slots=True)
class SheetData:
    """Rows and column order handed over by the spreadsheet reader."""

    rows: list[dict]
    columns: list[str]
    source_name: str = ""

    def __len__(self) -> int:
        return len(self.rows)

    def as_dict(self) -> dict:
        return {
            "source": self.source_name,
            "row_count": len(self.rows),
            "columns": list(self.columns),
        }
