"""Turn spreadsheet rows into area and path features."""

from __future__ import annotations

import logging
import math
import re
from enum import Enum
from numbers import Real
from typing import Mapping, Sequence

from ..core import (
    AreaFeature,
    BatchResult,
    CoordinatePair,
    Feature,
    PathFeature,
    PlotMode,
    PointConfig,
    ValidationFault,
)
from ..utils import great_circle_distance, spherical_polygon_area

logger = logging.getLogger(__name__)

_NUMERIC_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

MIN_AREA_POINTS = 3
MIN_PATH_POINTS = 2


class GapPolicy(str, Enum):
    """What to do with a row when one of its configured points is missing."""

    COLLAPSE = "collapse"
    REJECT = "reject"


def parse_coordinate(value: object) -> float | None:
    """Return ``value`` as a finite float, or ``None`` when it is not one.

    Text is read by its leading number, so ``"12.5°"`` gives ``12.5``.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, Real):
        number = float(value)
    elif isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value.strip())
        if not match:
            return None
        number = float(match.group(0))
    else:
        return None
    return number if math.isfinite(number) else None


def extract_points(
    row: Mapping[str, object],
    configs: Sequence[PointConfig],
    *,
    gap_policy: GapPolicy = GapPolicy.COLLAPSE,
) -> list[CoordinatePair]:
    """Read one vertex per config from ``row``, in config order.

    A vertex is kept only if both coordinates are finite and neither is
    exactly 0 (blank cells often come through as zero). With
    ``GapPolicy.COLLAPSE`` missing vertices are dropped and later ones move
    up; with ``GapPolicy.REJECT`` any missing vertex empties the result.
    """

    points: list[CoordinatePair] = []
    for config in configs:
        lat = parse_coordinate(row.get(config.lat_column))
        lng = parse_coordinate(row.get(config.lng_column))
        if lat is None or lng is None or lat == 0 or lng == 0:
            if gap_policy is GapPolicy.REJECT:
                return []
            continue
        points.append(CoordinatePair(lat, lng))
    return points


def build_feature(
    points: Sequence[CoordinatePair],
    row: Mapping[str, object],
    row_id: int,
    mode: PlotMode,
) -> Feature | None:
    """Build the feature ``mode`` asks for, or ``None`` if there are too few points."""

    points = tuple(points)
    attributes = dict(row)

    if mode is PlotMode.AREA:
        if len(points) < MIN_AREA_POINTS:
            return None
        return AreaFeature(
            id=row_id,
            attributes=attributes,
            points=points,
            area_sq_meters=spherical_polygon_area(points),
        )

    if len(points) < MIN_PATH_POINTS:
        return None
    distances = tuple(great_circle_distance(a, b) for a, b in zip(points, points[1:]))
    return PathFeature(
        id=row_id,
        attributes=attributes,
        points=points,
        segment_distances=distances,
        total_distance_meters=sum(distances),
    )


def validate_configs(configs: Sequence[PointConfig]) -> None:
    """Raise :class:`ValidationFault` unless every point has both columns."""

    incomplete = [config.id for config in configs if not config.is_complete]
    if incomplete:
        raise ValidationFault(
            "Please select latitude and longitude columns for all points",
            details={"incomplete_points": incomplete},
        )


class FeatureBuilder:
    """Plot every row of a sheet with the configured points."""

    def __init__(self, *, gap_policy: GapPolicy = GapPolicy.COLLAPSE):
        self.gap_policy = gap_policy

    def run_batch(
        self,
        rows: Sequence[Mapping[str, object]],
        configs: Sequence[PointConfig],
        mode: PlotMode,
    ) -> BatchResult:
        validate_configs(configs)

        features: list[Feature] = []
        skipped = 0
        for row_id, row in enumerate(rows, start=1):
            points = extract_points(row, configs, gap_policy=self.gap_policy)
            feature = build_feature(points, row, row_id, mode)
            if feature is None:
                skipped += 1
                logger.debug("Skipping row %s: %d usable point(s)", row_id, len(points))
                continue
            features.append(feature)

        logger.info(
            "Plotted %d row(s) as %s, skipped %d (insufficient points)",
            len(features),
            mode.value,
            skipped,
        )
        return BatchResult(features=features, plotted_count=len(features), skipped_count=skipped)
