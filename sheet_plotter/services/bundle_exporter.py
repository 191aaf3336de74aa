"""Generate the zipped GeoJSON + CSV attribute bundle."""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass, field
from typing import Sequence
from zipfile import ZIP_DEFLATED, ZipFile

from ..config import APP_CONFIG
from ..core import AreaFeature, CoordinatePair, EmptyExport, Feature, PathFeature
from ..utils import format_number, round_measure
from ..utils.formatting import cell_text

logger = logging.getLogger(__name__)

AREA_COLUMNS = ("area_m2", "area_hectares", "area_sqkm")
DISTANCE_COLUMNS = ("total_distance_m", "total_distance_km")


@dataclass(slots=True)
class BundleExporter:
    """Package features as a GeoJSON document plus a flat attribute CSV."""

    basename: str = field(default_factory=lambda: APP_CONFIG.export_basename)
    attributes_filename: str = "attributes.csv"

    @property
    def geojson_filename(self) -> str:
        return f"{self.basename}.geojson"

    @property
    def archive_filename(self) -> str:
        return f"{self.basename}_shapefile.zip"

    def export_structured_bundle(self, features: Sequence[Feature], columns: Sequence[str]) -> bytes:
        if not features:
            raise EmptyExport("No data to export")

        buffer = io.BytesIO()
        with ZipFile(buffer, "w", compression=ZIP_DEFLATED) as archive:
            archive.writestr(self.geojson_filename, self.build_geojson_text(features))
            archive.writestr(self.attributes_filename, self.build_attribute_csv(features, columns))

        logger.info("Built export bundle with %d feature(s)", len(features))
        return buffer.getvalue()

    def build_geojson_text(self, features: Sequence[Feature]) -> str:
        return json.dumps(build_geojson(features), indent=2, ensure_ascii=False, default=str)

    def build_attribute_csv(self, features: Sequence[Feature], columns: Sequence[str]) -> str:
        has_areas = any(isinstance(feature, AreaFeature) for feature in features)
        has_paths = any(isinstance(feature, PathFeature) for feature in features)

        header = ["id", "type"]
        if has_areas:
            header.extend(AREA_COLUMNS)
        if has_paths:
            header.extend(DISTANCE_COLUMNS)
        header.append("points")
        header.extend(columns)

        output = io.StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(header)

        for feature in features:
            row = [str(feature.id), feature.type.value]
            if has_areas:
                if isinstance(feature, AreaFeature):
                    row.extend(
                        [
                            format_number(feature.area_sq_meters, 2),
                            format_number(feature.hectares, 4),
                            format_number(feature.sq_km, 6),
                        ]
                    )
                else:
                    row.extend([""] * len(AREA_COLUMNS))
            if has_paths:
                if isinstance(feature, PathFeature):
                    row.extend(
                        [
                            format_number(feature.total_distance_meters, 2),
                            format_number(feature.total_distance_km, 3),
                        ]
                    )
                else:
                    row.extend([""] * len(DISTANCE_COLUMNS))
            row.append(str(len(feature.points)))
            row.extend(cell_text(feature.attributes.get(column)) for column in columns)
            writer.writerow(row)

        return output.getvalue()


def build_geojson(features: Sequence[Feature]) -> dict:
    """Return a GeoJSON ``FeatureCollection`` dict for ``features``."""

    return {
        "type": "FeatureCollection",
        "features": [_feature_to_geojson(feature) for feature in features],
    }


def _feature_to_geojson(feature: Feature) -> dict:
    properties: dict[str, object] = {"id": feature.id, "type": feature.type.value}

    if isinstance(feature, AreaFeature):
        properties["area_m2"] = round_measure(feature.area_sq_meters, 2)
        properties["area_ha"] = round_measure(feature.hectares, 4)
        properties["area_sqkm"] = round_measure(feature.sq_km, 6)
        # RFC 7946 linear rings are closed
        ring = list(feature.points) + [feature.points[0]]
        geometry = {"type": "Polygon", "coordinates": [_positions(ring)]}
    else:
        properties["total_dist_m"] = round_measure(feature.total_distance_meters, 2)
        properties["total_dist_km"] = round_measure(feature.total_distance_km, 3)
        geometry = {"type": "LineString", "coordinates": _positions(feature.points)}

    properties["points"] = len(feature.points)
    properties.update(feature.attributes)

    return {"type": "Feature", "properties": properties, "geometry": geometry}


def _positions(points: Sequence[CoordinatePair]) -> list[list[float]]:
    return [[point.lng, point.lat] for point in points]
