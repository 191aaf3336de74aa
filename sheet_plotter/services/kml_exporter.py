"""Generate KML and KMZ documents from plotted features."""

from __future__ import annotations

import io
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence
from zipfile import ZIP_DEFLATED, ZipFile

from ..config import APP_CONFIG
from ..core import AreaFeature, CoordinatePair, EmptyExport, Feature
from ..utils.formatting import feature_title, iter_attribute_lines, measure_summary

logger = logging.getLogger(__name__)

KML_NAMESPACE = "http://www.opengis.net/kml/2.2"


@dataclass(slots=True)
class KmlExporter:
    """Serialize features as KML placemarks, optionally zipped as KMZ."""

    document_name: str = field(default_factory=lambda: APP_CONFIG.document_name)

    def export_map_markup(self, features: Sequence[Feature]) -> str:
        return self._build_kml(features).decode("utf-8")

    def export_kmz(self, features: Sequence[Feature]) -> bytes:
        buffer = io.BytesIO()
        with ZipFile(buffer, "w", compression=ZIP_DEFLATED) as archive:
            archive.writestr("doc.kml", self._build_kml(features))
        return buffer.getvalue()

    def write_kmz(self, features: Sequence[Feature], output_path: Path | str) -> Path:
        output_path = Path(output_path)
        output_path.write_bytes(self.export_kmz(features))
        return output_path

    def _build_kml(self, features: Sequence[Feature]) -> bytes:
        if not features:
            raise EmptyExport("No data to export")

        kml = ET.Element("kml", xmlns=KML_NAMESPACE)
        document = ET.SubElement(kml, "Document")
        ET.SubElement(document, "name").text = self.document_name

        for feature in features:
            placemark = ET.SubElement(document, "Placemark")
            ET.SubElement(placemark, "name").text = feature_title(feature)
            ET.SubElement(placemark, "description").text = _description(feature)

            if isinstance(feature, AreaFeature):
                polygon = ET.SubElement(placemark, "Polygon")
                boundary = ET.SubElement(polygon, "outerBoundaryIs")
                ring = ET.SubElement(boundary, "LinearRing")
                # KML rings must repeat the first vertex
                vertices = list(feature.points) + [feature.points[0]]
                ET.SubElement(ring, "coordinates").text = _coordinates(vertices)
            else:
                line = ET.SubElement(placemark, "LineString")
                ET.SubElement(line, "coordinates").text = _coordinates(feature.points)

        logger.info("Built KML document with %d placemark(s)", len(features))
        return ET.tostring(kml, encoding="utf-8", xml_declaration=True)


def _description(feature: Feature) -> str:
    return "<br>".join([measure_summary(feature), *iter_attribute_lines(feature.attributes)])


def _coordinates(points: Sequence[CoordinatePair]) -> str:
    return " ".join(f"{point.lng},{point.lat},0" for point in points)
