"""Formatting helpers for popups, descriptions and exported measures."""

from __future__ import annotations

from typing import Iterator, Mapping

from ..core.models import AreaFeature, Feature, PathFeature


def is_blank(value: object) -> bool:
    """Return ``True`` for the cell values a spreadsheet leaves empty."""

    return value is None or value == ""


def format_number(value: float, decimals: int) -> str:
    """Return ``value`` with a fixed number of decimals."""

    return f"{value:.{decimals}f}"


def round_measure(value: float, decimals: int) -> float:
    """Round through the fixed-decimal text so exports match the popups."""

    return float(format_number(value, decimals))


def cell_text(value: object) -> str:
    """Render a raw cell value as text; blank cells become ``""``."""

    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def iter_attribute_lines(attributes: Mapping[str, object]) -> Iterator[str]:
    """Yield ``key: value`` for every non-empty attribute, in column order."""

    for key, value in attributes.items():
        if is_blank(value):
            continue
        yield f"{key}: {cell_text(value)}"


def measure_summary(feature: Feature) -> str:
    """One-line measure text used as the head of KML descriptions."""

    if isinstance(feature, AreaFeature):
        return (
            f"Area: {format_number(feature.area_sq_meters, 2)} m², "
            f"Hectares: {format_number(feature.hectares, 4)} ha, "
            f"Sq Km: {format_number(feature.sq_km, 6)} sq km"
        )
    return f"Total Distance: {format_number(feature.total_distance_km, 3)} km"


def feature_title(feature: Feature) -> str:
    if isinstance(feature, PathFeature):
        return f"Distance {feature.id}"
    return f"Area {feature.id}"


def popup_content(feature: Feature) -> str:
    """HTML popup shown on the map for a plotted feature."""

    lines: list[str]
    if isinstance(feature, AreaFeature):
        lines = [
            f"<strong>Area {feature.id}</strong>",
            f"Points: {len(feature.points)}",
            f"Area: {format_number(feature.area_sq_meters, 2)} m²",
            f"Hectares: {format_number(feature.hectares, 4)} ha",
            f"Sq Km: {format_number(feature.sq_km, 6)} sq km",
            "",
        ]
    else:
        lines = [
            f"<strong>Distance Analysis {feature.id}</strong>",
            f"Points: {len(feature.points)}",
            f"Total Distance: {format_number(feature.total_distance_km, 3)} km",
            "",
            "<strong>Segment Distances:</strong>",
        ]
        lines.extend(
            f"Segment {index}: {format_number(distance, 2)} m"
            for index, distance in enumerate(feature.segment_distances, start=1)
        )
        lines.append("")

    lines.append("<strong>Attributes:</strong>")
    lines.extend(iter_attribute_lines(feature.attributes))
    return "<br>".join(lines)


def list_entry(feature: Feature) -> dict:
    """Short side-panel summary of a plotted feature."""

    if isinstance(feature, AreaFeature):
        detail = (
            f"{len(feature.points)} points, {format_number(feature.area_sq_meters, 2)} m², "
            f"{format_number(feature.hectares, 4)} ha, {format_number(feature.sq_km, 6)} sq km"
        )
    else:
        detail = (
            f"{len(feature.points)} points, "
            f"{format_number(feature.total_distance_km, 3)} km total"
        )
    return {"id": feature.id, "type": feature.type.value, "title": feature_title(feature), "detail": detail}
