"""Utility helpers for the Sheet Plotter project."""

from .geo import bounding_box, great_circle_distance, haversine_distance, spherical_polygon_area
from .formatting import format_number, popup_content, round_measure
from .io import detect_encoding, safe_filename

__all__ = [
    "bounding_box",
    "great_circle_distance",
    "haversine_distance",
    "spherical_polygon_area",
    "format_number",
    "popup_content",
    "round_measure",
    "detect_encoding",
    "safe_filename",
]
