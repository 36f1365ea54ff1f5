"""
Area key resolution.

An area key is the normalized location identifier used to group reports:
- "area:<slug>" from a named place (preferred)
- "grid:<lat>:<lng>" from GPS rounded to a 2-decimal-degree grid
- None when neither is available

CRITICAL: This is a deterministic function - same input always produces
same output. Keys are persisted with each signal and grouped on at query time.
"""

import math
import re
from typing import Optional

GRID_PRECISION = 2

_WHITESPACE_RUN = re.compile(r"\s+")


def slugify_area(place_area: str) -> str:
    """Lowercase and replace whitespace runs with underscores."""
    return _WHITESPACE_RUN.sub("_", place_area.lower())


def round_half_up(value: float, digits: int = GRID_PRECISION) -> float:
    """Round half toward +infinity, the way stored grid keys were produced."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def format_coordinate(value: float) -> str:
    """
    Render a rounded coordinate in its shortest form.

    Examples:
        12.35 -> "12.35", 12.3 -> "12.3", 12.0 -> "12", -0.0 -> "0"
    """
    if value == 0:
        return "0"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def resolve_area_key(
    place_area: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
) -> Optional[str]:
    """
    Resolve the area key for a report.

    Args:
        place_area: Named area (e.g. "Downtown Park")
        lat: Latitude
        lng: Longitude

    Returns:
        "area:downtown_park", "grid:12.35:98.77" or None
    """
    if place_area:
        return f"area:{slugify_area(place_area)}"

    if lat is not None and lng is not None:
        grid_lat = format_coordinate(round_half_up(lat))
        grid_lng = format_coordinate(round_half_up(lng))
        return f"grid:{grid_lat}:{grid_lng}"

    return None
