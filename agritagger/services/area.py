"""
Plot area in hectares.

Area is computed on the WGS84 ellipsoid from GeoJSON longitude/latitude
coordinates. It is display data only, so anything that is not a polygon,
or anything that fails to compute, yields zero.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pyproj import Geod
from shapely.geometry import shape
from shapely.geometry.polygon import orient

logger = logging.getLogger(__name__)

SQUARE_METERS_PER_HECTARE = 10_000.0

_GEOD = Geod(ellps="WGS84")
_AREA_KINDS = ("Polygon", "MultiPolygon")


def _extract_geometry(value: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(value, dict):
        return None
    if value.get("type") == "Feature":
        return value.get("geometry")
    return value


def area_m2(geometry: Any) -> float:
    """
    Geodesic area in square meters.

    Args:
        geometry: A GeoJSON geometry, or a GeoJSON Feature wrapping one.

    Returns:
        Area for Polygon/MultiPolygon, 0.0 for every other input.
    """
    try:
        geom_json = _extract_geometry(geometry)
        if not geom_json or geom_json.get("type") not in _AREA_KINDS:
            return 0.0

        geom = shape(geom_json)
        if geom.is_empty:
            return 0.0

        parts = [geom] if geom.geom_type == "Polygon" else list(geom.geoms)
        total = 0.0
        for part in parts:
            # counter-clockwise shell, clockwise holes: holes come out negative
            area, _ = _GEOD.geometry_area_perimeter(orient(part, sign=1.0))
            total += area
        return abs(total)
    except Exception as exc:
        logger.debug("Area computation failed, reporting 0: %s", exc)
        return 0.0


def area_ha(geometry: Any) -> float:
    """Geodesic area in hectares; never raises."""
    return area_m2(geometry) / SQUARE_METERS_PER_HECTARE
