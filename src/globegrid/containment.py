"""Even-odd point-in-polygon tests over (lon, lat) rings."""

from __future__ import annotations

from .models import MULTI_POLYGON, POLYGON, Geometry, Polygon, Ring


def point_in_ring(lon: float, lat: float, ring: Ring) -> bool:
    """Cast a ray east from the point and count edge crossings."""
    inside = False
    n = len(ring)
    j = n - 1
    for i in range(n):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]
        j = i
        # Horizontal edges never cross; test before dividing by yj - yi.
        if yi == yj:
            continue
        if (lat > yi) == (lat > yj):
            continue
        if lon < xi + (xj - xi) / (yj - yi) * (lat - yi):
            inside = not inside
    return inside


def point_in_polygon(lon: float, lat: float, polygon: Polygon) -> bool:
    """Outer ring minus holes. Nested holes are not modelled."""
    if not polygon:
        return False
    outer, *holes = polygon
    if not point_in_ring(lon, lat, outer):
        return False
    for hole in holes:
        if point_in_ring(lon, lat, hole):
            return False
    return True


def point_in_feature(lon: float, lat: float, geometry: Geometry) -> bool:
    if geometry.type == POLYGON:
        return point_in_polygon(lon, lat, geometry.coordinates or [])
    if geometry.type == MULTI_POLYGON:
        for polygon in geometry.coordinates or []:
            if point_in_polygon(lon, lat, polygon):
                return True
    return False
