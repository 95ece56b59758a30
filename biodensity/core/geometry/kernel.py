"""
Geometry Kernel

Containment, distance and area primitives over (lon, lat) coordinates.

Conventions:
- Containment is planar: (lon, lat) is treated as a 2D plane, which is
  accurate enough for state-sized regions. Points exactly on a ring edge or
  vertex are contained (closed-set semantics); this includes hole edges.
- Distances and areas are geodesic on a sphere of radius EARTH_RADIUS_KM,
  so densities (obs/km²) and buffer distances (km) share one earth model.

Malformed input (empty polygons, short or unclosed rings, polylines with
fewer than two vertices, non-finite coordinates) raises InvalidGeometry.
polygon_area returns 0 instead for an outer ring with fewer than three
distinct vertices.
"""

from __future__ import annotations

import math
from typing import List, NamedTuple, Sequence, Tuple, Union

from biodensity.core.models import Coordinate, Polygon, Polyline
from biodensity.utils.constants import EARTH_RADIUS_KM
from biodensity.utils.error_handling import InvalidGeometry


class NearestPoint(NamedTuple):
    """Closest approach of a point to a polyline."""
    distance_km: float
    segment_index: int


# ---------- validation helpers ----------

def _coord(value, what: str = "coordinate") -> Tuple[float, float]:
    """Return value as a finite (x, y) float pair or raise InvalidGeometry."""
    try:
        x, y = float(value[0]), float(value[1])
    except (TypeError, IndexError, ValueError):
        raise InvalidGeometry(f"Malformed {what}: {value!r}")
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidGeometry(f"Non-finite {what}: {value!r}")
    return x, y


def _closed_ring(ring: Sequence[Coordinate], index: int) -> List[Tuple[float, float]]:
    coords = [_coord(c, f"ring {index} vertex") for c in ring]
    if coords and coords[0] != coords[-1]:
        raise InvalidGeometry(f"Ring {index} is not closed")
    return coords


def _polygon_rings(polygon: Polygon) -> List[List[Tuple[float, float]]]:
    """Validated rings for containment: every ring closed with at least 4 coordinates."""
    if not polygon.rings:
        raise InvalidGeometry("Polygon has no rings")
    rings = []
    for i, ring in enumerate(polygon.rings):
        if len(ring) < 4:
            raise InvalidGeometry(f"Ring {i} has {len(ring)} coordinates; at least 4 required")
        rings.append(_closed_ring(ring, i))
    return rings


# ---------- containment ----------

def _on_boundary(x: float, y: float, ring: List[Tuple[float, float]]) -> bool:
    for (x1, y1), (x2, y2) in zip(ring, ring[1:]):
        cross = (x2 - x1) * (y - y1) - (y2 - y1) * (x - x1)
        if cross != 0:
            continue
        if min(x1, x2) <= x <= max(x1, x2) and min(y1, y2) <= y <= max(y1, y2):
            return True
    return False


def _ray_cast(x: float, y: float, ring: List[Tuple[float, float]]) -> bool:
    """Even-odd test with a ray towards +x. Horizontal edges never toggle."""
    inside = False
    for (x1, y1), (x2, y2) in zip(ring, ring[1:]):
        if (y1 > y) != (y2 > y):
            x_cross = x1 + (y - y1) * (x2 - x1) / (y2 - y1)
            if x < x_cross:
                inside = not inside
    return inside


def point_in_polygon(point: Coordinate, polygon: Polygon) -> bool:
    """
    Check whether a point lies inside a polygon's outer ring and outside its holes.

    Args:
        point: (lon, lat) to test
        polygon: Polygon with closed rings

    Returns:
        True if contained (boundary included), False otherwise

    Raises:
        InvalidGeometry: If the point or any ring is malformed
    """
    x, y = _coord(point, "point")
    rings = _polygon_rings(polygon)

    outer = rings[0]
    if _on_boundary(x, y, outer):
        return True
    if not _ray_cast(x, y, outer):
        return False

    for hole in rings[1:]:
        if _on_boundary(x, y, hole):
            return True
        if _ray_cast(x, y, hole):
            return False
    return True


# ---------- distance ----------

def _central_angle(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Great-circle angle between two points in radians (haversine form)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = phi2 - phi1
    dlmb = math.radians(lon2 - lon1)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * math.asin(math.sqrt(min(1.0, max(0.0, h))))


def _initial_bearing(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlmb = math.radians(lon2 - lon1)
    y = math.sin(dlmb) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlmb)
    return math.atan2(y, x)


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two (lon, lat) coordinates in kilometers."""
    lon1, lat1 = _coord(a)
    lon2, lat2 = _coord(b)
    return EARTH_RADIUS_KM * _central_angle(lon1, lat1, lon2, lat2)


def distance_point_to_segment(point: Coordinate, a: Coordinate, b: Coordinate) -> float:
    """
    Great-circle distance from a point to the segment [a, b] in kilometers.

    The point is projected onto the great circle through a and b
    (cross-track / along-track decomposition); when the foot of the
    perpendicular falls outside the segment the nearer endpoint is used.
    A degenerate segment (a == b) is a point-to-point distance.

    Raises:
        InvalidGeometry: If any coordinate is malformed or non-finite
    """
    px, py = _coord(point, "point")
    ax, ay = _coord(a, "segment start")
    bx, by = _coord(b, "segment end")

    d_ap = _central_angle(ax, ay, px, py)
    d_ab = _central_angle(ax, ay, bx, by)
    if d_ab == 0.0 or d_ap == 0.0:
        return EARTH_RADIUS_KM * d_ap

    d_bp = _central_angle(bx, by, px, py)
    delta = _initial_bearing(ax, ay, px, py) - _initial_bearing(ax, ay, bx, by)

    along = math.atan2(math.sin(d_ap) * math.cos(delta), math.cos(d_ap))
    if along <= 0.0:
        return EARTH_RADIUS_KM * d_ap
    if along >= d_ab:
        return EARTH_RADIUS_KM * d_bp

    cross = abs(math.asin(max(-1.0, min(1.0, math.sin(d_ap) * math.sin(delta)))))
    return EARTH_RADIUS_KM * min(cross, d_ap, d_bp)


def nearest_point_on_polyline(
    point: Coordinate,
    polyline: Union[Polyline, Sequence[Coordinate]],
) -> NearestPoint:
    """
    Find the closest segment of a polyline to a point.

    Args:
        point: (lon, lat) to measure from
        polyline: Polyline or plain vertex sequence

    Returns:
        NearestPoint(distance_km, segment_index); ties go to the lowest index

    Raises:
        InvalidGeometry: If the polyline has fewer than 2 vertices or bad coordinates
    """
    coords = polyline.coordinates if isinstance(polyline, Polyline) else tuple(polyline)
    if len(coords) < 2:
        raise InvalidGeometry(f"Polyline has {len(coords)} vertices; at least 2 required")

    best_distance = math.inf
    best_index = 0
    for i in range(len(coords) - 1):
        d = distance_point_to_segment(point, coords[i], coords[i + 1])
        if d < best_distance:
            best_distance = d
            best_index = i
    return NearestPoint(best_distance, best_index)


# ---------- area ----------

def ring_area_km2(ring: Sequence[Coordinate]) -> float:
    """
    Unsigned spherical area of a closed ring in km².

    Uses the spherical-excess line integral
    A = R²/2 · Σ (λ[i+1] − λ[i−1]) · sin φ[i] over the open vertex list.
    Rings with fewer than 3 distinct vertices have zero area.

    Raises:
        InvalidGeometry: If the ring is unclosed or has non-finite coordinates
    """
    coords = _closed_ring(ring, 0)
    if len(set(coords)) < 3:
        return 0.0

    vertices = coords[:-1]
    n = len(vertices)
    total = 0.0
    for i in range(n):
        lon_prev = vertices[i - 1][0]
        lon_next = vertices[(i + 1) % n][0]
        lat = vertices[i][1]
        total += math.radians(lon_next - lon_prev) * math.sin(math.radians(lat))
    return abs(total) * EARTH_RADIUS_KM * EARTH_RADIUS_KM / 2.0


def polygon_area(polygon: Polygon) -> float:
    """
    Geodesic area of a polygon in km²: outer ring minus holes, never negative.

    Returns 0 for a degenerate outer ring (fewer than 3 distinct vertices).

    Raises:
        InvalidGeometry: If the polygon has no rings, or a ring is unclosed or non-finite
    """
    if not polygon.rings:
        raise InvalidGeometry("Polygon has no rings")

    outer = ring_area_km2(polygon.outer)
    if outer == 0.0:
        return 0.0
    holes = sum(ring_area_km2(hole) for hole in polygon.holes)
    return max(0.0, outer - holes)
