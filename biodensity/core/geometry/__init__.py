"""
Geometry Kernel

Pure, stateless geometry primitives used by the aggregators.
"""

from biodensity.core.geometry.kernel import (
    NearestPoint,
    distance_point_to_segment,
    haversine_km,
    nearest_point_on_polyline,
    point_in_polygon,
    polygon_area,
    ring_area_km2,
)

__all__ = [
    "NearestPoint",
    "distance_point_to_segment",
    "haversine_km",
    "nearest_point_on_polyline",
    "point_in_polygon",
    "polygon_area",
    "ring_area_km2",
]
