"""Geometry adapter — local metric frame and shapely polygon primitives."""

from .frame import GeoFrame
from .polygon import (
    JOIN_MITRE,
    JOIN_ROUND,
    polygon_from_points,
    ring_problems,
    rotated_rect,
    buffer_polygon,
    convex_hull,
    rect_half_extents,
    rotate_offset,
    interiors_intersect,
    polygon_within,
    point_in_polygon,
    point_distance,
    equivalent_radius,
)

__all__ = [
    "GeoFrame",
    "JOIN_MITRE", "JOIN_ROUND",
    "polygon_from_points", "ring_problems", "rotated_rect", "buffer_polygon",
    "convex_hull", "rect_half_extents", "rotate_offset",
    "interiors_intersect", "polygon_within", "point_in_polygon",
    "point_distance", "equivalent_radius",
]
