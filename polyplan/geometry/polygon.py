"""Polygon primitives over shapely, in the local metric frame.

This is the narrow capability surface the planner relies on: polygon
construction, containment, interior overlap, buffering, hulls, areas and
point distances.  Swapping the geometry backend means reimplementing
these functions only.
"""

from __future__ import annotations

import math
from typing import Sequence

from shapely import affinity
from shapely.geometry import MultiPoint, Point, Polygon, box as shapely_box
from shapely.geometry.base import BaseGeometry
from shapely.validation import explain_validity

XY = tuple[float, float]

# Mitre joins keep a buffered rectangle rectangular.
JOIN_MITRE = "mitre"
JOIN_ROUND = "round"


def polygon_from_points(points: Sequence[XY]) -> Polygon:
    """Build a polygon from a ring; a repeated closing vertex is fine."""
    return Polygon(points)


def ring_problems(points: Sequence[XY]) -> list[str]:
    """Describe why a ring is not a usable simple polygon (empty = fine)."""
    problems: list[str] = []
    distinct = {tuple(p) for p in points}
    if len(distinct) < 3:
        problems.append(f"Ring has only {len(distinct)} distinct vertices — need at least 3.")
        return problems
    poly = Polygon(points)
    if not poly.is_valid:
        reason = explain_validity(poly)
        if "Self-intersection" in reason:
            problems.append(f"Ring is self-intersecting ({reason}).")
        else:
            problems.append(f"Ring is not a valid polygon ({reason}).")
    elif poly.area <= 0:
        problems.append("Ring encloses zero area.")
    return problems


def rotated_rect(cx: float, cy: float, length: float, width: float, rotation_deg: float) -> Polygon:
    """Rectangle of ``length`` (along the rotated x-axis) by ``width``,
    centred on ``(cx, cy)`` and rotated counter-clockwise from east."""
    rect = shapely_box(cx - length / 2, cy - width / 2, cx + length / 2, cy + width / 2)
    if rotation_deg % 360 == 0:
        return rect
    return affinity.rotate(rect, rotation_deg, origin=(cx, cy))


def buffer_polygon(poly: BaseGeometry, distance: float, *, join: str = JOIN_ROUND) -> BaseGeometry:
    """Grow (or, with a negative distance, shrink) a polygon."""
    if distance == 0:
        return poly
    return poly.buffer(distance, quad_segs=8, join_style=join)


def convex_hull(points: Sequence[XY]) -> BaseGeometry:
    return MultiPoint(points).convex_hull


def rect_half_extents(length: float, width: float, rotation_deg: float) -> tuple[float, float]:
    """Half-width and half-height of a rotated rectangle's bounding box."""
    rad = math.radians(rotation_deg)
    c, s = abs(math.cos(rad)), abs(math.sin(rad))
    hl, hw = length / 2, width / 2
    return (hl * c + hw * s, hl * s + hw * c)


def rotate_offset(x: float, y: float, rotation_deg: float) -> XY:
    """Rotate a frame-local offset counter-clockwise by ``rotation_deg``."""
    rad = math.radians(rotation_deg)
    cos_r, sin_r = math.cos(rad), math.sin(rad)
    return (x * cos_r - y * sin_r, x * sin_r + y * cos_r)


def interiors_intersect(a: BaseGeometry, b: BaseGeometry) -> bool:
    """True if two polygons share interior area (touching is allowed)."""
    if not a.intersects(b):
        return False
    return not a.touches(b)


def polygon_within(inner: BaseGeometry, outer) -> bool:
    """Containment test; ``outer`` may be a prepared geometry."""
    return outer.contains(inner)


def point_in_polygon(x: float, y: float, poly) -> bool:
    """Strict interior test; ``poly`` may be a prepared geometry."""
    return poly.contains(Point(x, y))


def point_distance(a: XY, b: XY) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def equivalent_radius(area: float) -> float:
    """Radius of the circle with the same area."""
    return math.sqrt(max(area, 0.0) / math.pi)
