"""Occupied space and candidate validation.

The validator runs the four placement checks in a fixed order:

  a. the buffered footprint lies within the (usable) land
  b. it does not overlap any occupied keepout
  c. centre spacing against each placed structure (corridor heuristic)
  d. it does not intersect an exclusion zone

Each check has a cheap circle / bounding-box pre-filter that may decide
it early.  A pre-filter only ever short-circuits to the answer the exact
shapely predicate would give; anything it cannot decide goes to shapely.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator

from shapely.errors import ShapelyError
from shapely.geometry import Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from shapely.prepared import prep as shapely_prep

from polyplan.geometry import (
    JOIN_MITRE, JOIN_ROUND,
    buffer_polygon, equivalent_radius, interiors_intersect, point_distance,
    point_in_polygon, polygon_within,
    rect_half_extents, rotated_rect,
)
from polyplan.pipeline.config import PLANNING_RULES
from polyplan.pipeline.land.models import PlanningConfig

from .models import Candidate, Placement


log = logging.getLogger(__name__)

_EPS = 1e-6


def footprint_polygon(x: float, y: float, gable: float, gutter: float,
                      rotation: float, gutter_width: float) -> Polygon:
    """Block-grid rectangle buffered by the gutter width (mitre join)."""
    inner = rotated_rect(x, y, gable, gutter, rotation)
    return buffer_polygon(inner, gutter_width, join=JOIN_MITRE)


# ── Occupied set ───────────────────────────────────────────────────


@dataclass
class _Occupied:
    placement: Placement
    keepout: BaseGeometry      # footprint grown by the corridor gap
    radius: float              # equivalent radius of the footprint
    inner_radius: float        # a disc of this radius lies inside the keepout
    outer_radius: float        # the keepout lies inside a disc of this radius


class OccupiedSet:
    """Footprints accepted so far in one run, each inflated by the gap."""

    def __init__(self, gap: float) -> None:
        self.gap = max(gap, 0.0)
        self._entries: list[_Occupied] = []
        self.footprint_area = 0.0

    def _entry(self, placement: Placement, gutter_width: float) -> _Occupied:
        length = placement.gable + 2 * gutter_width
        width = placement.gutter + 2 * gutter_width
        hl, hw = length / 2, width / 2
        return _Occupied(
            placement=placement,
            keepout=buffer_polygon(placement.footprint, self.gap, join=JOIN_ROUND),
            radius=equivalent_radius(placement.footprint_area),
            inner_radius=max(min(hl, hw + self.gap), min(hl + self.gap, hw)),
            outer_radius=math.hypot(hl, hw) + self.gap,
        )

    def add(self, placement: Placement, gutter_width: float) -> None:
        self._entries.append(self._entry(placement, gutter_width))
        self.footprint_area += placement.footprint_area

    def replace(self, old: Placement, new: Placement, gutter_width: float) -> None:
        """Swap an entry in place, keeping placement order."""
        for i, e in enumerate(self._entries):
            if e.placement is old:
                self._entries[i] = self._entry(new, gutter_width)
                self.footprint_area += new.footprint_area - old.footprint_area
                return
        raise KeyError("placement is not in the occupied set")

    def clear(self) -> None:
        self._entries.clear()
        self.footprint_area = 0.0

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[_Occupied]:
        return iter(self._entries)

    @property
    def placements(self) -> list[Placement]:
        return [e.placement for e in self._entries]

    def contains_point(self, x: float, y: float) -> bool:
        """True if ``(x, y)`` lies inside an occupied footprint."""
        pt = None
        for e in self._entries:
            d = math.hypot(x - e.placement.x, y - e.placement.y)
            if d > e.outer_radius:
                continue
            if pt is None:
                pt = Point(x, y)
            if e.placement.footprint.contains(pt):
                return True
        return False


# ── Validator ──────────────────────────────────────────────────────


@dataclass
class PointContext:
    """Distances from one grid point, computed once and shared by every
    candidate tried there."""

    x: float
    y: float
    boundary_clearance: float
    exclusion_clearance: float


class PlacementValidator:
    """Validates candidates against the land, the occupied set and the
    exclusion zones.  Counts exact evaluations for the search budget."""

    def __init__(
        self,
        usable: BaseGeometry,
        config: PlanningConfig,
        exclusions: list[Polygon] | None = None,
        *,
        max_evaluations: int | None = None,
    ) -> None:
        self.config = config
        self.usable = usable
        self._usable_prepared = shapely_prep(usable)
        self._usable_boundary = usable.boundary
        self._bounds = usable.bounds

        zones = [z for z in (exclusions or []) if not z.is_empty]
        self._exclusions = unary_union(zones) if zones else None
        self._exclusions_prepared = (
            shapely_prep(self._exclusions) if self._exclusions is not None else None)

        self.max_evaluations = max_evaluations
        self.evaluations = 0
        self.geometry_failures = 0

    @property
    def exhausted(self) -> bool:
        return (self.max_evaluations is not None
                and self.evaluations >= self.max_evaluations)

    def point_context(self, x: float, y: float) -> PointContext:
        """Clearances from a point inside the usable land."""
        pt = Point(x, y)
        excl = (self._exclusions.distance(pt)
                if self._exclusions is not None else math.inf)
        return PointContext(
            x=x, y=y,
            boundary_clearance=self._usable_boundary.distance(pt),
            exclusion_clearance=excl,
        )

    def contains_point(self, x: float, y: float) -> bool:
        return point_in_polygon(x, y, self._usable_prepared)

    def check(
        self,
        cand: Candidate,
        ctx: PointContext,
        occupied: OccupiedSet,
        *,
        skip: Placement | None = None,
    ) -> Polygon | None:
        """Return the candidate's footprint if it passes every check.

        ``ctx`` must describe the candidate's centre.  ``skip`` excludes
        one occupied entry (the structure being expanded).
        """
        gw = self.config.gutter_width
        length, width = cand.gable + 2 * gw, cand.gutter + 2 * gw
        r_in = min(length, width) / 2
        r_out = math.hypot(length, width) / 2

        # a. bounding box and inscribed-circle rejection
        hx, hy = rect_half_extents(length, width, cand.rotation)
        minx, miny, maxx, maxy = self._bounds
        if (cand.x - hx < minx - _EPS or cand.x + hx > maxx + _EPS
                or cand.y - hy < miny - _EPS or cand.y + hy > maxy + _EPS):
            return None
        if ctx.boundary_clearance < r_in - _EPS:
            return None
        land_ok = ctx.boundary_clearance > r_out + _EPS

        # d. exclusion circle rejection (exact test below)
        if ctx.exclusion_clearance < r_in - _EPS:
            return None
        exclusion_ok = ctx.exclusion_clearance > r_out + _EPS

        # c. corridor heuristic, and b. circle tests against the keepouts
        radius = equivalent_radius(length * width)
        gap = occupied.gap
        ambiguous: list[_Occupied] = []
        for e in occupied:
            if e.placement is skip:
                continue
            d = point_distance((cand.x, cand.y), (e.placement.x, e.placement.y))
            if gap > PLANNING_RULES.gap_check_min_m:
                if d < PLANNING_RULES.gap_tolerance * (radius + e.radius + gap):
                    return None
            if d < r_in + e.inner_radius - _EPS:
                return None
            if d <= r_out + e.outer_radius + _EPS:
                ambiguous.append(e)

        # Exact geometry
        if self.exhausted:
            return None
        self.evaluations += 1
        try:
            footprint = footprint_polygon(
                cand.x, cand.y, cand.gable, cand.gutter, cand.rotation, gw)
            if not land_ok and not polygon_within(footprint, self._usable_prepared):
                return None
            for e in ambiguous:
                if interiors_intersect(footprint, e.keepout):
                    return None
            if not exclusion_ok and self._exclusions_prepared is not None:
                if self._exclusions_prepared.intersects(footprint):
                    return None
        except ShapelyError as exc:
            self.geometry_failures += 1
            log.debug("Geometry failure for %.0fx%.0f at (%.1f, %.1f) rot %.0f°: %s",
                      cand.gable, cand.gutter, cand.x, cand.y, cand.rotation, exc)
            return None
        return footprint
