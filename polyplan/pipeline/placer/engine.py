"""Placement search — greedy grid scan, first valid candidate wins.

Grid points are visited row by row (south to north, west to east).  At
each point, orientations are tried in ascending order and, for each,
candidate sizes largest first; the first candidate that passes the
validator is accepted and the scan moves to the next point.  The result
is order-dependent and not optimal; it is fast and deterministic.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Iterator

from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

from polyplan.geometry import GeoFrame
from polyplan.pipeline.config import PLANNING_RULES, PlanningRules
from polyplan.pipeline.land.models import PlanningConfig

from .models import Candidate, CandidateSize, Placement, SearchStats
from .occupancy import OccupiedSet, PlacementValidator
from .sizes import sizes_at_least


log = logging.getLogger(__name__)

ProgressFn = Callable[[float], None]


# ── Grid ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ScanGrid:
    """Cell-centre grid over the land's geographic bounding box."""

    min_lat: float
    min_lng: float
    lat_step: float
    lng_step: float
    rows: int
    cols: int
    spacing_m: float

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def row_points(self, row: int) -> Iterator[tuple[float, float]]:
        lat = self.min_lat + (row + 0.5) * self.lat_step
        for col in range(self.cols):
            yield lat, self.min_lng + (col + 0.5) * self.lng_step


def build_grid(
    bounds: tuple[float, float, float, float],
    frame: GeoFrame,
    spacing_m: float,
    max_points: int | None = None,
) -> ScanGrid:
    """Lay a grid over ``(min_lat, min_lng, max_lat, max_lng)``.

    The spacing is widened until ``rows × cols`` fits in ``max_points``.
    """
    min_lat, min_lng, max_lat, max_lng = bounds
    mid_lat = (min_lat + max_lat) / 2
    spacing = spacing_m
    while True:
        lat_step, lng_step = frame.degree_steps(spacing, mid_lat)
        rows = max(1, math.ceil((max_lat - min_lat) / lat_step))
        cols = max(1, math.ceil((max_lng - min_lng) / lng_step))
        if not max_points or rows * cols <= max_points:
            break
        spacing *= max(1.05, math.sqrt(rows * cols / max_points))
    if spacing != spacing_m:
        log.info("Grid spacing widened %.1fm → %.1fm to stay within %d points",
                 spacing_m, spacing, max_points)
    return ScanGrid(min_lat, min_lng, lat_step, lng_step, rows, cols, spacing)


# ── Search ─────────────────────────────────────────────────────────


class _Budget:
    def __init__(self, validator: PlacementValidator, time_budget_s: float | None) -> None:
        self.validator = validator
        self.deadline = (time.monotonic() + time_budget_s) if time_budget_s else None

    def exhausted(self) -> bool:
        if self.validator.exhausted:
            return True
        return self.deadline is not None and time.monotonic() > self.deadline


def _scan(
    grid: ScanGrid,
    frame: GeoFrame,
    orientations: list[float],
    sizes: list[CandidateSize],
    validator: PlacementValidator,
    occupied: OccupiedSet,
    budget: _Budget,
    stats: SearchStats,
    *,
    gutter_width: float,
    stop: Callable[[], bool],
    progress: ProgressFn | None = None,
) -> list[Placement]:
    """One pass over the grid.  Returns the placements it accepted."""
    accepted: list[Placement] = []
    for row in range(grid.rows):
        if progress is not None:
            progress(row / grid.rows)
        for lat, lng in grid.row_points(row):
            if stop():
                return accepted
            if budget.exhausted():
                stats.budget_exhausted = True
                return accepted

            x, y = frame.to_local(lat, lng)
            if not validator.contains_point(x, y):
                continue
            stats.points_inside += 1
            if occupied.contains_point(x, y):
                continue
            ctx = validator.point_context(x, y)

            placed = None
            for rotation in orientations:
                for size in sizes:
                    cand = Candidate(gable=size.gable, gutter=size.gutter,
                                     rotation=rotation, x=x, y=y)
                    footprint = validator.check(cand, ctx, occupied)
                    if footprint is not None:
                        placed = Placement(x=x, y=y, rotation=rotation,
                                           gable=size.gable, gutter=size.gutter,
                                           footprint=footprint)
                        break
                if placed is not None:
                    break

            if placed is not None:
                occupied.add(placed, gutter_width)
                accepted.append(placed)
                log.debug("Placed %.0fx%.0fm at (%.1f, %.1f) rot %.0f°",
                          placed.gable, placed.gutter, x, y, placed.rotation)
    if progress is not None:
        progress(1.0)
    return accepted


def place_structures(
    usable: BaseGeometry,
    land_area_m2: float,
    geo_bounds: tuple[float, float, float, float],
    frame: GeoFrame,
    orientations: list[float],
    sizes: list[CandidateSize],
    config: PlanningConfig,
    exclusions: list[Polygon] | None = None,
    *,
    rules: PlanningRules = PLANNING_RULES,
    progress: ProgressFn | None = None,
) -> tuple[list[Placement], SearchStats]:
    """Run the placement search over ``usable`` (local metres).

    ``geo_bounds`` is ``(min_lat, min_lng, max_lat, max_lng)`` of the land.
    Coverage is measured against ``land_area_m2``, the full plot.

    Returns the accepted placements in placement order, plus search
    counters.  An empty list is a valid outcome.
    """
    stats = SearchStats()
    if not orientations or not sizes or usable.is_empty or land_area_m2 <= 0:
        log.info("Nothing to search (orientations=%d, sizes=%d, usable area %.1f m²)",
                 len(orientations), len(sizes), usable.area)
        return [], stats

    grid = build_grid(geo_bounds, frame, rules.grid_spacing_for(land_area_m2),
                      config.max_grid_points)
    stats.grid_spacing_m = grid.spacing_m
    stats.grid_points = grid.size
    log.info("Grid: %d × %d = %d points at %.1fm spacing, %d orientations, %d sizes",
             grid.cols, grid.rows, grid.size, grid.spacing_m,
             len(orientations), len(sizes))

    validator = PlacementValidator(usable, config, exclusions,
                                   max_evaluations=config.max_candidate_evaluations)
    occupied = OccupiedSet(config.polyhouse_gap)
    budget = _Budget(validator, config.time_budget_s)

    def coverage() -> float:
        return occupied.footprint_area / land_area_m2

    def run_pass(name: str, pass_sizes: list[CandidateSize],
                 stop: Callable[[], bool], lo: float, hi: float) -> int:
        if not pass_sizes:
            return 0
        sub = None
        if progress is not None:
            sub = lambda f: progress(lo + (hi - lo) * f)  # noqa: E731
        before = validator.evaluations
        accepted = _scan(grid, frame, orientations, pass_sizes, validator,
                         occupied, budget, stats, gutter_width=config.gutter_width,
                         stop=stop, progress=sub)
        stats.passes.append({
            "name": name,
            "sizes": len(pass_sizes),
            "placed": len(accepted),
            "evaluations": validator.evaluations - before,
        })
        log.info("%s: placed %d (total %d, coverage %.1f%%)",
                 name, len(accepted), len(occupied), coverage() * 100)
        return len(accepted)

    largest = sizes[0].area
    if land_area_m2 >= config.max_structure_area:
        # ── 1. Large structures ────────────────────────────────────
        run_pass("Pass 1 (large)",
                 sizes_at_least(sizes, rules.large_size_ratio * largest),
                 stop=lambda: False, lo=0.0, hi=0.6)

        # ── 2. Gap filling ─────────────────────────────────────────
        fillers = 0
        span = 0.4 / max(1, len(rules.gap_fill_ratios))
        for i, ratio in enumerate(rules.gap_fill_ratios):
            if (stats.budget_exhausted or coverage() >= rules.target_coverage
                    or fillers >= rules.max_gap_fillers):
                break
            limit = len(occupied) + rules.max_gap_fillers - fillers

            def done(limit: int = limit) -> bool:
                return len(occupied) >= limit or coverage() >= rules.target_coverage

            fillers += run_pass(f"Pass {i + 2} (gap fill ≥{ratio:.0%})",
                                sizes_at_least(sizes, ratio * largest),
                                stop=done, lo=0.6 + i * span, hi=0.6 + (i + 1) * span)
    else:
        run_pass("Single pass", sizes, stop=lambda: False, lo=0.0, hi=1.0)

    stats.evaluations = validator.evaluations
    stats.geometry_failures = validator.geometry_failures
    if stats.budget_exhausted:
        log.warning("Search budget exhausted after %d evaluations; returning %d placements",
                    stats.evaluations, len(occupied))
    return occupied.placements, stats
