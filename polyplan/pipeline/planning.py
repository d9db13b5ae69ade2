"""Planning — one call from land boundary to labelled structures.

``plan_layout`` validates its inputs, solves orientations and sizes, runs
the placement search and expansion pass, then assembles the result with
coverage, warnings and run metadata.  A run is synchronous and owns all
of its state; concurrent runs share nothing.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable

from shapely.geometry import Polygon

from polyplan.geometry import JOIN_MITRE, buffer_polygon, polygon_from_points
from polyplan.pipeline.config import PLANNING_RULES

from .land.models import Coordinate, ExclusionZone, LandArea, PlanningConfig
from .land.validation import (
    PlanningInputError, validate_boundary, validate_config, validate_exclusions,
)
from .placer import (
    Structure,
    assemble_structures,
    expand_structures,
    generate_candidate_sizes,
    place_structures,
    solve_orientations,
)


log = logging.getLogger(__name__)

NO_PLACEMENT_MESSAGE = (
    "No polyhouses could be placed. The land may be too small or too "
    "irregular for the configured structure sizes."
)


@dataclass
class PlanningResult:
    """Outcome of one planning run."""

    land: LandArea
    config: PlanningConfig
    structures: list[Structure] = field(default_factory=list)
    coverage: float = 0.0            # footprint area / land area
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.errors


def _as_land(land: LandArea | Iterable[Coordinate]) -> LandArea:
    if isinstance(land, LandArea):
        points = list(land.boundary)
    else:
        points = [c if isinstance(c, Coordinate) else Coordinate(*c) for c in land]
    errors = validate_boundary(points)
    if errors:
        raise PlanningInputError(errors)
    return land if isinstance(land, LandArea) else LandArea.from_boundary(points)


def _local_zone(land: LandArea, zone: ExclusionZone) -> Polygon:
    return polygon_from_points([land.frame.to_local(c.lat, c.lng) for c in zone.coordinates])


def plan_layout(
    land: LandArea | Iterable[Coordinate],
    config: PlanningConfig | None = None,
    exclusions: list[ExclusionZone] | None = None,
    *,
    progress: Callable[[float], None] | None = None,
) -> PlanningResult:
    """Plan polyhouse structures on ``land``.

    ``land`` is a LandArea or a sequence of Coordinates (or ``(lat, lng)``
    pairs).  ``exclusions`` are merged with ``config.exclusions``.

    Raises PlanningInputError before any search on malformed input.  An
    empty layout is not an exception: the result carries an error message
    and zero coverage.
    """
    started = time.perf_counter()
    config = config or PlanningConfig()
    land = _as_land(land)
    zones = list(config.exclusions) + list(exclusions or [])

    errors = validate_config(config) + validate_exclusions(list(exclusions or []))
    if errors:
        raise PlanningInputError(errors)

    def report(fraction: float) -> None:
        if progress is not None:
            progress(min(1.0, max(0.0, fraction)))

    log.info("Planning '%s': %.0f m² (%.2f ha), %d exclusion zone(s)",
             land.name or "land", land.area_m2, land.area_m2 / 10_000, len(zones))

    # ── 1. Orientations and sizes ──────────────────────────────────
    latitude = config.latitude if config.latitude is not None else land.centroid.lat
    orientations = solve_orientations(
        latitude, config.strategy,
        solar_enabled=config.solar_orientation,
        deviation_override=config.allowed_deviation_deg,
    )
    sizes = generate_candidate_sizes(config)
    log.info("%d candidate sizes (largest %.0fx%.0fm)", len(sizes),
             sizes[0].gable if sizes else 0, sizes[0].gutter if sizes else 0)

    # ── 2. Usable area ─────────────────────────────────────────────
    usable = land.local_polygon
    if config.safety_buffer > 0:
        usable = buffer_polygon(usable, -config.safety_buffer, join=JOIN_MITRE)
    zone_polys = [_local_zone(land, z) for z in zones]

    lats = [c.lat for c in land.boundary]
    lngs = [c.lng for c in land.boundary]
    geo_bounds = (min(lats), min(lngs), max(lats), max(lngs))

    # ── 3. Search ──────────────────────────────────────────────────
    placements, stats = place_structures(
        usable, land.area_m2, geo_bounds, land.frame, orientations, sizes,
        config, zone_polys,
        progress=lambda f: report(0.85 * f),
    )

    # ── 4. Expansion ───────────────────────────────────────────────
    placements, grown = expand_structures(placements, usable, config, zone_polys)
    report(0.95)

    # ── 5. Assembly ────────────────────────────────────────────────
    structures = assemble_structures(placements, land.frame, config)
    total_area = sum(s.area for s in structures)
    inner_area = sum(s.inner_area for s in structures)
    coverage = total_area / land.area_m2 if land.area_m2 > 0 else 0.0

    result = PlanningResult(land=land, config=config, structures=structures,
                            coverage=coverage)
    if not structures:
        result.errors.append(NO_PLACEMENT_MESSAGE)
    elif coverage < PLANNING_RULES.low_coverage_warning:
        result.warnings.append(
            f"Low space utilization ({coverage:.1%}). The land shape, exclusion "
            f"zones or size limits leave little room for structures.")
    if stats.budget_exhausted:
        result.warnings.append(
            "Search budget exhausted; the layout covers only the part of the "
            "land scanned before the limit.")

    elapsed = time.perf_counter() - started
    result.metadata = {
        "number_of_structures": len(structures),
        "total_inner_area": inner_area,
        "total_footprint_area": total_area,
        "utilization_percentage": coverage * 100,
        "computation_time": elapsed,
        "latitude": latitude,
        "orientations": orientations,
        "candidate_sizes": len(sizes),
        "grid_spacing": stats.grid_spacing_m,
        "grid_points": stats.grid_points,
        "candidate_evaluations": stats.evaluations,
        "geometry_failures": stats.geometry_failures,
        "passes": list(stats.passes),
        "expanded_structures": grown,
        "budget_exhausted": stats.budget_exhausted,
        "exclusions_applied": [z.name for z in zones],
    }
    report(1.0)
    log.info("Planned %d structure(s), %.1f%% coverage in %.2fs",
             len(structures), coverage * 100, elapsed)
    return result
