"""Expansion pass — grow placed structures by whole bays into free space.

Centre and rotation stay fixed; each structure tries every combination
of extra gable and gutter bays and keeps the largest valid inner area.
Structures are processed in placement order, so structure ``i`` is
validated against ``0..i-1`` as already expanded and ``i+1..n`` as
originally placed.
"""

from __future__ import annotations

import logging

from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

from polyplan.pipeline.config import PLANNING_RULES, PlanningRules
from polyplan.pipeline.land.models import PlanningConfig

from .models import Candidate, Placement
from .occupancy import OccupiedSet, PlacementValidator


log = logging.getLogger(__name__)


def _expand_one(
    placement: Placement,
    validator: PlacementValidator,
    occupied: OccupiedSet,
    config: PlanningConfig,
    max_bays: int,
) -> Placement:
    bw, bh = config.block_width, config.block_height
    gable_bays = round(placement.gable / bw)
    gutter_bays = round(placement.gutter / bh)
    ctx = validator.point_context(placement.x, placement.y)

    best = placement
    best_area = placement.inner_area
    for add_gable in range(max_bays + 1):
        for add_gutter in range(max_bays + 1):
            if add_gable == 0 and add_gutter == 0:
                continue
            gable = (gable_bays + add_gable) * bw
            gutter = (gutter_bays + add_gutter) * bh
            if gable > config.max_side_length + 1e-9 or gutter > config.max_side_length + 1e-9:
                continue
            if gable * gutter > config.max_structure_area + 1e-9:
                continue
            if gable * gutter <= best_area:
                continue

            cand = Candidate(gable=gable, gutter=gutter, rotation=placement.rotation,
                             x=placement.x, y=placement.y)
            footprint = validator.check(cand, ctx, occupied, skip=placement)
            if footprint is not None:
                best = Placement(x=placement.x, y=placement.y,
                                 rotation=placement.rotation,
                                 gable=gable, gutter=gutter, footprint=footprint)
                best_area = best.inner_area
    return best


def expand_structures(
    placements: list[Placement],
    usable: BaseGeometry,
    config: PlanningConfig,
    exclusions: list[Polygon] | None = None,
    *,
    rules: PlanningRules = PLANNING_RULES,
) -> tuple[list[Placement], int]:
    """Grow each placement by up to ``max_expansion_bays`` in either axis.

    Repeats up to ``config.expansion_passes`` times, stopping early once a
    pass grows nothing.  Inner area never decreases.

    Returns the new placement list (same order, same length) and the
    number of structures that grew.
    """
    if not placements or config.expansion_passes <= 0:
        return list(placements), 0

    validator = PlacementValidator(usable, config, exclusions,
                                   max_evaluations=config.max_candidate_evaluations)
    occupied = OccupiedSet(config.polyhouse_gap)
    for p in placements:
        occupied.add(p, config.gutter_width)

    current = list(placements)
    grown_ids: set[int] = set()
    for pass_no in range(1, config.expansion_passes + 1):
        grew = 0
        for i, placement in enumerate(current):
            expanded = _expand_one(placement, validator, occupied, config,
                                   rules.max_expansion_bays)
            if expanded is placement:
                continue
            occupied.replace(placement, expanded, config.gutter_width)
            current[i] = expanded
            grown_ids.add(i)
            grew += 1
            log.debug("Expanded #%d: %.0fx%.0f → %.0fx%.0f",
                      i + 1, placement.gable, placement.gutter,
                      expanded.gable, expanded.gutter)
        log.info("Expansion pass %d: %d of %d structures grew",
                 pass_no, grew, len(current))
        if grew == 0:
            break

    return current, len(grown_ids)
