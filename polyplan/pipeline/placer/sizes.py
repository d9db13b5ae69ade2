"""Candidate size generator — module-grid rectangle dimensions."""

from __future__ import annotations

import math

from polyplan.pipeline.land.models import PlanningConfig

from .models import CandidateSize


def _multiples(module: float, limit: float) -> list[float]:
    count = int(math.floor(limit / module + 1e-9))
    return [module * k for k in range(1, count + 1)]


def generate_candidate_sizes(config: PlanningConfig) -> list[CandidateSize]:
    """All ``(gable, gutter)`` pairs the configuration allows, largest first.

    Gable lengths are multiples of ``block_width`` and gutter widths of
    ``block_height``; neither exceeds ``max_side_length``, the longer side
    reaches ``min_side_length``, and the inner area stays within
    ``max_structure_area``.  Large-first ordering biases the search toward
    fewer, bigger structures.
    """
    min_blocks = config.min_blocks_per_structure or 0
    area_cap = config.max_structure_area
    sizes: list[CandidateSize] = []
    # The area cap bounds both loops: a gable is at most area / one gutter bay,
    # a gutter at most area / gable.
    max_gable = min(config.max_side_length, area_cap / config.block_height)
    for gable in _multiples(config.block_width, max_gable):
        max_gutter = min(config.max_side_length, area_cap / gable)
        for gutter in _multiples(config.block_height, max_gutter):
            if max(gable, gutter) < config.min_side_length - 1e-9:
                continue
            blocks = round(gable / config.block_width) * round(gutter / config.block_height)
            if blocks < min_blocks:
                continue
            sizes.append(CandidateSize(gable=gable, gutter=gutter))

    sizes.sort(key=lambda s: (-s.area, -s.gable))
    return sizes


def sizes_at_least(sizes: list[CandidateSize], floor_area: float) -> list[CandidateSize]:
    """Sizes whose area reaches ``floor_area``; order is preserved."""
    return [s for s in sizes if s.area >= floor_area - 1e-9]
