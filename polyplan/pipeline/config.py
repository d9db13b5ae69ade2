"""Shared planning constants for the polyhouse pipeline.

These values describe the industry-standard polyhouse module, the solar
model, and the tuning knobs of the placement search.  The land input layer
(which fills in configuration defaults), the **placer** (which scans and
validates candidates) and the **assembler** (which labels and colours the
result) all read from this single source of truth.

Change a value here and every stage stays in sync automatically.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PlanningRules:
    """Physical and heuristic rules for polyhouse planning.

    All distances are in metres, areas in square metres, angles in degrees.
    """

    block_width_m: float = 8.0
    """Gable bay: one block along the structure's long axis."""

    block_height_m: float = 4.0
    """Gutter bay: one block along the structure's short axis."""

    gutter_width_m: float = 2.0
    """Drainage gutter buffered around the block grid."""

    polyhouse_gap_m: float = 2.0
    """Walking corridor required between two structures."""

    min_side_length_m: float = 8.0
    max_side_length_m: float = 120.0

    max_side_limit_m: float = 1_000.0
    """Largest ``max_side_length`` a configuration may ask for."""

    max_bays_per_side: int = 500
    """Most modules allowed along one side; bounds the size enumeration."""

    max_structure_area_m2: float = 10_000.0
    """Inner (block) area cap for a single structure, one hectare."""

    solar_declination_deg: float = 23.5
    """Maximum solar declination, used for year-round gutter exposure."""

    equator_band_deg: float = 1.0
    """Within this latitude band every orientation is acceptable."""

    orientation_step_deg: float = 10.0

    metres_per_degree: float = 111_320.0
    """Local meters-per-degree of latitude (equirectangular approximation)."""

    gap_check_min_m: float = 0.5
    """Corridor gaps at or below this are treated as trivial."""

    gap_tolerance: float = 0.7
    """Fraction of the radius-sum + gap a centre distance must reach."""

    grid_spacing_table: tuple[tuple[float, float], ...] = (
        (300_000.0, 25.0),
        (100_000.0, 15.0),
        (10_000.0, 10.0),
        (2_000.0, 8.0),
    )
    """``(min land area, spacing)`` pairs, checked top-down."""

    min_grid_spacing_m: float = 6.0

    large_size_ratio: float = 0.7
    """First pass of the two-pass search: sizes at or above this share of
    the largest candidate area."""

    gap_fill_ratios: tuple[float, ...] = (0.4 * 0.7, 0.0)
    """Size floors of the backfill passes, progressively smaller."""

    target_coverage: float = 0.85
    max_gap_fillers: int = 20

    max_expansion_bays: int = 4
    """Extra gable / gutter bays tried per structure by the expansion pass."""

    low_coverage_warning: float = 0.30

    colors: tuple[str, ...] = field(default=(
        "#4CAF50",  # green
        "#2196F3",  # blue
        "#FF9800",  # orange
        "#9C27B0",  # purple
        "#00BCD4",  # cyan
        "#E91E63",  # pink
        "#FFEB3B",  # yellow
        "#795548",  # brown
        "#607D8B",  # blue grey
        "#F44336",  # red
        "#3F51B5",  # indigo
        "#009688",  # teal
    ))

    # ── Search budget defaults ─────────────────────────────────────

    max_grid_points: int = 40_000
    max_candidate_evaluations: int = 250_000
    time_budget_s: float = 60.0

    def grid_spacing_for(self, land_area_m2: float) -> float:
        """Scan spacing for a plot: finer for small plots, coarser for large."""
        for min_area, spacing in self.grid_spacing_table:
            if land_area_m2 > min_area:
                return spacing
        return self.min_grid_spacing_m


# Module-level singleton
PLANNING_RULES = PlanningRules()
