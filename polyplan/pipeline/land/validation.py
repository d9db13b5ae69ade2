"""Input validation — reject malformed boundaries and configurations
before any search starts."""

from __future__ import annotations

import math

from polyplan.geometry import GeoFrame, ring_problems
from polyplan.pipeline.config import PLANNING_RULES

from .models import Coordinate, ExclusionZone, OrientationStrategy, PlanningConfig


class PlanningInputError(Exception):
    """Raised when the land boundary or configuration is unusable."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid planning input: " + "; ".join(self.errors))


def _local_ring(points: list[Coordinate]) -> list[tuple[float, float]]:
    frame = GeoFrame.around((c.lat, c.lng) for c in points)
    ring = [frame.to_local(c.lat, c.lng) for c in points]
    if ring[0] != ring[-1]:
        ring.append(ring[0])
    return ring


def validate_boundary(points: list[Coordinate], label: str = "Land boundary") -> list[str]:
    """Validate a boundary ring. Returns error messages (empty = valid)."""
    errors: list[str] = []

    if len(points) < 3:
        return [f"{label}: at least 3 coordinates required, got {len(points)}"]

    for i, c in enumerate(points):
        if not -90.0 <= c.lat <= 90.0:
            errors.append(f"{label}: vertex {i} latitude {c.lat} outside [-90, 90]")
        if not -180.0 <= c.lng <= 180.0:
            errors.append(f"{label}: vertex {i} longitude {c.lng} outside [-180, 180]")
    if errors:
        return errors

    errors.extend(f"{label}: {p}" for p in ring_problems(_local_ring(points)))
    return errors


_NUMERIC_FIELDS = (
    "block_width", "block_height", "gutter_width", "polyhouse_gap",
    "min_side_length", "max_side_length", "max_structure_area",
    "safety_buffer", "time_budget_s", "latitude", "allowed_deviation_deg",
)


def validate_config(config: PlanningConfig) -> list[str]:
    """Validate a PlanningConfig. Returns error messages (empty = valid)."""
    errors: list[str] = []

    # ── Numbers must be finite ──
    for name in _NUMERIC_FIELDS:
        value = getattr(config, name)
        if value is not None and not math.isfinite(value):
            errors.append(f"{name} must be a finite number, got {value}")
    if errors:
        return errors

    # ── Module and dimension constraints ──
    if config.block_width <= 0:
        errors.append(f"block_width must be positive, got {config.block_width}")
    if config.block_height <= 0:
        errors.append(f"block_height must be positive, got {config.block_height}")
    if config.max_side_length <= 0:
        errors.append(f"max_side_length must be positive, got {config.max_side_length}")
    elif config.max_side_length > PLANNING_RULES.max_side_limit_m:
        errors.append(
            f"max_side_length must not exceed {PLANNING_RULES.max_side_limit_m:g} m, "
            f"got {config.max_side_length}")
    else:
        for name in ("block_width", "block_height"):
            module = getattr(config, name)
            if module > 0 and config.max_side_length / module > PLANNING_RULES.max_bays_per_side:
                errors.append(
                    f"max_side_length / {name} allows more than "
                    f"{PLANNING_RULES.max_bays_per_side} modules per side")
    if config.min_side_length < 0:
        errors.append(f"min_side_length must not be negative, got {config.min_side_length}")
    if config.min_side_length > config.max_side_length:
        errors.append(
            f"min_side_length ({config.min_side_length}) exceeds "
            f"max_side_length ({config.max_side_length})"
        )
    if config.max_structure_area <= 0:
        errors.append(f"max_structure_area must be positive, got {config.max_structure_area}")

    # ── Spacing ──
    for name in ("gutter_width", "polyhouse_gap", "safety_buffer"):
        value = getattr(config, name)
        if value < 0:
            errors.append(f"{name} must not be negative, got {value}")

    # ── Solar ──
    if config.latitude is not None and not -90.0 <= config.latitude <= 90.0:
        errors.append(f"latitude {config.latitude} outside [-90, 90]")
    if config.allowed_deviation_deg is not None and not 0.0 <= config.allowed_deviation_deg <= 90.0:
        errors.append(
            f"allowed_deviation_deg must lie in [0, 90], got {config.allowed_deviation_deg}")
    if not isinstance(config.strategy, OrientationStrategy):
        errors.append(f"unknown orientation strategy {config.strategy!r}")

    # ── Counts and budget ──
    if config.min_blocks_per_structure is not None and config.min_blocks_per_structure < 1:
        errors.append(
            f"min_blocks_per_structure must be at least 1, got {config.min_blocks_per_structure}")
    if config.expansion_passes < 0:
        errors.append(f"expansion_passes must not be negative, got {config.expansion_passes}")
    if config.max_grid_points < 1:
        errors.append(f"max_grid_points must be at least 1, got {config.max_grid_points}")
    if config.max_candidate_evaluations < 1:
        errors.append(
            f"max_candidate_evaluations must be at least 1, got {config.max_candidate_evaluations}")
    if config.time_budget_s <= 0:
        errors.append(f"time_budget_s must be positive, got {config.time_budget_s}")

    errors.extend(validate_exclusions(list(config.exclusions)))
    return errors


def validate_exclusions(zones: list[ExclusionZone]) -> list[str]:
    errors: list[str] = []
    for zone in zones:
        errors.extend(
            validate_boundary(list(zone.coordinates), label=f"Exclusion '{zone.name}'"))
    return errors
