"""Request parsing — convert raw dicts/JSON into planning inputs."""

from __future__ import annotations

from polyplan.pipeline.config import PLANNING_RULES

from .models import (
    Coordinate, ExclusionZone, LandArea, OrientationStrategy,
    PlanningConfig, PlanningRequest,
)
from .validation import (
    PlanningInputError, validate_boundary, validate_config, validate_exclusions,
)


def parse_coordinates(data: list) -> list[Coordinate]:
    """Parse ``[{"lat": .., "lng": ..}, ...]``.

    ``[lat, lng]`` pairs are accepted too.
    """
    coords = []
    for c in data:
        if isinstance(c, dict):
            coords.append(Coordinate(lat=float(c["lat"]), lng=float(c["lng"])))
        else:
            lat, lng = c
            coords.append(Coordinate(lat=float(lat), lng=float(lng)))
    return coords


def parse_exclusions(data: list | None) -> list[ExclusionZone]:
    """Parse exclusion zones.

    Format:
        [{"name": "well", "coordinates": [...], "reason": "existing borewell"}]
    """
    zones = []
    for i, z in enumerate(data or []):
        zones.append(ExclusionZone(
            name=str(z.get("name") or f"exclusion-{i + 1}"),
            coordinates=tuple(parse_coordinates(z["coordinates"])),
            reason=str(z.get("reason", "")),
        ))
    return zones


_FLOAT_FIELDS = (
    "block_width", "block_height", "gutter_width", "polyhouse_gap",
    "min_side_length", "max_side_length", "max_structure_area",
    "safety_buffer", "time_budget_s",
)
_INT_FIELDS = ("expansion_passes", "max_grid_points", "max_candidate_evaluations")


_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}


def _number(name: str, value, cast, errors: list[str]):
    """``cast(value)``, or None with a message appended to ``errors``."""
    try:
        return cast(value)
    except (TypeError, ValueError, OverflowError):
        errors.append(f"{name}: expected a number, got {value!r}")
        return None


def _flag(name: str, value, errors: list[str]) -> bool | None:
    """Booleans, 0/1 and the usual true/false spellings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    errors.append(f"{name}: expected true or false, got {value!r}")
    return None


def parse_config(data: dict | None) -> PlanningConfig:
    """Parse a configuration dict; missing keys take their defaults.

    Raises PlanningInputError on an unknown strategy, a non-numeric value
    or a flag that is not true/false.
    """
    data = dict(data or {})
    kwargs: dict = {}
    errors: list[str] = []

    def put(name: str, value, cast=float) -> None:
        parsed = _number(name, value, cast, errors)
        if parsed is not None:
            kwargs[name] = parsed

    for name in _FLOAT_FIELDS + _INT_FIELDS:
        if data.get(name) is not None:
            put(name, data[name], int if name in _INT_FIELDS else float)

    # Nested block dimensions, as stored by the settings screen
    blocks = data.get("block_dimensions")
    if isinstance(blocks, dict):
        if blocks.get("width") is not None:
            put("block_width", blocks["width"])
        if blocks.get("height") is not None:
            put("block_height", blocks["height"])

    if "solar_orientation" in data:
        solar = data["solar_orientation"]
        if isinstance(solar, dict):
            enabled = _flag("solar_orientation.enabled", solar.get("enabled", True), errors)
            if enabled is not None:
                kwargs["solar_orientation"] = enabled
            if solar.get("allowed_deviation_deg"):
                put("allowed_deviation_deg", solar["allowed_deviation_deg"])
            if solar.get("latitude") is not None:
                put("latitude", solar["latitude"])
        else:
            enabled = _flag("solar_orientation", solar, errors)
            if enabled is not None:
                kwargs["solar_orientation"] = enabled
    # 0 means "derive from latitude"
    if data.get("allowed_deviation_deg"):
        put("allowed_deviation_deg", data["allowed_deviation_deg"])
    if data.get("latitude") is not None:
        put("latitude", data["latitude"])

    if data.get("strategy") is not None:
        try:
            kwargs["strategy"] = OrientationStrategy(data["strategy"])
        except (TypeError, ValueError):
            allowed = ", ".join(s.value for s in OrientationStrategy)
            errors.append(f"strategy: unknown value {data['strategy']!r} (expected one of {allowed})")

    if data.get("min_blocks_per_structure") is not None:
        put("min_blocks_per_structure", data["min_blocks_per_structure"], int)

    if data.get("exclusions"):
        try:
            kwargs["exclusions"] = tuple(parse_exclusions(data["exclusions"]))
        except (KeyError, TypeError, ValueError) as exc:
            errors.append(f"exclusions: malformed zone ({exc})")

    if errors:
        raise PlanningInputError(errors)
    return PlanningConfig(**kwargs)


def parse_plan_request(data: dict) -> PlanningRequest:
    """Parse and validate a full planning request.

    Format:
        {
          "land": {"name": "north field", "coordinates": [{"lat": .., "lng": ..}, ...]},
          "configuration": {...},
          "exclusions": [...]          # terrain / regulatory zones, optional
        }

    ``land`` may also be a bare coordinate list.
    """
    land_data = data.get("land")
    if land_data is None:
        raise PlanningInputError(["land: missing land boundary"])
    if isinstance(land_data, dict):
        name = str(land_data.get("name", ""))
        raw = land_data.get("coordinates") or []
    else:
        name, raw = "", land_data

    try:
        points = parse_coordinates(raw)
    except (KeyError, TypeError, ValueError) as exc:
        raise PlanningInputError([f"land: malformed coordinates ({exc})"]) from exc
    config = parse_config(data.get("configuration"))
    try:
        exclusions = parse_exclusions(data.get("exclusions"))
    except (KeyError, TypeError, ValueError) as exc:
        raise PlanningInputError([f"exclusions: malformed zone ({exc})"]) from exc

    errors = validate_boundary(points) + validate_config(config) + validate_exclusions(exclusions)
    if errors:
        raise PlanningInputError(errors)

    return PlanningRequest(
        land=LandArea.from_boundary(points, name=name),
        config=config,
        exclusions=exclusions,
    )


def default_config_dict() -> dict:
    """Defaults as a plain dict, for settings screens and the CLI."""
    return {
        "block_width": PLANNING_RULES.block_width_m,
        "block_height": PLANNING_RULES.block_height_m,
        "gutter_width": PLANNING_RULES.gutter_width_m,
        "polyhouse_gap": PLANNING_RULES.polyhouse_gap_m,
        "min_side_length": PLANNING_RULES.min_side_length_m,
        "max_side_length": PLANNING_RULES.max_side_length_m,
        "max_structure_area": PLANNING_RULES.max_structure_area_m2,
        "safety_buffer": 0.0,
        "solar_orientation": True,
        "strategy": OrientationStrategy.OPTIMIZED.value,
    }
