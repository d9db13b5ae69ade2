"""Orientation solver — which rotations the solar constraint permits.

Rotation is measured counter-clockwise from east, so 90° puts the gable
(long axis) north-south and the gutters east-west.  A rectangle is
symmetric under a half turn, so all angles live in ``[0, 180)``.

The allowed deviation ``A`` from 90° comes from

    cos(A) = sin(declination) / cos(latitude)

which keeps the gutters in direct sun at least once a day all year round.
"""

from __future__ import annotations

import logging
import math

from polyplan.pipeline.config import PLANNING_RULES
from polyplan.pipeline.land.models import OrientationStrategy
from polyplan.pipeline.land.validation import PlanningInputError


log = logging.getLogger(__name__)

BASE_ORIENTATION = 90.0


def _normalize(angle: float) -> float:
    a = round(angle % 180.0, 2)
    return 0.0 if a == 180.0 else a


def _sweep(lo: float, hi: float, step: float) -> list[float]:
    """Every multiple of ``step`` within ``[lo, hi]``."""
    angles = []
    k = math.ceil(lo / step - 1e-9)
    while k * step <= hi + 1e-9:
        angles.append(k * step)
        k += 1
    return angles


def allowed_deviation(
    latitude: float,
    declination: float = PLANNING_RULES.solar_declination_deg,
) -> float:
    """Allowed deviation ``A`` (degrees) from the base 90° orientation."""
    if not -90.0 <= latitude <= 90.0:
        raise PlanningInputError([f"latitude {latitude} outside [-90, 90]"])

    if abs(latitude) < PLANNING_RULES.equator_band_deg:
        return 90.0

    cos_lat = math.cos(math.radians(latitude))
    cos_a = math.sin(math.radians(declination)) / cos_lat if cos_lat > 1e-12 else math.inf
    if abs(cos_a) > 1:
        # Polar: gable strictly north-south
        return 0.0
    return math.degrees(math.acos(cos_a))


def solve_orientations(
    latitude: float,
    strategy: OrientationStrategy = OrientationStrategy.OPTIMIZED,
    *,
    solar_enabled: bool = True,
    deviation_override: float | None = None,
    declination: float = PLANNING_RULES.solar_declination_deg,
    step: float = PLANNING_RULES.orientation_step_deg,
) -> list[float]:
    """Return the sorted rotations (degrees, ``[0, 180)``) to try.

    Pure and deterministic.  Raises PlanningInputError on a latitude
    outside ``[-90, 90]``.
    """
    if not -90.0 <= latitude <= 90.0:
        raise PlanningInputError([f"latitude {latitude} outside [-90, 90]"])

    if not solar_enabled:
        return sorted({_normalize(a) for a in _sweep(0.0, 180.0 - step, step)})

    if deviation_override:
        dev = float(deviation_override)
    else:
        dev = allowed_deviation(latitude, declination)
    lo, hi = BASE_ORIENTATION - dev, BASE_ORIENTATION + dev

    if strategy == OrientationStrategy.UNIFORM:
        angles = [BASE_ORIENTATION]
    elif strategy == OrientationStrategy.VARIED:
        variant = lo if abs(lo - BASE_ORIENTATION) > 5 else hi
        angles = [BASE_ORIENTATION, variant]
    else:
        angles = _sweep(lo, hi, step) + [lo, hi]

    result = sorted({_normalize(a) for a in angles})
    log.info("Orientations at lat=%.2f° (±%.1f°, %s): %s",
             latitude, dev, strategy.value,
             ", ".join(f"{a:g}°" for a in result))
    return result
