"""Land test fixtures — rectangular plots laid out in metres near Bengaluru.

Plots are built from a south-west corner at (12.97°N, 77.59°E) and sized
in metres, so tests can reason about dimensions directly:

  make_rect_land(100, 100)      # 1 ha square
  rect_exclusion(25, 25, 10, 10, name="well")

Most tests use ``fast_config`` (short sides, a single orientation) to keep
the grid search small.
"""

from __future__ import annotations

import math

from shapely.geometry import Polygon

from polyplan.geometry import polygon_from_points
from polyplan.pipeline.config import PLANNING_RULES
from polyplan.pipeline.land.models import (
    Coordinate, ExclusionZone, LandArea, OrientationStrategy, PlanningConfig,
)

LAT0 = 12.97
LNG0 = 77.59


def rect_coords(x0: float, y0: float, width: float, height: float,
                lat0: float = LAT0, lng0: float = LNG0) -> list[Coordinate]:
    """Closed ring for a rectangle offset ``(x0, y0)`` metres from the corner."""
    mpd = PLANNING_RULES.metres_per_degree
    lng_scale = mpd * math.cos(math.radians(lat0))

    def at(x: float, y: float) -> Coordinate:
        return Coordinate(lat=lat0 + y / mpd, lng=lng0 + x / lng_scale)

    ring = [at(x0, y0), at(x0 + width, y0), at(x0 + width, y0 + height), at(x0, y0 + height)]
    ring.append(ring[0])
    return ring


def make_rect_land(width: float, height: float, name: str = "test plot",
                   lat0: float = LAT0, lng0: float = LNG0) -> LandArea:
    return LandArea.from_boundary(rect_coords(0, 0, width, height, lat0, lng0), name=name)


def rect_exclusion(x0: float, y0: float, width: float, height: float,
                   name: str = "zone", reason: str = "") -> ExclusionZone:
    return ExclusionZone(name=name, coordinates=tuple(rect_coords(x0, y0, width, height)),
                         reason=reason)


def fast_config(**overrides) -> PlanningConfig:
    """Small structures, one orientation: a quick search for unit tests."""
    base = PlanningConfig(max_side_length=24.0, strategy=OrientationStrategy.UNIFORM)
    return base.with_overrides(**overrides)


def to_local_polygon(land: LandArea, coords) -> Polygon:
    return polygon_from_points([land.frame.to_local(c.lat, c.lng) for c in coords])


def local_footprints(result) -> list[Polygon]:
    """Structure footprints of a PlanningResult, in the land's metric frame."""
    return [to_local_polygon(result.land, s.footprint) for s in result.structures]


def request_dict(width: float, height: float, configuration: dict | None = None,
                 exclusions: list[dict] | None = None) -> dict:
    """A JSON planning request for a rectangular plot."""
    return {
        "land": {
            "name": "test plot",
            "coordinates": [{"lat": c.lat, "lng": c.lng}
                            for c in rect_coords(0, 0, width, height)],
        },
        "configuration": configuration or {},
        "exclusions": exclusions or [],
    }
