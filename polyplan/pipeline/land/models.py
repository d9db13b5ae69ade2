"""Planning input dataclasses — land boundary, exclusions, configuration."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property

from shapely.geometry import Polygon

from polyplan.geometry import GeoFrame, polygon_from_points
from polyplan.pipeline.config import PLANNING_RULES


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


class OrientationStrategy(str, Enum):
    """How many orientations the search may use.

    uniform    — every structure at 90° (gable north-south)
    varied     — 90° plus one boundary angle of the solar range
    optimized  — every 10° step within the solar range, plus its boundaries
    """

    UNIFORM = "uniform"
    VARIED = "varied"
    OPTIMIZED = "optimized"


@dataclass(frozen=True)
class ExclusionZone:
    """A no-build polygon: a well, irrigation tank, water body, setback…

    User-drawn zones and zones reported by terrain or regulatory lookups
    are handled identically by the placer.
    """

    name: str
    coordinates: tuple[Coordinate, ...]
    reason: str = ""


@dataclass(frozen=True)
class LandArea:
    """The plot to plan on.  Immutable once built.

    ``boundary`` is a closed ring (first == last) of geographic points.
    ``centroid`` and ``area_m2`` are derived in the local metric frame.
    """

    boundary: tuple[Coordinate, ...]
    centroid: Coordinate
    area_m2: float
    frame: GeoFrame
    name: str = ""

    @classmethod
    def from_boundary(cls, points: list[Coordinate], name: str = "") -> "LandArea":
        """Close the ring if needed and derive centroid and area.

        Does not validate — see :func:`validate_boundary`.
        """
        ring = list(points)
        if ring and ring[0] != ring[-1]:
            ring.append(ring[0])
        frame = GeoFrame.around((c.lat, c.lng) for c in ring[:-1] or ring)
        local = polygon_from_points([frame.to_local(c.lat, c.lng) for c in ring])
        if local.is_empty or not local.is_valid:
            centroid = Coordinate(frame.lat0, frame.lng0)
        else:
            lat, lng = frame.to_geo(local.centroid.x, local.centroid.y)
            centroid = Coordinate(lat, lng)
        return cls(
            boundary=tuple(ring),
            centroid=centroid,
            area_m2=abs(local.area),
            frame=frame,
            name=name,
        )

    @cached_property
    def local_polygon(self) -> Polygon:
        """The boundary in the local metric frame."""
        return polygon_from_points(
            [self.frame.to_local(c.lat, c.lng) for c in self.boundary])


@dataclass(frozen=True)
class PlanningConfig:
    """Configuration for one planning run.  Defaults follow PLANNING_RULES."""

    block_width: float = PLANNING_RULES.block_width_m        # gable module
    block_height: float = PLANNING_RULES.block_height_m      # gutter module
    gutter_width: float = PLANNING_RULES.gutter_width_m
    polyhouse_gap: float = PLANNING_RULES.polyhouse_gap_m
    min_side_length: float = PLANNING_RULES.min_side_length_m
    max_side_length: float = PLANNING_RULES.max_side_length_m
    max_structure_area: float = PLANNING_RULES.max_structure_area_m2
    safety_buffer: float = 0.0

    solar_orientation: bool = True
    allowed_deviation_deg: float | None = None    # None = derive from latitude
    latitude: float | None = None                 # None = land centroid

    strategy: OrientationStrategy = OrientationStrategy.OPTIMIZED
    exclusions: tuple[ExclusionZone, ...] = ()
    min_blocks_per_structure: int | None = None
    expansion_passes: int = 1

    # Search budget
    max_grid_points: int = PLANNING_RULES.max_grid_points
    max_candidate_evaluations: int = PLANNING_RULES.max_candidate_evaluations
    time_budget_s: float = PLANNING_RULES.time_budget_s

    def with_overrides(self, **changes) -> "PlanningConfig":
        return replace(self, **changes)


@dataclass
class PlanningRequest:
    """A parsed request: what the API and CLI hand to ``plan_layout``."""

    land: LandArea
    config: PlanningConfig
    exclusions: list[ExclusionZone] = field(default_factory=list)
