"""Placer dataclasses — candidates, placements and output structures."""

from __future__ import annotations

from dataclasses import dataclass, field

from shapely.geometry import Polygon

from polyplan.pipeline.land.models import Coordinate


# ── Search-time dataclasses ────────────────────────────────────────


@dataclass(frozen=True)
class CandidateSize:
    """A module-grid rectangle size: gable (long axis) × gutter (short axis)."""

    gable: float
    gutter: float

    @property
    def area(self) -> float:
        return self.gable * self.gutter


@dataclass
class Candidate:
    """A rectangle proposed at a grid point.  Ephemeral."""

    gable: float
    gutter: float
    rotation: float
    x: float          # centre, local metres
    y: float

    @property
    def area(self) -> float:
        return self.gable * self.gutter


@dataclass
class Placement:
    """An accepted candidate, tracked in local metres during the run.

    ``footprint`` is the block grid buffered by the gutter width.
    """

    x: float
    y: float
    rotation: float
    gable: float
    gutter: float
    footprint: Polygon

    @property
    def inner_area(self) -> float:
        return self.gable * self.gutter

    @property
    def footprint_area(self) -> float:
        return self.footprint.area


@dataclass
class SearchStats:
    """Counters for one placement search, reported in result metadata."""

    grid_spacing_m: float = 0.0
    grid_points: int = 0
    points_inside: int = 0
    evaluations: int = 0
    geometry_failures: int = 0
    passes: list[dict] = field(default_factory=list)
    budget_exhausted: bool = False


# ── Output dataclasses ─────────────────────────────────────────────


@dataclass(frozen=True)
class Block:
    """One gable × gutter bay of a structure."""

    index: tuple[int, int]          # (gable bay, gutter bay)
    position: tuple[float, float]   # unrotated local offset of the lower-left corner (m)
    width: float
    height: float
    rotation: float
    corners: tuple[Coordinate, ...]


@dataclass(frozen=True)
class Structure:
    """A placed polyhouse, ready for quotation and rendering."""

    id: str
    label: str
    color: str
    center: Coordinate
    rotation: float
    gable_length: float
    gutter_width: float
    inner_area: float               # blocks only
    area: float                     # blocks + gutter buffer
    footprint: tuple[Coordinate, ...]
    blocks: tuple[Block, ...]

    @property
    def dimensions(self) -> dict[str, float]:
        return {"gable_length": self.gable_length, "gutter_width": self.gutter_width}
