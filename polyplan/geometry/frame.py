"""Local metric frame for small-area geographic data.

All placement geometry runs in metres on an equirectangular projection
centred on the land: ``x`` grows east, ``y`` grows north.  Over a single
farm plot the distortion is negligible, and it lets shapely buffer and
measure in metres directly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from polyplan.pipeline.config import PLANNING_RULES


@dataclass(frozen=True)
class GeoFrame:
    """Equirectangular projection anchored at ``(lat0, lng0)``."""

    lat0: float
    lng0: float
    metres_per_degree: float = PLANNING_RULES.metres_per_degree

    @property
    def lng_scale(self) -> float:
        """Metres per degree of longitude at the anchor latitude."""
        return self.metres_per_degree * math.cos(math.radians(self.lat0))

    @classmethod
    def around(cls, points: Iterable[tuple[float, float]]) -> "GeoFrame":
        """Anchor a frame at the vertex mean of ``(lat, lng)`` points."""
        pts = list(points)
        if not pts:
            raise ValueError("Cannot anchor a frame on zero points")
        lat0 = sum(p[0] for p in pts) / len(pts)
        lng0 = sum(p[1] for p in pts) / len(pts)
        return cls(lat0=lat0, lng0=lng0)

    def to_local(self, lat: float, lng: float) -> tuple[float, float]:
        return (
            (lng - self.lng0) * self.lng_scale,
            (lat - self.lat0) * self.metres_per_degree,
        )

    def to_geo(self, x: float, y: float) -> tuple[float, float]:
        """Inverse of :meth:`to_local`; returns ``(lat, lng)``."""
        return (
            self.lat0 + y / self.metres_per_degree,
            self.lng0 + x / self.lng_scale,
        )

    def degree_steps(self, spacing_m: float, mid_lat: float) -> tuple[float, float]:
        """Convert a metric spacing to ``(lat_step, lng_step)`` in degrees.

        Longitude is scaled by ``cos(mid_lat)`` so the grid stays square
        on the ground.
        """
        lat_step = spacing_m / self.metres_per_degree
        lng_step = spacing_m / (
            self.metres_per_degree * math.cos(math.radians(mid_lat))
        )
        return lat_step, lng_step
