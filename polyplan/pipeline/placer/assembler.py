"""Result assembler — turn local placements into labelled structures."""

from __future__ import annotations

from polyplan.geometry import GeoFrame, rotate_offset
from polyplan.pipeline.config import PLANNING_RULES, PlanningRules
from polyplan.pipeline.land.models import Coordinate, PlanningConfig

from .models import Block, Placement, Structure


def _to_coord(frame: GeoFrame, x: float, y: float) -> Coordinate:
    lat, lng = frame.to_geo(x, y)
    return Coordinate(lat=lat, lng=lng)


def _rect_ring(
    frame: GeoFrame, cx: float, cy: float,
    x0: float, y0: float, w: float, h: float, rotation: float,
) -> tuple[Coordinate, ...]:
    """Closed ring of an axis-aligned rectangle at local offset
    ``(x0, y0)`` from ``(cx, cy)``, rotated about the centre."""
    corners = ((x0, y0), (x0 + w, y0), (x0 + w, y0 + h), (x0, y0 + h))
    ring = []
    for ox, oy in corners:
        dx, dy = rotate_offset(ox, oy, rotation)
        ring.append(_to_coord(frame, cx + dx, cy + dy))
    ring.append(ring[0])
    return tuple(ring)


def build_blocks(
    placement: Placement, frame: GeoFrame, config: PlanningConfig,
) -> tuple[Block, ...]:
    """Blocks of a placement, gable bay index outer, gutter bay inner."""
    bw, bh = config.block_width, config.block_height
    gable_bays = round(placement.gable / bw)
    gutter_bays = round(placement.gutter / bh)
    x_start = -placement.gable / 2
    y_start = -placement.gutter / 2

    blocks = []
    for i in range(gable_bays):
        for j in range(gutter_bays):
            x0, y0 = x_start + i * bw, y_start + j * bh
            ring = _rect_ring(frame, placement.x, placement.y,
                              x0, y0, bw, bh, placement.rotation)
            blocks.append(Block(
                index=(i, j),
                position=(x0, y0),
                width=bw,
                height=bh,
                rotation=placement.rotation,
                corners=ring[:4],
            ))
    return tuple(blocks)


def assemble_structures(
    placements: list[Placement],
    frame: GeoFrame,
    config: PlanningConfig,
    *,
    rules: PlanningRules = PLANNING_RULES,
) -> list[Structure]:
    """Label, colour and geo-reference placements, in placement order.

    Ids are ``polyhouse-<n>``, labels ``P<n>``; colours cycle through the
    palette.  The output is a pure function of the input.
    """
    structures = []
    gw = config.gutter_width
    for n, p in enumerate(placements, start=1):
        footprint = _rect_ring(frame, p.x, p.y,
                               -p.gable / 2 - gw, -p.gutter / 2 - gw,
                               p.gable + 2 * gw, p.gutter + 2 * gw, p.rotation)
        structures.append(Structure(
            id=f"polyhouse-{n}",
            label=f"P{n}",
            color=rules.colors[(n - 1) % len(rules.colors)],
            center=_to_coord(frame, p.x, p.y),
            rotation=p.rotation,
            gable_length=p.gable,
            gutter_width=p.gutter,
            inner_area=p.inner_area,
            area=p.footprint_area,
            footprint=footprint,
            blocks=build_blocks(p, frame, config),
        ))
    return structures
