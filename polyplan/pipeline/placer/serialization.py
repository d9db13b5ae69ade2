"""Planning serialization — JSON conversion."""

from __future__ import annotations

from typing import TYPE_CHECKING

from polyplan.pipeline.land.models import Coordinate, PlanningConfig

from .models import Block, Structure

if TYPE_CHECKING:
    from polyplan.pipeline.planning import PlanningResult


def _coord(c: Coordinate) -> dict:
    return {"lat": c.lat, "lng": c.lng}


def _parse_coord(d: dict) -> Coordinate:
    return Coordinate(lat=float(d["lat"]), lng=float(d["lng"]))


def structure_to_dict(s: Structure) -> dict:
    """Serialize a Structure to a JSON-safe dict."""
    return {
        "id": s.id,
        "label": s.label,
        "color": s.color,
        "center": _coord(s.center),
        "rotation": s.rotation,
        "dimensions": s.dimensions,
        "inner_area": s.inner_area,
        "area": s.area,
        "footprint": [_coord(c) for c in s.footprint],
        "blocks": [
            {
                "index": list(b.index),
                "position": {"x": b.position[0], "y": b.position[1]},
                "width": b.width,
                "height": b.height,
                "rotation": b.rotation,
                "corners": [_coord(c) for c in b.corners],
            }
            for b in s.blocks
        ],
    }


def parse_structure(data: dict) -> Structure:
    """Parse a structure dict back into a Structure."""
    return Structure(
        id=data["id"],
        label=data["label"],
        color=data["color"],
        center=_parse_coord(data["center"]),
        rotation=float(data["rotation"]),
        gable_length=float(data["dimensions"]["gable_length"]),
        gutter_width=float(data["dimensions"]["gutter_width"]),
        inner_area=float(data["inner_area"]),
        area=float(data["area"]),
        footprint=tuple(_parse_coord(c) for c in data["footprint"]),
        blocks=tuple(
            Block(
                index=(int(b["index"][0]), int(b["index"][1])),
                position=(float(b["position"]["x"]), float(b["position"]["y"])),
                width=float(b["width"]),
                height=float(b["height"]),
                rotation=float(b["rotation"]),
                corners=tuple(_parse_coord(c) for c in b["corners"]),
            )
            for b in data["blocks"]
        ),
    )


def config_to_dict(config: PlanningConfig) -> dict:
    return {
        "block_width": config.block_width,
        "block_height": config.block_height,
        "gutter_width": config.gutter_width,
        "polyhouse_gap": config.polyhouse_gap,
        "min_side_length": config.min_side_length,
        "max_side_length": config.max_side_length,
        "max_structure_area": config.max_structure_area,
        "safety_buffer": config.safety_buffer,
        "solar_orientation": config.solar_orientation,
        "allowed_deviation_deg": config.allowed_deviation_deg,
        "latitude": config.latitude,
        "strategy": config.strategy.value,
        "min_blocks_per_structure": config.min_blocks_per_structure,
        "expansion_passes": config.expansion_passes,
    }


def planning_result_to_dict(result: PlanningResult) -> dict:
    """Serialize a PlanningResult to a JSON-safe dict."""
    land = result.land
    return {
        "success": not result.errors,
        "land": {
            "name": land.name,
            "boundary": [_coord(c) for c in land.boundary],
            "centroid": _coord(land.centroid),
            "area": land.area_m2,
        },
        "configuration": config_to_dict(result.config),
        "structures": [structure_to_dict(s) for s in result.structures],
        "coverage": result.coverage,
        "warnings": list(result.warnings),
        "errors": list(result.errors),
        "metadata": dict(result.metadata),
    }
