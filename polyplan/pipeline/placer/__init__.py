"""Placer — positions polyhouse structures inside the land boundary.

Submodules:
  models         Search-time and output dataclasses.
  orientation    Solar orientation solver.
  sizes          Module-grid candidate sizes.
  occupancy      Occupied set and the candidate validator.
  engine         Main placement algorithm (greedy grid search, two passes).
  expansion      Bay-by-bay growth of placed structures.
  assembler      Labels, colours, blocks and geographic footprints.
  serialization  JSON conversion (structure_to_dict, planning_result_to_dict).
"""

from .models import Block, Candidate, CandidateSize, Placement, SearchStats, Structure
from .orientation import allowed_deviation, solve_orientations
from .sizes import generate_candidate_sizes
from .occupancy import OccupiedSet, PlacementValidator, footprint_polygon
from .engine import build_grid, place_structures
from .expansion import expand_structures
from .assembler import assemble_structures, build_blocks
from .serialization import (
    structure_to_dict, parse_structure, config_to_dict, planning_result_to_dict,
)

__all__ = [
    # Models
    "Block", "Candidate", "CandidateSize", "Placement", "SearchStats", "Structure",
    # Orientation and sizes
    "allowed_deviation", "solve_orientations", "generate_candidate_sizes",
    # Search
    "OccupiedSet", "PlacementValidator", "footprint_polygon",
    "build_grid", "place_structures",
    # Expansion and assembly
    "expand_structures", "assemble_structures", "build_blocks",
    # Serialization
    "structure_to_dict", "parse_structure", "config_to_dict", "planning_result_to_dict",
]
