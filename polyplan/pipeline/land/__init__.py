"""Land — the planning inputs.

Submodules:
  models      Coordinate, LandArea, ExclusionZone, PlanningConfig, OrientationStrategy.
  validation  Boundary and configuration checks (PlanningInputError).
  parsing     Raw dict / JSON → planning request.
"""

from .models import (
    Coordinate, LandArea, ExclusionZone, OrientationStrategy,
    PlanningConfig, PlanningRequest,
)
from .validation import (
    PlanningInputError, validate_boundary, validate_config, validate_exclusions,
)
from .parsing import (
    parse_coordinates, parse_exclusions, parse_config, parse_plan_request,
    default_config_dict,
)

__all__ = [
    # Models
    "Coordinate", "LandArea", "ExclusionZone", "OrientationStrategy",
    "PlanningConfig", "PlanningRequest",
    # Validation
    "PlanningInputError", "validate_boundary", "validate_config", "validate_exclusions",
    # Parsing
    "parse_coordinates", "parse_exclusions", "parse_config", "parse_plan_request",
    "default_config_dict",
]
