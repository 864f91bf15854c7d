"""Plot configuration — parameter model and request builder."""

from generator.params import (
    GridSpec,
    ParameterModel,
    PotentialParameters,
    PotentialType,
    parse_number,
)
from generator.request import GenerationRequest, build_request

__all__ = [
    "GridSpec",
    "ParameterModel",
    "PotentialParameters",
    "PotentialType",
    "parse_number",
    "GenerationRequest",
    "build_request",
]
