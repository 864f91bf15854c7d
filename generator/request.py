"""
Request builder — maps the parameter model onto a wire request.

`build_request` is pure: it validates a snapshot and returns a frozen
request, or raises ValidationError naming the field at fault.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from errors import ValidationError
from generator.params import (
    FIELD_SLOTS,
    GridSpec,
    PotentialParameters,
    PotentialType,
    is_finite_number,
)


@dataclass(frozen=True)
class GenerationRequest:
    """One generation attempt's payload. Never mutated after construction."""
    grid: GridSpec
    plot_type: PotentialType
    parameters: PotentialParameters

    def to_payload(self) -> dict[str, Any]:
        return {
            "grid": {
                "rMin": float(self.grid.r_min),
                "rMax": float(self.grid.r_max),
                "nGrid": int(self.grid.n_grid),
            },
            "plot_type": self.plot_type.value,
            "parameters": {
                name: float(self.parameters[name]) for name in self.parameters.fields
            },
        }


def build_request(
    grid: GridSpec,
    plot_type: Union[str, PotentialType],
    params: PotentialParameters,
) -> GenerationRequest:
    """
    Validate the inputs and build a GenerationRequest.

    Raises:
        ValidationError: on an invalid grid, a parameter set tagged with a
            different type, or a missing / non-finite parameter.
    """
    plot_type = PotentialType.parse(plot_type)

    grid.validate()

    if params.potential_type is not plot_type:
        raise ValidationError(
            "plot_type",
            f"Parameters are for {params.potential_type.label}, "
            f"but {plot_type.label} was requested",
        )

    for name in FIELD_SLOTS[plot_type]:
        if name not in params.values:
            raise ValidationError(name, f"Parameter '{name}' is missing")
        value = params.values[name]
        if not is_finite_number(value):
            raise ValidationError(
                name, f"Parameter '{name}' must be a finite number, got {value!r}"
            )

    return GenerationRequest(grid=grid, plot_type=plot_type, parameters=params)
