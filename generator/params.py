"""
Parameter model — grid configuration and per-potential parameter sets.

Holds the values the user edits between generations. Nothing here talks to
the network; the request builder reads a snapshot of this state at the
moment a plot is requested.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union

import numpy as np

from errors import ValidationError


class PotentialType(str, Enum):
    """Potential models the computation service can plot. Values are wire tags."""
    MORSE = "Morse"
    SOFTCORE = "Softcore"
    SURFACE_3D = "surface_3d"
    ENERGY_LEVELS = "energy_levels"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, value: Union[str, PotentialType]) -> PotentialType:
        """Accept a member, its wire tag, its display label or its member name."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if value in (member.value, member.label, member.name):
                return member
        raise ValidationError("plot_type", f"Unknown potential type: {value!r}")


_LABELS = {
    PotentialType.MORSE: "Morse",
    PotentialType.SOFTCORE: "Softcore",
    PotentialType.SURFACE_3D: "Surface3D",
    PotentialType.ENERGY_LEVELS: "EnergyLevels",
}

# Field names valid for each potential type, and the shared slot each one
# reads from. D (Morse dissociation energy) and q (Softcore charge) share the
# "strength" slot, so switching type keeps the number the user typed.
FIELD_SLOTS: dict[PotentialType, dict[str, str]] = {
    PotentialType.MORSE: {"D": "strength", "a": "width", "r0": "center"},
    PotentialType.SOFTCORE: {"q": "strength", "a": "width", "r0": "center"},
    PotentialType.SURFACE_3D: {"D": "strength", "a": "width", "r0": "center"},
    PotentialType.ENERGY_LEVELS: {"D": "strength", "a": "width", "r0": "center"},
}

DEFAULT_SLOTS: dict[str, float] = {
    "strength": 100.0,
    "width": 1.5,
    "center": 2.0,
}

# Wire name -> GridSpec attribute
GRID_FIELDS = {"rMin": "r_min", "rMax": "r_max", "nGrid": "n_grid"}


def parse_number(value: Any) -> float:
    """
    Parse user input into a float.

    Unparsable text becomes NaN instead of raising; rejecting it is the
    request builder's job.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return math.nan


def is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@dataclass(frozen=True)
class GridSpec:
    """Sampling domain for a 1-D potential evaluation."""
    r_min: float = 0.0
    r_max: float = 15.0
    n_grid: Union[int, float] = 20  # float only while holding NaN/partial input

    def validate(self) -> None:
        """Raise ValidationError naming the first offending field."""
        if not is_finite_number(self.r_min):
            raise ValidationError("rMin", f"rMin must be a finite number, got {self.r_min!r}")
        if not is_finite_number(self.r_max):
            raise ValidationError("rMax", f"rMax must be a finite number, got {self.r_max!r}")
        if self.r_max <= self.r_min:
            raise ValidationError(
                "rMax",
                f"rMax ({self.r_max:g}) must be greater than rMin ({self.r_min:g})",
            )
        if not is_finite_number(self.n_grid) or float(self.n_grid) != int(self.n_grid):
            raise ValidationError("nGrid", f"nGrid must be an integer, got {self.n_grid!r}")
        if self.n_grid < 2:
            raise ValidationError("nGrid", f"nGrid must be at least 2, got {int(self.n_grid)}")

    # ── Derived quantities ───────────────────────────────────────────

    @property
    def length(self) -> float:
        self.validate()
        return self.r_max - self.r_min

    @property
    def spacing(self) -> float:
        return self.length / int(self.n_grid)

    @property
    def k_max(self) -> float:
        return math.pi / self.spacing

    @property
    def delta_k(self) -> float:
        return 2 * math.pi / self.length

    @property
    def cutoff_energy(self) -> float:
        return self.k_max ** 2 / 2

    def r_values(self) -> np.ndarray:
        """Sample points rMin + i * spacing for i in [0, nGrid)."""
        return self.r_min + self.spacing * np.arange(int(self.n_grid))

    def to_dict(self) -> dict[str, Any]:
        n_grid = int(self.n_grid) if is_finite_number(self.n_grid) else self.n_grid
        return {"rMin": self.r_min, "rMax": self.r_max, "nGrid": n_grid}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> GridSpec:
        return cls(**{attr: d[key] for key, attr in GRID_FIELDS.items() if key in d})


@dataclass(frozen=True)
class PotentialParameters:
    """
    Parameter set for one potential type.

    Only the field names listed in FIELD_SLOTS for the type are allowed, so
    a set built for one type can never carry another type's fields.
    """
    potential_type: PotentialType
    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        allowed = FIELD_SLOTS[self.potential_type]
        for name in self.values:
            if name not in allowed:
                raise ValidationError(
                    name,
                    f"'{name}' is not a parameter of {self.potential_type.label} "
                    f"(expected one of {', '.join(allowed)})",
                )
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __hash__(self):
        return hash((self.potential_type, tuple(sorted(self.values.items()))))

    @classmethod
    def of(cls, potential_type: Union[str, PotentialType], **values: float) -> PotentialParameters:
        return cls(PotentialType.parse(potential_type), values)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(FIELD_SLOTS[self.potential_type])

    def __getitem__(self, name: str) -> float:
        return self.values[name]

    def to_dict(self) -> dict[str, float]:
        return dict(self.values)


@dataclass
class ParameterModel:
    """
    The editable plot configuration for one UI session.

    Values live in type-independent slots; `parameters` exposes them under
    the field names of the currently selected potential type.
    """
    grid: GridSpec = field(default_factory=GridSpec)
    potential_type: PotentialType = PotentialType.MORSE
    slots: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SLOTS))

    @classmethod
    def from_settings(cls, settings) -> ParameterModel:
        return cls(
            grid=GridSpec(
                r_min=settings.DEFAULT_R_MIN,
                r_max=settings.DEFAULT_R_MAX,
                n_grid=settings.DEFAULT_N_GRID,
            )
        )

    @property
    def parameters(self) -> PotentialParameters:
        mapping = FIELD_SLOTS[self.potential_type]
        return PotentialParameters(
            self.potential_type,
            {name: self.slots[slot] for name, slot in mapping.items()},
        )

    def set_field(self, container: str, key: str, value: Any) -> None:
        """
        Replace a single field of the grid or of the active parameter set.

        Args:
            container: "grid" or "parameters".
            key: Wire field name, e.g. "rMin" or "D".
            value: Number or user text; unparsable text is stored as NaN.
        """
        number = parse_number(value)

        if container == "grid":
            if key not in GRID_FIELDS:
                raise ValidationError(key, f"Unknown grid field: {key}")
            if key == "nGrid" and math.isfinite(number) and number.is_integer():
                number = int(number)
            self.grid = replace(self.grid, **{GRID_FIELDS[key]: number})
        elif container == "parameters":
            mapping = FIELD_SLOTS[self.potential_type]
            if key not in mapping:
                raise ValidationError(
                    key,
                    f"'{key}' is not a parameter of {self.potential_type.label}",
                )
            self.slots[mapping[key]] = number
        else:
            raise ValueError(f"Unknown container: {container!r}")

    def set_potential_type(self, potential_type: Union[str, PotentialType]) -> None:
        """Re-tag the parameter set; slot values carry over."""
        self.potential_type = PotentialType.parse(potential_type)

    def snapshot(self) -> tuple[GridSpec, PotentialType, PotentialParameters]:
        """Immutable copy of the current configuration for request building."""
        return self.grid, self.potential_type, self.parameters

    def to_dict(self) -> dict[str, Any]:
        return {
            "grid": self.grid.to_dict(),
            "plot_type": self.potential_type.value,
            "parameters": self.parameters.to_dict(),
        }
