"""Tests for the parameter model (grid and potential parameter state)."""

import math

import numpy as np
import pytest

from errors import ValidationError
from generator.params import (
    GridSpec,
    ParameterModel,
    PotentialParameters,
    PotentialType,
    parse_number,
)


class TestParseNumber:
    """Tests for parse_number()."""

    def test_numeric_text(self):
        assert parse_number("1.5") == 1.5
        assert parse_number(" -2 ") == -2.0

    def test_numbers_pass_through(self):
        assert parse_number(3) == 3.0
        assert parse_number(2.5) == 2.5

    def test_garbage_becomes_nan(self):
        assert math.isnan(parse_number("abc"))
        assert math.isnan(parse_number(""))
        assert math.isnan(parse_number(None))

    def test_expressions_are_not_evaluated(self):
        assert math.isnan(parse_number("2*3"))
        assert math.isnan(parse_number("__import__('os')"))


class TestPotentialType:
    """Tests for PotentialType parsing and wire tags."""

    def test_wire_tags(self):
        assert PotentialType.MORSE.value == "Morse"
        assert PotentialType.SOFTCORE.value == "Softcore"
        assert PotentialType.SURFACE_3D.value == "surface_3d"
        assert PotentialType.ENERGY_LEVELS.value == "energy_levels"

    def test_parse_accepts_tag_label_and_name(self):
        assert PotentialType.parse("surface_3d") is PotentialType.SURFACE_3D
        assert PotentialType.parse("Surface3D") is PotentialType.SURFACE_3D
        assert PotentialType.parse("ENERGY_LEVELS") is PotentialType.ENERGY_LEVELS

    def test_parse_unknown(self):
        with pytest.raises(ValidationError) as exc:
            PotentialType.parse("Harmonic")
        assert exc.value.field == "plot_type"


class TestGridSpec:
    """Tests for GridSpec validation and derived quantities."""

    def test_derived_quantities(self):
        grid = GridSpec(r_min=0.0, r_max=10.0, n_grid=100)
        assert grid.length == 10.0
        assert grid.spacing == pytest.approx(0.1)
        assert grid.k_max == pytest.approx(math.pi / 0.1)
        assert grid.delta_k == pytest.approx(2 * math.pi / 10.0)
        assert grid.cutoff_energy == pytest.approx((math.pi / 0.1) ** 2 / 2)

    def test_r_values(self):
        grid = GridSpec(r_min=-1.0, r_max=1.0, n_grid=4)
        np.testing.assert_allclose(grid.r_values(), [-1.0, -0.5, 0.0, 0.5])

    def test_derived_quantities_reject_invalid_grid(self):
        with pytest.raises(ValidationError):
            GridSpec(r_min=5.0, r_max=2.0, n_grid=10).spacing

    def test_to_dict_uses_wire_names(self):
        assert GridSpec(0.0, 10.0, 100).to_dict() == {"rMin": 0.0, "rMax": 10.0, "nGrid": 100}

    def test_from_dict(self):
        grid = GridSpec.from_dict({"rMin": 1.0, "rMax": 4.0, "nGrid": 8})
        assert grid == GridSpec(1.0, 4.0, 8)


class TestPotentialParameters:
    """Tests for the per-type parameter sets."""

    def test_fields_follow_type(self):
        assert PotentialParameters.of("Morse", D=1, a=1, r0=1).fields == ("D", "a", "r0")
        assert PotentialParameters.of("Softcore", q=1, a=1, r0=1).fields == ("q", "a", "r0")

    def test_foreign_field_rejected(self):
        with pytest.raises(ValidationError) as exc:
            PotentialParameters.of("Softcore", D=100.0, a=1.5, r0=2.0)
        assert exc.value.field == "D"

    def test_values_are_copied(self):
        values = {"D": 1.0, "a": 2.0, "r0": 3.0}
        params = PotentialParameters(PotentialType.MORSE, values)
        values["D"] = 99.0
        assert params["D"] == 1.0


class TestParameterModel:
    """Tests for ParameterModel field updates and type switching."""

    def setup_method(self):
        self.model = ParameterModel()

    def test_defaults(self):
        assert self.model.potential_type is PotentialType.MORSE
        assert self.model.parameters.to_dict() == {"D": 100.0, "a": 1.5, "r0": 2.0}

    def test_set_grid_field_leaves_others(self):
        self.model.set_field("grid", "rMax", "12.5")
        assert self.model.grid.r_max == 12.5
        assert self.model.grid.r_min == 0.0
        assert self.model.grid.n_grid == 20

    def test_n_grid_stored_as_int(self):
        self.model.set_field("grid", "nGrid", "100")
        assert self.model.grid.n_grid == 100
        assert isinstance(self.model.grid.n_grid, int)

    def test_set_parameter_field(self):
        self.model.set_field("parameters", "a", 2.0)
        assert self.model.parameters["a"] == 2.0
        assert self.model.parameters["D"] == 100.0

    def test_non_numeric_text_stored_as_nan(self):
        self.model.set_field("parameters", "r0", "two")
        assert math.isnan(self.model.parameters["r0"])
        self.model.set_field("grid", "nGrid", "lots")
        assert math.isnan(self.model.grid.n_grid)

    def test_no_clamping(self):
        self.model.set_field("parameters", "a", "-5")
        assert self.model.parameters["a"] == -5.0

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            self.model.set_field("parameters", "q", 1.0)  # Morse has no q
        with pytest.raises(ValidationError):
            self.model.set_field("grid", "dr", 0.1)

    def test_unknown_container(self):
        with pytest.raises(ValueError):
            self.model.set_field("layout", "height", 100)

    def test_switch_type_keeps_shared_slots(self):
        self.model.set_field("parameters", "D", 42.0)
        self.model.set_potential_type(PotentialType.SOFTCORE)
        params = self.model.parameters
        assert params.potential_type is PotentialType.SOFTCORE
        assert params.to_dict() == {"q": 42.0, "a": 1.5, "r0": 2.0}

    def test_switch_type_never_forwards_stale_fields(self):
        self.model.set_potential_type("Softcore")
        assert "D" not in self.model.parameters.to_dict()

    def test_grid_edit_does_not_change_snapshot(self):
        grid, _, _ = self.model.snapshot()
        self.model.set_field("grid", "rMin", -3.0)
        assert grid.r_min == 0.0

    def test_from_settings(self):
        class FakeSettings:
            DEFAULT_R_MIN = -1.0
            DEFAULT_R_MAX = 9.0
            DEFAULT_N_GRID = 64

        model = ParameterModel.from_settings(FakeSettings)
        assert model.grid == GridSpec(-1.0, 9.0, 64)
