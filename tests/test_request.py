"""Tests for the request builder."""

import math

import pytest

from errors import ValidationError
from generator.params import GridSpec, PotentialParameters, PotentialType
from generator.request import GenerationRequest, build_request

MORSE = PotentialParameters.of("Morse", D=100.0, a=1.5, r0=2.0)


class TestValidGrids:
    """build_request() succeeds for every rMin < rMax, nGrid >= 2."""

    @pytest.mark.parametrize("r_min,r_max,n_grid", [
        (-0.0, 10.0, 100),
        (0.0, 1e-6, 2),
        (-50.0, -10.0, 7),
        (1.0, 1.5, 4096),
    ])
    def test_builds(self, r_min, r_max, n_grid):
        request = build_request(GridSpec(r_min, r_max, n_grid), PotentialType.MORSE, MORSE)
        assert isinstance(request, GenerationRequest)

    def test_scenario_morse_payload(self):
        request = build_request(GridSpec(-0.0, 10.0, 100), "Morse", MORSE)
        assert request.to_payload() == {
            "grid": {"rMin": 0.0, "rMax": 10.0, "nGrid": 100},
            "plot_type": "Morse",
            "parameters": {"D": 100.0, "a": 1.5, "r0": 2.0},
        }

    def test_wire_tags_for_opaque_types(self):
        params = PotentialParameters.of("Surface3D", D=1.0, a=1.0, r0=0.0)
        request = build_request(GridSpec(0.0, 1.0, 10), "Surface3D", params)
        assert request.to_payload()["plot_type"] == "surface_3d"

    def test_idempotent(self):
        grid = GridSpec(0.0, 10.0, 100)
        first = build_request(grid, PotentialType.MORSE, MORSE)
        second = build_request(grid, PotentialType.MORSE, MORSE)
        assert first == second
        assert first.to_payload() == second.to_payload()

    def test_request_is_frozen(self):
        request = build_request(GridSpec(0.0, 10.0, 100), "Morse", MORSE)
        with pytest.raises(AttributeError):
            request.plot_type = PotentialType.SOFTCORE

    def test_source_dict_edits_do_not_reach_request(self):
        values = {"D": 100.0, "a": 1.5, "r0": 2.0}
        params = PotentialParameters(PotentialType.MORSE, values)
        request = build_request(GridSpec(0.0, 10.0, 100), "Morse", params)

        values["D"] = math.nan
        assert request.to_payload()["parameters"]["D"] == 100.0

    def test_parameter_values_are_read_only(self):
        request = build_request(GridSpec(0.0, 10.0, 100), "Morse", MORSE)
        with pytest.raises(TypeError):
            request.parameters.values["D"] = math.nan
        assert request.to_payload()["parameters"]["D"] == 100.0

    def test_request_is_hashable(self):
        first = build_request(GridSpec(0.0, 10.0, 100), "Morse", MORSE)
        second = build_request(
            GridSpec(0.0, 10.0, 100),
            "Morse",
            PotentialParameters.of("Morse", r0=2.0, a=1.5, D=100.0),
        )
        assert hash(first) == hash(second)
        assert len({first, second}) == 1


class TestInvalidGrids:
    """build_request() rejects bad grids with a field-specific error."""

    @pytest.mark.parametrize("r_min,r_max", [(5.0, 2.0), (3.0, 3.0)])
    def test_range_inverted(self, r_min, r_max):
        with pytest.raises(ValidationError) as exc:
            build_request(GridSpec(r_min, r_max, 100), "Morse", MORSE)
        assert exc.value.field in ("rMin", "rMax")

    @pytest.mark.parametrize("n_grid", [1, 0, -4, 2.5, math.nan])
    def test_bad_n_grid(self, n_grid):
        with pytest.raises(ValidationError) as exc:
            build_request(GridSpec(0.0, 10.0, n_grid), "Morse", MORSE)
        assert exc.value.field == "nGrid"

    def test_non_finite_bounds(self):
        with pytest.raises(ValidationError) as exc:
            build_request(GridSpec(math.nan, 10.0, 100), "Morse", MORSE)
        assert exc.value.field == "rMin"
        with pytest.raises(ValidationError) as exc:
            build_request(GridSpec(0.0, math.inf, 100), "Morse", MORSE)
        assert exc.value.field == "rMax"


class TestInvalidParameters:
    """build_request() names the non-finite or mismatched parameter."""

    @pytest.mark.parametrize("name", ["D", "a", "r0"])
    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_field(self, name, bad):
        values = {"D": 100.0, "a": 1.5, "r0": 2.0}
        values[name] = bad
        params = PotentialParameters.of("Morse", **values)
        with pytest.raises(ValidationError) as exc:
            build_request(GridSpec(0.0, 10.0, 100), "Morse", params)
        assert exc.value.field == name

    def test_missing_field(self):
        params = PotentialParameters.of("Softcore", q=1.0, a=1.5)
        with pytest.raises(ValidationError) as exc:
            build_request(GridSpec(0.0, 10.0, 100), "Softcore", params)
        assert exc.value.field == "r0"

    def test_type_mismatch(self):
        with pytest.raises(ValidationError) as exc:
            build_request(GridSpec(0.0, 10.0, 100), "Softcore", MORSE)
        assert exc.value.field == "plot_type"

    def test_no_default_substitution(self):
        params = PotentialParameters.of("Morse", D=math.nan, a=1.5, r0=2.0)
        with pytest.raises(ValidationError):
            build_request(GridSpec(0.0, 10.0, 100), "Morse", params)
