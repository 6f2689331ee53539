# tests/unit/test_dsl_spec.py
from __future__ import annotations
import dataclasses
import math

import pytest

from phaseflow.dsl.spec import VectorFieldSpec, example_inputs, spec_from_inputs
from phaseflow.errors import FormulaError
from phaseflow.library import lookup_example


def test_spec_coerces_numbers_to_float():
    spec = VectorFieldSpec("y", "-x", x0=1, y0=2, t_min=0, t_max=5)
    for name in ("x0", "y0", "t_min", "t_max"):
        assert type(getattr(spec, name)) is float
    assert spec.x0 == 1.0 and spec.t_max == 5.0


def test_spec_is_frozen():
    spec = VectorFieldSpec("y", "-x")
    with pytest.raises(dataclasses.FrozenInstanceError):
        spec.x0 = 1.0  # type: ignore[misc]


def test_spec_replace_returns_copy():
    spec = VectorFieldSpec("y", "-x", x0=1.0, t_max=2.0)
    other = spec.replace(x0=4, dydt="-x-y")
    assert other.x0 == 4.0
    assert other.dydt == "-x-y"
    assert spec.x0 == 1.0
    assert spec.dydt == "-x"


def test_spec_equality_by_value():
    assert VectorFieldSpec("y", "-x", x0=1) == VectorFieldSpec("y", "-x", x0=1.0)


def test_spec_keeps_invalid_formulas_as_text():
    # compilation happens at solve time
    spec = VectorFieldSpec("x +", "import os")
    assert spec.dxdt == "x +"


def test_spec_from_inputs_text_fields():
    spec = spec_from_inputs("y", "-x", "3", "0", "2*pi")
    assert spec.dxdt == "y"
    assert spec.dydt == "-x"
    assert spec.x0 == 3.0
    assert spec.y0 == 0.0
    assert spec.t_min == 0.0
    assert spec.t_max == pytest.approx(2 * math.pi)


def test_spec_from_inputs_numbers_and_t_min():
    spec = spec_from_inputs("y", "-x", 1, -0.5, 10.0, t_min="1/2")
    assert (spec.x0, spec.y0, spec.t_min, spec.t_max) == (1.0, -0.5, 0.5, 10.0)


@pytest.mark.parametrize(
    "kwargs, field",
    [
        (dict(x0="abc", y0="0", time="1"), "x0"),
        (dict(x0="0", y0="1+", time="1"), "y0"),
        (dict(x0="0", y0="0", time=""), "time"),
    ],
)
def test_spec_from_inputs_bad_numeric_text(kwargs, field):
    with pytest.raises(FormulaError) as exc_info:
        spec_from_inputs("y", "-x", **kwargs)
    assert exc_info.value.field == field


def test_spec_from_inputs_rejects_bool():
    with pytest.raises(TypeError):
        spec_from_inputs("y", "-x", True, 0, 1)


def test_example_inputs_round_trip_through_spec_from_inputs():
    spec = lookup_example("Predator-Prey")
    fields = example_inputs(spec)
    assert fields == {
        "dxdt": "x-x*y", "dydt": "x*y-y", "x0": "2.0", "y0": "3.0", "time": "8.0", "t_min": "0.0",
    }
    again = spec_from_inputs(**fields)
    assert again == spec


@pytest.mark.parametrize("t_min", [-1.0, 2.5, -math.pi])
def test_example_inputs_keep_nonzero_t_min(t_min):
    spec = VectorFieldSpec("-x", "-2*y", x0=0.5, y0=1.0, t_min=t_min, t_max=math.e)
    fields = example_inputs(spec)
    assert fields["t_min"] == str(t_min)
    assert spec_from_inputs(**fields) == spec
