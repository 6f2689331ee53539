# src/phaseflow/dsl/spec.py
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Dict, Union

__all__ = [
    "VectorFieldSpec",
    "spec_from_inputs",
    "example_inputs",
]

Number = Union[int, float]


@dataclass(frozen=True)
class VectorFieldSpec:
    """
    A planar ODE problem as authored by the user:

        dx/dt = dxdt(x, y),  dy/dt = dydt(x, y),  (x, y)(t_min) = (x0, y0)

    Formulas are kept as text; compile them with
    `phaseflow.compiler.build.compile_field`. The interval is validated at
    solve time so that a spec can hold whatever the user typed.
    """
    dxdt: str
    dydt: str
    x0: float = 0.0
    y0: float = 0.0
    t_min: float = 0.0
    t_max: float = 1.0

    def __post_init__(self):
        for name in ("x0", "y0", "t_min", "t_max"):
            object.__setattr__(self, name, float(getattr(self, name)))

    def replace(self, **changes) -> "VectorFieldSpec":
        return replace(self, **changes)


def _to_float(value: Union[str, Number], field: str) -> float:
    if isinstance(value, str):
        from phaseflow.compiler.build import evaluate_constant
        return evaluate_constant(value, field=field)
    if isinstance(value, bool):
        raise TypeError(f"{field} must be a number or text, got bool")
    return float(value)


def spec_from_inputs(
    dxdt: str,
    dydt: str,
    x0: Union[str, Number],
    y0: Union[str, Number],
    time: Union[str, Number],
    *,
    t_min: Union[str, Number] = 0.0,
) -> VectorFieldSpec:
    """
    Build a spec from the raw values of the input fields (the "Solve" action).

    Numeric fields accept numbers or constant formulas such as "2*pi".
    `time` is the end of the interval that starts at `t_min`.

    Raises:
        FormulaError: a numeric field is not a valid constant formula;
            `field` names the input ('x0', 'y0', 'time' or 't_min').
    """
    return VectorFieldSpec(
        dxdt=dxdt,
        dydt=dydt,
        x0=_to_float(x0, "x0"),
        y0=_to_float(y0, "y0"),
        t_min=_to_float(t_min, "t_min"),
        t_max=_to_float(time, "time"),
    )


def example_inputs(spec: VectorFieldSpec) -> Dict[str, str]:
    """
    Input-field values that display `spec` (the example dropdown action).

    The result feeds straight back into `spec_from_inputs(**fields)` and
    yields an equal spec.
    """
    return {
        "dxdt": spec.dxdt,
        "dydt": spec.dydt,
        "x0": str(spec.x0),
        "y0": str(spec.y0),
        "time": str(spec.t_max),
        "t_min": str(spec.t_min),
    }
