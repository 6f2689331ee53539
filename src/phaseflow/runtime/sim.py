# src/phaseflow/runtime/sim.py
from __future__ import annotations
from typing import Optional
import math

import numpy as np

from phaseflow.compiler.build import CompiledField, compile_field
from phaseflow.config import SolverConfig, default_config, validate_steps
from phaseflow.dsl.spec import VectorFieldSpec
from phaseflow.errors import InvalidIntervalError
from phaseflow.steppers.base import StepperSpec
from phaseflow.steppers.rk4 import RK4Spec

from .results import Trajectory

__all__ = ["solve", "solve_field", "check_interval"]

_RK4 = RK4Spec()


def check_interval(t_min: float, t_max: float) -> None:
    """
    Raise InvalidIntervalError unless [t_min, t_max] can be stepped.

    t_max < t_min is accepted and integrates backward in time.
    """
    if not (math.isfinite(t_min) and math.isfinite(t_max)):
        raise InvalidIntervalError(t_min, t_max, "interval bounds must be finite")
    if t_max == t_min:
        raise InvalidIntervalError(t_min, t_max, "t_max equals t_min, step size would be zero")


def solve_field(
    field: CompiledField,
    x0: float,
    y0: float,
    t_min: float,
    t_max: float,
    *,
    steps: int = 250,
    stepper: Optional[StepperSpec] = None,
) -> Trajectory:
    """
    Integrate a compiled field with `steps` fixed steps of h = (t_max - t_min)/steps.

    Returns a Trajectory of steps + 1 points starting at (x0, y0).
    nan/inf values produced along the way are kept in the output.

    Raises:
        InvalidIntervalError: t_max == t_min or a non-finite bound.
        ConfigError: steps is not a positive integer.
    """
    validate_steps(steps)
    t_min = float(t_min)
    t_max = float(t_max)
    check_interval(t_min, t_max)
    stepper = stepper if stepper is not None else _RK4

    h = (t_max - t_min) / steps
    if h == 0.0 or not math.isfinite(h):
        raise InvalidIntervalError(t_min, t_max, f"step size {h!r} for {steps} steps is not usable")

    step = stepper.emit(field)

    T = t_min + h * np.arange(steps + 1, dtype=np.float64)
    X = np.empty(steps + 1, dtype=np.float64)
    Y = np.empty(steps + 1, dtype=np.float64)

    x = np.float64(x0)
    y = np.float64(y0)
    X[0] = x
    Y[0] = y
    with np.errstate(all="ignore"):
        for i in range(1, steps + 1):
            x, y = step(x, y, h)
            X[i] = x
            Y[i] = y

    return Trajectory(t=T, x=X, y=Y, stepper=stepper.meta.name)


def solve(
    spec: VectorFieldSpec,
    *,
    steps: Optional[int] = None,
    config: Optional[SolverConfig] = None,
) -> Trajectory:
    """Compile the formulas of `spec` and integrate them with RK4.

    Both formulas are compiled before any step is taken, so malformed input
    fails fast. The step count comes from `steps`, else `config.steps`, else
    the process-wide `default_config()` (250 by default).

    Parameters:
        spec: The problem to solve.
        steps: Optional step-count override.
        config: Optional SolverConfig; `default_config()` if None.

    Returns:
        A Trajectory with steps + 1 points; point 0 equals (spec.x0, spec.y0).

    Raises:
        FormulaError: a formula fails to parse or uses a non-whitelisted name.
        InvalidIntervalError: spec.t_max == spec.t_min or a non-finite bound.
        ConfigError: invalid step count or configuration file.

    Example:
        Solve the harmonic oscillator over one period::

            from phaseflow import VectorFieldSpec, solve

            spec = VectorFieldSpec("y", "-x", x0=1.0, y0=0.0, t_min=0.0, t_max=6.283185307179586)
            traj = solve(spec)
            traj.final_point  # ~ (1.0, 0.0)
    """
    if config is None:
        config = default_config()
    field = compile_field(spec, max_length=config.max_formula_length)
    n = config.steps if steps is None else steps
    return solve_field(field, spec.x0, spec.y0, spec.t_min, spec.t_max, steps=n)
