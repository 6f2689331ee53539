# src/phaseflow/__init__.py
from __future__ import annotations

# Re-export the public API for stable imports
from .errors import (
    PhaseflowError, FormulaError, InvalidIntervalError, UnknownExampleError, ConfigError,
)
from .config import SolverConfig, load_config, default_config, DEFAULT_STEPS
from .dsl.spec import VectorFieldSpec, spec_from_inputs, example_inputs
from .compiler.build import (
    FieldFunction, CompiledField, compile_formula, compile_field, evaluate_constant,
)
from .runtime.results import Trajectory
from .runtime.sim import solve, solve_field
from .library import (
    ExampleLibrary, load_library, builtin_library, lookup_example, example_names,
)


__all__ = [
    # Core entry points
    "solve", "solve_field", "solve_inputs", "lookup_example", "example_names",
    # Data model
    "VectorFieldSpec", "CompiledField", "FieldFunction", "Trajectory", "ExampleLibrary",
    # Compilation
    "compile_formula", "compile_field", "evaluate_constant",
    # UI helpers
    "spec_from_inputs", "example_inputs",
    # Configuration
    "SolverConfig", "load_config", "default_config", "DEFAULT_STEPS",
    "load_library", "builtin_library",
    # Errors
    "PhaseflowError", "FormulaError", "InvalidIntervalError", "UnknownExampleError", "ConfigError",
]


def solve_inputs(dxdt, dydt, x0, y0, time, *, t_min=0.0, steps=None, config=None) -> Trajectory:
    """Build a spec from raw input-field values and solve it in one call.

    This mirrors the "Solve" button of an interactive page: the four text
    fields plus the end time go in, a trajectory comes out.

    Parameters:
        dxdt, dydt: Formulas in `x` and `y`.
        x0, y0: Initial state, as numbers or constant formulas.
        time: End of the interval, as a number or constant formula.
        t_min: Start of the interval (default 0).
        steps: Optional step-count override.
        config: Optional SolverConfig.

    Returns:
        The Trajectory from `solve`.

    Example:
        ::

            from phaseflow import solve_inputs

            traj = solve_inputs("y", "-sin(x)", "3", "0", "16")
            xs, ys = traj.x, traj.y

    See Also:
        spec_from_inputs : Build the spec without solving.
        solve : Solve an existing VectorFieldSpec.
    """
    spec = spec_from_inputs(dxdt, dydt, x0, y0, time, t_min=t_min)
    return solve(spec, steps=steps, config=config)
