# src/phaseflow/compiler/build.py
from __future__ import annotations
import dataclasses
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from phaseflow.config import DEFAULT_MAX_FORMULA_LENGTH
from phaseflow.dsl.astcheck import validate_expr
from phaseflow.dsl.spec import VectorFieldSpec
from phaseflow.errors import FormulaError
from .rewrite import Lowered, lower_expr_node, parse_expr, source_offset

__all__ = [
    "FieldFunction",
    "CompiledField",
    "compile_formula",
    "compile_field",
    "evaluate_constant",
]


@dataclass(frozen=True)
class FieldFunction:
    """
    A compiled formula. Calling it with one value per variable returns a
    float64; division by zero, overflow and domain errors give inf/nan
    instead of raising.
    """
    formula: str
    variables: Tuple[str, ...]
    fn: Lowered = dataclasses.field(repr=False, compare=False)

    def __call__(self, *values: float) -> np.float64:
        if len(values) != len(self.variables):
            raise TypeError(
                f"Formula {self.formula!r} expects {len(self.variables)} value(s) "
                f"for {self.variables}, got {len(values)}"
            )
        with np.errstate(all="ignore"):
            return self.fn(tuple(np.float64(v) for v in values))


@dataclass(frozen=True)
class CompiledField:
    """The pair of right-hand sides of dx/dt = f(x, y), dy/dt = g(x, y)."""
    dxdt: FieldFunction
    dydt: FieldFunction

    def __call__(self, x: float, y: float) -> Tuple[np.float64, np.float64]:
        return self.dxdt(x, y), self.dydt(x, y)


def compile_formula(
    formula: str,
    *,
    variables: Sequence[str] = ("x", "y"),
    field: Optional[str] = None,
    max_length: Optional[int] = None,
) -> FieldFunction:
    """
    Compile a formula string into a FieldFunction.

    Parsing uses the `ast` module in eval mode; the tree is checked against
    the whitelist in `phaseflow.dsl.astcheck` and then lowered to closures.

    Raises:
        FormulaError: syntax error, disallowed name/construct, or formula too long.
    """
    if not isinstance(formula, str):
        raise FormulaError(repr(formula), "formula must be a string", field=field)
    limit = DEFAULT_MAX_FORMULA_LENGTH if max_length is None else max_length
    if len(formula) > limit:
        raise FormulaError(
            formula,
            f"formula is longer than {limit} characters",
            field=field,
        )
    variables = tuple(variables)
    tree = parse_expr(formula, field=field)
    validate_expr(
        tree,
        formula,
        variables=variables,
        offset_map=lambda col: source_offset(formula, col),
        field=field,
    )
    fn = lower_expr_node(tree, variables)
    return FieldFunction(formula=formula, variables=variables, fn=fn)


def compile_field(spec: VectorFieldSpec, *, max_length: Optional[int] = None) -> CompiledField:
    """Compile both formulas of `spec`; errors are tagged with 'dxdt' or 'dydt'."""
    return CompiledField(
        dxdt=compile_formula(spec.dxdt, field="dxdt", max_length=max_length),
        dydt=compile_formula(spec.dydt, field="dydt", max_length=max_length),
    )


def evaluate_constant(text: str, *, field: Optional[str] = None) -> float:
    """Evaluate a formula with no free variables, e.g. '2*pi' or '-3.5'."""
    return float(compile_formula(text, variables=(), field=field)())
