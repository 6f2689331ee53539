# src/phaseflow/compiler/rewrite.py
from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import ast
import re

import numpy as np

from phaseflow.errors import FormulaError

__all__ = ["sanitize_expr", "source_offset", "parse_expr", "lower_expr_node", "Lowered"]

_POW = re.compile(r"\^")

# Lowered expression: evaluates against a tuple of variable values
Lowered = Callable[[Tuple[np.float64, ...]], np.float64]

# Map formula function names -> numpy ufuncs (IEEE semantics, no exceptions)
_MATH_FUNCS: Dict[str, Callable] = {
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "asin": np.arcsin,
    "acos": np.arccos,
    "atan": np.arctan,
    "sinh": np.sinh,
    "cosh": np.cosh,
    "tanh": np.tanh,
    "exp": np.exp,
    "log": np.log,
    "log10": np.log10,
    "sqrt": np.sqrt,
    "abs": np.abs,
    "atan2": np.arctan2,
    "hypot": np.hypot,
    "min": np.minimum,
    "max": np.maximum,
}

_CONSTANTS: Dict[str, np.float64] = {
    "pi": np.float64(np.pi),
    "e": np.float64(np.e),
    "tau": np.float64(2.0 * np.pi),
}

_BINOPS: Dict[type, Callable] = {
    ast.Add: np.add,
    ast.Sub: np.subtract,
    ast.Mult: np.multiply,
    ast.Div: np.true_divide,
    ast.Pow: np.power,
    ast.Mod: np.remainder,
}


def sanitize_expr(expr: str) -> str:
    """Normalize formula math to Python."""
    expr = expr.strip()
    expr = _POW.sub("**", expr)
    return expr


def source_offset(formula: str, col: int) -> Optional[int]:
    """Map a column of sanitize_expr(formula) back to a column of formula."""
    lead = len(formula) - len(formula.lstrip())
    body = formula.strip()
    pos = 0
    for i, ch in enumerate(body):
        if pos >= col:
            return lead + i
        pos += 2 if ch == "^" else 1
    return lead + len(body)


def parse_expr(formula: str, *, field: str | None = None) -> ast.Expression:
    """Parse a formula into an `ast.Expression`, raising FormulaError on bad syntax."""
    text = sanitize_expr(formula)
    if not text:
        raise FormulaError(formula, "formula is empty", field=field)
    try:
        return ast.parse(text, mode="eval")
    except SyntaxError as e:
        offset = None
        if e.lineno in (None, 1) and e.offset is not None:
            offset = source_offset(formula, max(e.offset - 1, 0))
        reason = e.msg or "invalid syntax"
        raise FormulaError(formula, reason, field=field, offset=offset) from None
    except (RecursionError, MemoryError):
        raise FormulaError(formula, "expression is nested too deeply", field=field) from None
    except ValueError as e:
        # e.g. integer literals beyond the int/str conversion limit, NUL bytes
        raise FormulaError(formula, str(e), field=field) from None


# Postfix instructions: (kind, arg, nargs)
_LOAD_VAR = 0      # push env[arg]
_PUSH_CONST = 1    # push arg
_APPLY = 2         # pop nargs values, push arg(*values)

Instr = Tuple[int, Any, int]


def _operator(node: ast.AST) -> Optional[Tuple[Callable, int]]:
    """(function, arity) applied once the operands of `node` are on the stack."""
    if isinstance(node, ast.UnaryOp):
        if isinstance(node.op, ast.UAdd):
            return None
        return np.negative, 1
    if isinstance(node, ast.BinOp):
        return _BINOPS[type(node.op)], 2
    return _MATH_FUNCS[node.func.id], len(node.args)


def _operands(node: ast.AST) -> List[ast.AST]:
    if isinstance(node, ast.UnaryOp):
        return [node.operand]
    if isinstance(node, ast.BinOp):
        return [node.left, node.right]
    return list(node.args)


def _emit(tree: ast.AST, slots: Dict[str, int]) -> List[Instr]:
    code: List[Instr] = []
    # (node, operands_done); post-order with an explicit stack
    stack: List[Tuple[ast.AST, bool]] = [(tree, False)]
    while stack:
        node, done = stack.pop()
        if isinstance(node, ast.Expression):
            stack.append((node.body, False))
        elif isinstance(node, ast.Constant):
            code.append((_PUSH_CONST, np.float64(node.value), 0))
        elif isinstance(node, ast.Name):
            if node.id in slots:
                code.append((_LOAD_VAR, slots[node.id], 0))
            else:
                code.append((_PUSH_CONST, _CONSTANTS[node.id], 0))
        elif isinstance(node, (ast.UnaryOp, ast.BinOp, ast.Call)):
            if done:
                op = _operator(node)
                if op is not None:
                    fn, nargs = op
                    code.append((_APPLY, fn, nargs))
            else:
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(_operands(node)))
        else:
            # validate_expr runs first; anything else is a bug
            raise TypeError(f"Cannot lower node {type(node).__name__}")
    return code


def _run(code: Tuple[Instr, ...], env: Tuple[np.float64, ...]) -> np.float64:
    values: List[np.float64] = []
    for kind, arg, nargs in code:
        if kind == _LOAD_VAR:
            values.append(env[arg])
        elif kind == _PUSH_CONST:
            values.append(arg)
        elif nargs == 1:
            values[-1] = arg(values[-1])
        else:
            rhs = values.pop()
            values[-1] = arg(values[-1], rhs)
    return values[-1]


def lower_expr_node(tree: ast.AST, variables: Sequence[str]) -> Lowered:
    """
    Lower a validated expression tree to a postfix program.

    The returned callable takes a tuple of float64 values ordered like
    `variables` and returns a float64. It never evaluates Python source,
    and neither lowering nor evaluation recurses on the tree depth.
    """
    slots = {name: i for i, name in enumerate(variables)}
    code = tuple(_emit(tree, slots))
    return lambda env: _run(code, env)
