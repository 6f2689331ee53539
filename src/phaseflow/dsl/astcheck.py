# src/phaseflow/dsl/astcheck.py
from __future__ import annotations
from typing import Callable, Dict, Optional, Sequence
import ast

from phaseflow.errors import FormulaError

__all__ = [
    "FUNCTION_ARITY",
    "CONSTANT_NAMES",
    "validate_expr",
]

# Whitelisted callables: name -> number of positional arguments
FUNCTION_ARITY: Dict[str, int] = {
    "sin": 1, "cos": 1, "tan": 1,
    "asin": 1, "acos": 1, "atan": 1,
    "sinh": 1, "cosh": 1, "tanh": 1,
    "exp": 1, "log": 1, "log10": 1, "sqrt": 1, "abs": 1,
    "atan2": 2, "hypot": 2, "min": 2, "max": 2,
}

CONSTANT_NAMES = frozenset({"pi", "e", "tau"})

_ALLOWED_BINOPS = (ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Pow, ast.Mod)
_ALLOWED_UNARYOPS = (ast.UAdd, ast.USub)

# Friendlier wording for common non-arithmetic syntax
_UNSUPPORTED: Dict[type, str] = {
    ast.Compare: "comparisons are not supported",
    ast.BoolOp: "boolean operators are not supported",
    ast.IfExp: "conditional expressions are not supported",
    ast.Attribute: "attribute access is not allowed",
    ast.Subscript: "indexing is not allowed",
    ast.Lambda: "lambda expressions are not allowed",
    ast.ListComp: "comprehensions are not allowed",
    ast.SetComp: "comprehensions are not allowed",
    ast.DictComp: "comprehensions are not allowed",
    ast.GeneratorExp: "comprehensions are not allowed",
    ast.NamedExpr: "assignment expressions are not allowed",
    ast.Tuple: "tuples are not allowed",
    ast.List: "lists are not allowed",
    ast.Set: "sets are not allowed",
    ast.Dict: "dicts are not allowed",
    ast.JoinedStr: "string literals are not allowed",
    ast.Starred: "star-arguments are not allowed",
    ast.Await: "await is not allowed",
}


def _describe_allowed(variables: Sequence[str]) -> str:
    parts = []
    if variables:
        parts.append("variables: " + ", ".join(variables))
    parts.append("constants: " + ", ".join(sorted(CONSTANT_NAMES)))
    parts.append("functions: " + ", ".join(sorted(FUNCTION_ARITY)))
    return "; ".join(parts)


class _Checker(ast.NodeVisitor):
    """
    Walk an expression tree and reject anything outside the arithmetic whitelist.

    Each visit_* method checks one node and returns the children still to
    be checked; `check` drives the walk with an explicit stack, so a long
    flat sum (a deep left-leaning BinOp chain) does not hit the
    interpreter's recursion limit.
    """

    def __init__(self, formula: str, variables: Sequence[str], offset_map: Callable[[int], Optional[int]], field: Optional[str]):
        self.formula = formula
        self.variables = tuple(variables)
        self.offset_map = offset_map
        self.field = field

    def fail(self, node: ast.AST, reason: str) -> None:
        col = getattr(node, "col_offset", None)
        if getattr(node, "lineno", 1) != 1:
            col = None
        offset = self.offset_map(col) if col is not None else None
        raise FormulaError(self.formula, reason, field=self.field, offset=offset)

    def check(self, tree: ast.AST) -> None:
        # pre-order, left to right: the first error reported is the leftmost one
        stack = [tree]
        while stack:
            node = stack.pop()
            children = self.visit(node)
            if children:
                stack.extend(reversed(children))

    def generic_visit(self, node: ast.AST):
        reason = _UNSUPPORTED.get(type(node), f"unsupported syntax ({type(node).__name__})")
        self.fail(node, reason)

    def visit_Expression(self, node: ast.Expression):
        return [node.body]

    def visit_BinOp(self, node: ast.BinOp):
        if not isinstance(node.op, _ALLOWED_BINOPS):
            self.fail(node, f"operator {type(node.op).__name__} is not supported")
        return [node.left, node.right]

    def visit_UnaryOp(self, node: ast.UnaryOp):
        if not isinstance(node.op, _ALLOWED_UNARYOPS):
            self.fail(node, f"operator {type(node.op).__name__} is not supported")
        return [node.operand]

    def visit_Constant(self, node: ast.Constant):
        value = node.value
        if isinstance(value, bool) or value is None or value is Ellipsis:
            self.fail(node, f"{value!r} is not a number")
        if isinstance(value, (str, bytes)):
            self.fail(node, "string literals are not allowed")
        if isinstance(value, complex):
            self.fail(node, "complex numbers are not supported")
        if not isinstance(value, (int, float)):
            self.fail(node, f"unsupported literal {value!r}")
        try:
            float(value)
        except OverflowError:
            self.fail(node, "numeric literal is too large")

    def visit_Name(self, node: ast.Name):
        name = node.id
        if name in self.variables or name in CONSTANT_NAMES:
            return
        if name in FUNCTION_ARITY:
            self.fail(node, f"function {name!r} must be called, e.g. {name}(...)")
        self.fail(node, f"unknown name {name!r} ({_describe_allowed(self.variables)})")

    def visit_Call(self, node: ast.Call):
        func = node.func
        if not isinstance(func, ast.Name):
            self.fail(node, "only whitelisted functions can be called")
        name = func.id
        if name not in FUNCTION_ARITY:
            if name in self.variables or name in CONSTANT_NAMES:
                self.fail(node, f"{name!r} is not a function")
            self.fail(node, f"unknown function {name!r} ({_describe_allowed(self.variables)})")
        if node.keywords:
            self.fail(node, f"{name}() does not accept keyword arguments")
        for arg in node.args:
            if isinstance(arg, ast.Starred):
                self.fail(arg, "star-arguments are not allowed")
        expected = FUNCTION_ARITY[name]
        if len(node.args) != expected:
            plural = "argument" if expected == 1 else "arguments"
            self.fail(node, f"{name}() takes {expected} {plural}, got {len(node.args)}")
        return list(node.args)


def validate_expr(
    tree: ast.AST,
    formula: str,
    *,
    variables: Sequence[str] = ("x", "y"),
    offset_map: Callable[[int], Optional[int]] | None = None,
    field: str | None = None,
) -> None:
    """
    Raise FormulaError unless `tree` is plain arithmetic over `variables`,
    the whitelisted constants and the whitelisted functions.

    `offset_map` converts a column in the parsed text back to a column in
    `formula` (they differ once '^' has been rewritten to '**').
    """
    _Checker(formula, variables, offset_map or (lambda col: col), field).check(tree)
