# src/phaseflow/errors.py
from __future__ import annotations
from typing import Sequence

__all__ = [
    "PhaseflowError",
    "FormulaError",
    "InvalidIntervalError",
    "UnknownExampleError",
    "ConfigError",
]

# Longest formula text rendered in full inside an error message
_EXCERPT_WIDTH = 80


def _excerpt(formula: str, offset: int | None) -> tuple[str, int | None]:
    """Cut `formula` to a window around `offset`; return (text, offset within text)."""
    if len(formula) <= _EXCERPT_WIDTH:
        return formula, offset
    start = 0
    if offset is not None:
        start = max(0, min(offset - _EXCERPT_WIDTH // 2, len(formula) - _EXCERPT_WIDTH))
    prefix = "..." if start > 0 else ""
    suffix = "..." if start + _EXCERPT_WIDTH < len(formula) else ""
    text = prefix + formula[start:start + _EXCERPT_WIDTH] + suffix
    if offset is not None:
        offset = offset - start + len(prefix)
    return text, offset


class PhaseflowError(Exception):
    """Base error for the phaseflow package."""


class FormulaError(PhaseflowError, ValueError):
    """
    Raised when a formula fails to parse or uses a non-whitelisted name.

    `formula` is always the full text; the message shows at most
    _EXCERPT_WIDTH characters of it around `offset`.
    """
    def __init__(
        self,
        formula: str,
        reason: str,
        *,
        field: str | None = None,
        offset: int | None = None,
    ):
        self.formula = formula
        self.reason = reason
        self.field = field
        self.offset = offset
        where = f" in {field}" if field else ""
        msg = f"Invalid formula{where}: {reason}\n"
        shown, caret = _excerpt(formula, offset)
        msg += f"  {shown}"
        if caret is not None and 0 <= caret <= len(shown):
            msg += "\n  " + " " * caret + "^"
        super().__init__(msg)

    def with_field(self, field: str) -> "FormulaError":
        """Return a copy of this error tagged with the input field name."""
        return FormulaError(self.formula, self.reason, field=field, offset=self.offset)


class InvalidIntervalError(PhaseflowError, ValueError):
    """Raised when the time interval cannot be stepped (zero length or non-finite)."""
    def __init__(self, t_min: float, t_max: float, reason: str):
        self.t_min = t_min
        self.t_max = t_max
        self.reason = reason
        super().__init__(f"Invalid time interval [{t_min}, {t_max}]: {reason}")


class UnknownExampleError(PhaseflowError, KeyError):
    """Raised when an example name is not in the library."""
    def __init__(self, name: str, available: Sequence[str]):
        self.name = name
        self.available = tuple(available)
        msg = f"Unknown example: {name!r}\n"
        if self.available:
            msg += "Available examples:\n"
            for a in self.available:
                msg += f"  - {a}\n"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise
        return self.args[0]


class ConfigError(PhaseflowError):
    """Raised when a configuration or library file is malformed or invalid."""
    def __init__(self, message: str):
        super().__init__(message)
