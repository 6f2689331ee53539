# src/phaseflow/steppers/base.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Literal, Protocol, Tuple

import numpy as np

__all__ = ["StepperMeta", "StepperSpec", "StepFn"]

TimeCtrl = Literal["fixed", "adaptive"]
Scheme = Literal["explicit", "implicit"]

# step(x, y, h) -> (x_next, y_next)
StepFn = Callable[[np.float64, np.float64, float], Tuple[np.float64, np.float64]]


@dataclass(frozen=True)
class StepperMeta:
    """Public metadata for a stepper."""
    name: str
    time_control: TimeCtrl = "fixed"
    scheme: Scheme = "explicit"
    family: str = ""
    order: int = 1
    aliases: tuple[str, ...] = ()


class StepperSpec(Protocol):
    """
    Interface for steppers used by `phaseflow.runtime.sim`.
    Implementations MUST:
      - expose `meta: StepperMeta`
      - implement `emit(field) -> StepFn`, where `field(x, y)` returns
        the (dx/dt, dy/dt) pair and the step function advances the state
        by one step of size h without side effects.
    """
    meta: StepperMeta

    def emit(self, field: Callable) -> StepFn: ...
