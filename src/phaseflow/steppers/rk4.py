# src/phaseflow/steppers/rk4.py
"""
RK4 (Runge-Kutta 4th order, explicit, fixed-step) stepper for planar fields.
"""
from __future__ import annotations
from typing import Callable, Tuple

import numpy as np

from .base import StepFn, StepperMeta

__all__ = ["RK4Spec"]


class RK4Spec:
    """
    Classic 4th-order Runge-Kutta stepper (explicit, fixed-step).

    Formula (autonomous field F):
        k1 = F(p)
        k2 = F(p + h/2 * k1)
        k3 = F(p + h/2 * k2)
        k4 = F(p + h * k3)
        p_{n+1} = p_n + h/6 * (k1 + 2*k2 + 2*k3 + k4)

    Non-finite stages are carried through; nothing here raises on nan/inf.
    """

    def __init__(self, meta: StepperMeta | None = None):
        if meta is None:
            meta = StepperMeta(
                name="rk4",
                time_control="fixed",
                scheme="explicit",
                family="runge-kutta",
                order=4,
                aliases=("rk4_classic", "classical_rk4"),
            )
        self.meta = meta

    def emit(
        self,
        field: Callable[[np.float64, np.float64], Tuple[np.float64, np.float64]],
    ) -> StepFn:
        """Return step(x, y, h) -> (x_next, y_next) for the given field."""

        def rk4_step(x, y, h):
            half = 0.5 * h

            # Stage 1
            k1x, k1y = field(x, y)
            # Stage 2
            k2x, k2y = field(x + half * k1x, y + half * k1y)
            # Stage 3
            k3x, k3y = field(x + half * k2x, y + half * k2y)
            # Stage 4
            k4x, k4y = field(x + h * k3x, y + h * k3y)

            w = h / 6.0
            x_next = x + w * (k1x + 2.0 * k2x + 2.0 * k3x + k4x)
            y_next = y + w * (k1y + 2.0 * k2y + 2.0 * k3y + k4y)
            return x_next, y_next

        return rk4_step
