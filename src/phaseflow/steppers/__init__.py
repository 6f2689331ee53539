# src/phaseflow/steppers/__init__.py
from .base import StepperMeta, StepperSpec
from .rk4 import RK4Spec

__all__ = ["StepperMeta", "StepperSpec", "RK4Spec"]
