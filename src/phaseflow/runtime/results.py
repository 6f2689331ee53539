# src/phaseflow/runtime/results.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Tuple, overload
import numpy as np

__all__ = ["Trajectory"]

Point = Tuple[float, float]


@dataclass(frozen=True, eq=False)
class Trajectory:
    """
    Sampled solution of a planar ODE, ordered by time.

    Fields:
      - t, x, y: float64 arrays of length steps + 1 (read-only)
      - stepper: name of the stepper that produced it

    Notes:
      - t[i] = t_min + i*h; t_max < t_min gives decreasing times.
      - Index 0 is exactly the initial state.
      - Points may be nan/inf once the field blows up; plotting code is
        expected to drop them (see `finite_mask`).
    """
    t: np.ndarray
    x: np.ndarray
    y: np.ndarray
    stepper: str = "rk4"

    def __post_init__(self):
        for name in ("t", "x", "y"):
            arr = np.array(getattr(self, name), dtype=np.float64)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)
        if not (self.t.shape == self.x.shape == self.y.shape) or self.t.ndim != 1:
            raise ValueError(
                f"t, x, y must be 1-D arrays of equal length, got shapes "
                f"{self.t.shape}, {self.x.shape}, {self.y.shape}"
            )

    # ---------------- sequence protocol ----------------

    def __len__(self) -> int:
        return self.t.shape[0]

    @overload
    def __getitem__(self, i: int) -> Point: ...
    @overload
    def __getitem__(self, i: slice) -> Tuple[Point, ...]: ...

    def __getitem__(self, i):
        if isinstance(i, slice):
            return tuple(zip(self.x[i].tolist(), self.y[i].tolist()))
        return (float(self.x[i]), float(self.y[i]))

    def __iter__(self) -> Iterator[Point]:
        return iter(zip(self.x.tolist(), self.y.tolist()))

    # ---------------- views ----------------

    @property
    def points(self) -> Tuple[Point, ...]:
        return tuple(self)

    @property
    def steps(self) -> int:
        return len(self) - 1

    @property
    def initial_point(self) -> Point:
        return self[0]

    @property
    def final_point(self) -> Point:
        return self[-1]

    def as_array(self) -> np.ndarray:
        """Return a (steps + 1, 2) copy with columns x, y."""
        return np.column_stack((self.x, self.y))

    def finite_mask(self) -> np.ndarray:
        """Boolean mask of points whose coordinates are both finite."""
        return np.isfinite(self.x) & np.isfinite(self.y)

    @property
    def all_finite(self) -> bool:
        return bool(self.finite_mask().all())
