# src/phaseflow/plot.py
from __future__ import annotations

from typing import Any

import numpy as np
import matplotlib.pyplot as plt

from phaseflow.runtime.results import Trajectory

__all__ = ["phase_portrait", "trace_arrays"]


def trace_arrays(trajectory: Trajectory) -> tuple[np.ndarray, np.ndarray]:
    """x and y copies with non-finite points replaced by nan (matplotlib skips nan)."""
    mask = trajectory.finite_mask()
    x = np.where(mask, trajectory.x, np.nan)
    y = np.where(mask, trajectory.y, np.nan)
    return x, y


def phase_portrait(
    trajectory: Trajectory,
    ax=None,
    *,
    xlim: tuple[float, float] | None = (-5.0, 5.0),
    ylim: tuple[float, float] | None = (-5.0, 5.0),
    mark_initial: bool = True,
    label: str | None = "Solution",
    legend: bool = True,
    **line_kw: Any,
) -> plt.Axes:
    """
    Plot a trajectory in the (x, y) plane.

    Args:
        trajectory: Result of `phaseflow.solve`.
        ax: Existing axes to draw on; a new figure is created if None.
        xlim, ylim: Axis ranges; None keeps matplotlib's autoscaling.
        mark_initial: Add a marker at the initial point labelled "(x0,y0)".
        label: Legend label for the trajectory line.
        legend: Show a legend when something is labelled.
        **line_kw: Passed to `Axes.plot` for the trajectory line.

    Returns:
        The axes drawn on.
    """
    if ax is None:
        _fig, ax = plt.subplots(figsize=(5.5, 5.0), layout="constrained")

    x, y = trace_arrays(trajectory)
    ax.plot(x, y, linestyle="-", label=label, **line_kw)

    if mark_initial:
        x0, y0 = trajectory.initial_point
        if np.isfinite(x0) and np.isfinite(y0):
            ax.plot([x0], [y0], linestyle="", marker="o", label="(x0,y0)")

    if xlim is not None:
        ax.set_xlim(*xlim)
    if ylim is not None:
        ax.set_ylim(*ylim)
    ax.set_xlabel("x")
    ax.set_ylabel("y")

    if legend and (label or mark_initial):
        ax.legend(loc="best")
    return ax
