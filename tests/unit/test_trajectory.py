# tests/unit/test_trajectory.py
from __future__ import annotations
import dataclasses
import math

import numpy as np
import pytest

from phaseflow.runtime.results import Trajectory


def _traj():
    return Trajectory(t=[0.0, 0.5, 1.0], x=[1.0, 2.0, 3.0], y=[0.0, -1.0, -2.0])


def test_arrays_are_float64_and_read_only():
    traj = _traj()
    for arr in (traj.t, traj.x, traj.y):
        assert arr.dtype == np.float64
        assert not arr.flags.writeable
    with pytest.raises(ValueError):
        traj.x[0] = 5.0


def test_input_arrays_are_copied():
    x = np.array([1.0, 2.0])
    traj = Trajectory(t=[0.0, 1.0], x=x, y=[0.0, 0.0])
    x[0] = 99.0
    assert traj.x[0] == 1.0


def test_trajectory_is_frozen():
    traj = _traj()
    with pytest.raises(dataclasses.FrozenInstanceError):
        traj.stepper = "euler"  # type: ignore[misc]


@pytest.mark.parametrize(
    "t, x, y",
    [
        ([0.0, 1.0], [1.0], [1.0, 2.0]),
        ([[0.0, 1.0]], [[1.0, 2.0]], [[1.0, 2.0]]),
        (0.0, 1.0, 2.0),
    ],
)
def test_shape_validation(t, x, y):
    with pytest.raises(ValueError, match="1-D arrays of equal length"):
        Trajectory(t=t, x=x, y=y)


def test_sequence_protocol():
    traj = _traj()
    assert len(traj) == 3
    assert traj.steps == 2
    assert traj[1] == (2.0, -1.0)
    assert traj[-1] == (3.0, -2.0)
    assert traj[0:2] == ((1.0, 0.0), (2.0, -1.0))
    assert list(traj) == [(1.0, 0.0), (2.0, -1.0), (3.0, -2.0)]
    assert traj.points == tuple(traj)
    assert all(type(v) is float for p in traj for v in p)


def test_initial_and_final_point():
    traj = _traj()
    assert traj.initial_point == (1.0, 0.0)
    assert traj.final_point == (3.0, -2.0)


def test_as_array():
    arr = _traj().as_array()
    assert arr.shape == (3, 2)
    np.testing.assert_array_equal(arr[:, 0], [1.0, 2.0, 3.0])
    np.testing.assert_array_equal(arr[:, 1], [0.0, -1.0, -2.0])


def test_finite_mask():
    traj = Trajectory(t=[0, 1, 2, 3], x=[1.0, math.inf, 2.0, math.nan], y=[0.0, 0.0, -math.inf, 1.0])
    np.testing.assert_array_equal(traj.finite_mask(), [True, False, False, False])
    assert not traj.all_finite
    assert _traj().all_finite


def test_default_stepper_name():
    assert _traj().stepper == "rk4"
