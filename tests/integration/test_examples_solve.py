# tests/integration/test_examples_solve.py
"""
Solve every built-in example and check a conserved or decaying quantity.
"""
from __future__ import annotations
import math

import numpy as np
import pytest

from phaseflow import example_names, lookup_example, solve
from phaseflow.dsl.spec import example_inputs, spec_from_inputs


@pytest.mark.parametrize("name", ["Spring", "DampedSpring", "Pendulum", "Predator-Prey"])
def test_example_solves_cleanly(name):
    spec = lookup_example(name)
    traj = solve(spec)
    assert len(traj) == 251
    assert traj.all_finite
    assert traj.initial_point == (spec.x0, spec.y0)
    assert traj.t[0] == spec.t_min
    assert traj.t[-1] == pytest.approx(spec.t_max, rel=1e-12)


def test_every_example_has_a_test():
    assert set(example_names()) == {"Spring", "DampedSpring", "Pendulum", "Predator-Prey"}


def test_spring_conserves_energy():
    traj = solve(lookup_example("Spring"))
    energy = traj.x**2 + traj.y**2
    np.testing.assert_allclose(energy, 9.0, atol=1e-6)
    # one full period
    assert traj.final_point[0] == pytest.approx(3.0, abs=1e-4)


def test_damped_spring_decays():
    traj = solve(lookup_example("DampedSpring"))
    assert math.hypot(*traj.final_point) < 0.1
    radius = np.hypot(traj.x, traj.y)
    assert radius[-1] < radius[0]


def test_pendulum_conserves_energy():
    traj = solve(lookup_example("Pendulum"))
    energy = traj.y**2 / 2 - np.cos(traj.x)
    np.testing.assert_allclose(energy, -math.cos(3.0), atol=1e-2)


def test_predator_prey_conserves_invariant():
    traj = solve(lookup_example("Predator-Prey"))
    assert np.all(traj.x > 0) and np.all(traj.y > 0)
    v = traj.x - np.log(traj.x) + traj.y - np.log(traj.y)
    np.testing.assert_allclose(v, v[0], atol=1e-3)


@pytest.mark.parametrize("name", ["Spring", "Pendulum"])
def test_example_through_input_fields(name):
    # selecting an example fills the fields; solving the fields matches solving the example
    spec = lookup_example(name)
    traj = solve(spec_from_inputs(**example_inputs(spec)))
    direct = solve(spec)
    np.testing.assert_allclose(traj.x, direct.x, rtol=1e-12, atol=1e-12)
    np.testing.assert_allclose(traj.y, direct.y, rtol=1e-12, atol=1e-12)
