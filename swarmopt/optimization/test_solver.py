# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import logging
import itertools
import typing as tp
import pytest
import numpy as np
from swarmopt.common import errors
from swarmopt.common import testing
from swarmopt.common import tools
from swarmopt.functions import INFEASIBLE
from . import solver as solverlib
from .solver import SwarmSolver
from .solver import solve


def square(x: np.ndarray) -> float:
    return float(x[0] ** 2)


def bowl(x: np.ndarray) -> float:
    return float(np.sum(x ** 2))


def test_solve_converges_on_square() -> None:
    best_position, final_swarm, final_epoch, min_error = solve(1, 20, -10.0, 10.0, 50, 1e-6, square)
    assert min_error < 1e-6
    assert abs(best_position[0]) < 1e-3
    assert final_epoch <= 50
    assert len(final_swarm) == 20
    np.testing.assert_almost_equal(square(best_position), min_error)


def test_no_epoch_returns_initialization_best() -> None:
    result = solve(3, 7, -5.0, 5.0, 0, 0.0, bowl, seed=12)
    rng = np.random.RandomState(12)
    positions, velocities = [], []
    for _ in range(7):
        positions.append(rng.uniform(-5.0, 5.0, size=3))
        velocities.append(rng.uniform(-0.5, 0.5, size=3))
    errors_ = [bowl(x) for x in positions]
    assert result.final_epoch == 0
    assert result.min_error == min(errors_)
    np.testing.assert_array_equal(result.best_position, positions[int(np.argmin(errors_))])
    for particle, position, velocity, error in zip(result.final_swarm, positions, velocities, errors_):
        np.testing.assert_array_equal(particle.position, position)
        np.testing.assert_array_equal(particle.best_position, position)
        np.testing.assert_array_equal(particle.velocity, velocity)
        assert particle.error == particle.best_error == error


@testing.parametrized(
    symmetric=(-10.0, 10.0, -1.0, 1.0),
    positive=(0.0, np.pi, 0.0, 0.1 * np.pi),
    negative=(-512.0, -2.0, -51.2, -0.2),
)
def test_initial_velocity_bounds(min_x: float, max_x: float, low: float, high: float) -> None:
    result = solve(2, 50, min_x, max_x, 0, 0.0, bowl)
    for particle in result.final_swarm:
        testing.assert_within_bounds(particle.velocity, low, high)
        testing.assert_within_bounds(particle.position, min_x, max_x)


def test_single_particle_step() -> None:
    seed = 24
    with pytest.warns(errors.InefficientSettingsWarning):
        solver = SwarmSolver(dimension=2, particle_count=1, max_epochs=1, seed=seed)
    result = solver.minimize(bowl)
    # replay the random stream
    rng = np.random.RandomState(seed)
    position = rng.uniform(-10.0, 10.0, size=2)
    velocity = rng.uniform(-1.0, 1.0, size=2)
    rng.uniform(size=(2, 2))
    # both personal and global bests are the initial position, only inertia remains
    expected_velocity = 0.729 * velocity
    moved = np.clip(position + expected_velocity, -10.0, 10.0)
    candidates = [bowl(position), bowl(moved)]
    expected_position = moved
    if rng.rand() < 0.01:
        expected_position = rng.uniform(-10.0, 10.0, size=2)
        candidates.append(bowl(expected_position))
    particle = result.final_swarm[0]
    assert result.final_epoch == 1
    np.testing.assert_array_almost_equal(particle.velocity, expected_velocity)
    np.testing.assert_array_almost_equal(particle.position, expected_position)
    np.testing.assert_almost_equal(particle.error, bowl(expected_position))
    np.testing.assert_almost_equal(result.min_error, min(candidates))
    assert solver.num_evaluations == len(candidates)


def test_attraction_steps(monkeypatch: tp.Any) -> None:
    monkeypatch.setattr(solverlib, "RESPAWN_PROBABILITY", 0.0)
    counter = itertools.count()
    # each evaluation is worse than all previous ones, so bests stay at the initial positions
    solver = SwarmSolver(dimension=3, particle_count=2, max_epochs=2, min_accepted_error=-1.0, seed=12)
    result = solver.minimize(lambda x: float(next(counter)))
    rng = np.random.RandomState(12)
    positions, velocities = [], []
    for _ in range(2):
        positions.append(rng.uniform(-10.0, 10.0, size=3))
        velocities.append(rng.uniform(-1.0, 1.0, size=3))
    bests = [x.copy() for x in positions]
    global_best = positions[0].copy()
    for _ in range(2):
        for k in range(2):
            r1, r2 = rng.uniform(size=(3, 2)).T
            velocities[k] = (
                0.729 * velocities[k]
                + 1.49445 * r1 * (bests[k] - positions[k])
                + 1.49445 * r2 * (global_best - positions[k])
            )
            positions[k] = np.clip(positions[k] + velocities[k], -10.0, 10.0)
            rng.rand()
    assert result.final_epoch == 2
    assert result.min_error == 0.0
    np.testing.assert_array_equal(result.best_position, global_best)
    for particle, position, velocity, best, error in zip(result.final_swarm, positions, velocities, bests, [4, 5]):
        np.testing.assert_array_almost_equal(particle.velocity, velocity, decimal=12)
        np.testing.assert_array_almost_equal(particle.position, position, decimal=12)
        np.testing.assert_array_equal(particle.best_position, best)
        assert particle.error == error
    # second epoch attractions are not null
    assert np.all(bests[0] != positions[0])
    assert np.all(bests[1] != positions[1])


def test_global_best_is_non_increasing() -> None:
    history: tp.List[float] = []
    solver = SwarmSolver(dimension=2, particle_count=10, max_epochs=100, seed=3)
    solver.register_callback("epoch", lambda s: history.append(s.swarm.global_best_error))
    result = solver.minimize(bowl)
    assert len(history) == result.final_epoch == 100
    assert tools.is_non_increasing(history)
    assert history[-1] == result.min_error


def test_best_errors_are_consistent() -> None:
    result = solve(2, 30, -10.0, 10.0, 40, 0.0, bowl, seed=5)
    for particle in result.final_swarm:
        assert particle.best_error == bowl(particle.best_position)
        assert particle.error == bowl(particle.position)
        assert particle.best_error <= particle.error
    assert result.min_error <= min(p.best_error for p in result.final_swarm)
    assert result.min_error == bowl(result.best_position)


def test_reproducibility() -> None:
    results = [solve(2, 10, -10.0, 10.0, 60, 1e-12, bowl, seed=42) for _ in range(2)]
    solver = SwarmSolver(dimension=2, particle_count=10, max_epochs=60, min_accepted_error=1e-12, seed=42)
    results += [solver.minimize(bowl) for _ in range(2)]
    for other in results[1:]:
        np.testing.assert_array_equal(other.best_position, results[0].best_position)
        assert other.min_error == results[0].min_error
        assert other.final_epoch == results[0].final_epoch
    different = solve(2, 10, -10.0, 10.0, 60, 1e-12, bowl, seed=43)
    assert different.min_error != results[0].min_error


def test_degenerate_bounds() -> None:
    min_x = 1.0
    max_x = 1.0 + 1e-9
    result = solve(3, 15, min_x, max_x, 30, 0.0, bowl)
    testing.assert_within_bounds(result.best_position, min_x, max_x)
    for particle in result.final_swarm:
        testing.assert_within_bounds(particle.position, min_x, max_x)
        testing.assert_within_bounds(particle.best_position, min_x, max_x)


def test_infeasible_everywhere() -> None:
    result = solve(2, 10, -3.0, 3.0, 25, 0.0, lambda x: INFEASIBLE, seed=7)
    first_position = np.random.RandomState(7).uniform(-3.0, 3.0, size=2)
    assert result.min_error == INFEASIBLE
    assert result.final_epoch == 25
    np.testing.assert_array_equal(result.best_position, first_position)


def test_nan_never_becomes_best() -> None:
    result = solve(2, 4, -1.0, 1.0, 5, 0.0, lambda x: float("nan"), seed=3)
    assert result.min_error == float("inf")
    assert result.final_epoch == 5
    np.testing.assert_array_equal(result.best_position, np.random.RandomState(3).uniform(-1.0, 1.0, size=2))


def test_partially_infeasible() -> None:
    def half_plane(x: np.ndarray) -> float:
        return INFEASIBLE if x[0] < 0 else bowl(x)

    result = solve(2, 20, -10.0, 10.0, 100, 1e-8, half_plane)
    assert result.best_position[0] >= 0
    assert result.min_error < 1e-2


def test_respawn(monkeypatch: tp.Any) -> None:
    respawned: tp.List[int] = []
    solver = SwarmSolver(dimension=2, particle_count=4, max_epochs=10, min_accepted_error=-1.0)
    solver.register_callback("respawn", lambda s, p: respawned.append(id(p)))
    monkeypatch.setattr(solverlib, "RESPAWN_PROBABILITY", 0.0)
    solver.minimize(bowl)
    assert not respawned
    assert solver.num_evaluations == 4 * (1 + 10)
    monkeypatch.setattr(solverlib, "RESPAWN_PROBABILITY", 1.0)
    solver.minimize(bowl)
    assert len(respawned) == 4 * 10
    assert solver.num_evaluations == 4 * (1 + 2 * 10)


def test_respawn_resets_personal_best() -> None:
    solver = SwarmSolver(dimension=3, particle_count=2, max_epochs=0)
    solver.minimize(bowl)
    particle = solver.swarm[1]
    particle.best_error = -12.0
    velocity = particle.velocity.copy()
    solver._respawn(particle, bowl)
    np.testing.assert_array_equal(particle.velocity, velocity)
    np.testing.assert_array_equal(particle.best_position, particle.position)
    assert particle.best_error == particle.error == bowl(particle.position)
    testing.assert_within_bounds(particle.position, -10.0, 10.0)
    assert solver.swarm.global_best_error <= particle.error


def test_early_exit_on_accepted_error() -> None:
    result = solve(2, 20, -10.0, 10.0, 1000, 1e-3, bowl)
    assert result.min_error <= 1e-3
    assert result.final_epoch < 1000


def test_objective_errors_propagate() -> None:
    def failing(x: np.ndarray) -> float:
        raise ZeroDivisionError("blublu")

    with pytest.raises(ZeroDivisionError):
        solve(2, 5, -10.0, 10.0, 10, 0.0, failing)


def test_objective_receives_copies() -> None:
    def mutating(x: np.ndarray) -> float:
        value = bowl(x)
        x[:] = 1000.0
        return value

    result = solve(2, 5, -10.0, 10.0, 10, 0.0, mutating)
    testing.assert_within_bounds(result.best_position, -10.0, 10.0)
    for particle in result.final_swarm:
        assert particle.best_error == bowl(particle.best_position)


@testing.parametrized(
    dimension=(dict(dimension=0), "dimension"),
    particles=(dict(particle_count=0), "particle_count"),
    epochs=(dict(max_epochs=-1), "max_epochs"),
    bounds=(dict(min_x=1.0, max_x=1.0), "min_x"),
    reversed_bounds=(dict(min_x=1.0, max_x=-1.0), "min_x"),
)
def test_invalid_settings(settings: tp.Dict[str, tp.Any], name: str) -> None:
    with pytest.raises(errors.SwarmValueError, match=name):
        SwarmSolver(**settings)


def test_repr_and_config() -> None:
    assert repr(SwarmSolver()) == "SwarmSolver()"
    solver = SwarmSolver(particle_count=20, min_x=-5, seed=None)
    assert repr(solver) == "SwarmSolver(min_x=-5.0, particle_count=20, seed=None)"
    config = solver.config()
    assert config["dimension"] == 2
    assert config["particle_count"] == 20
    config["dimension"] = 12
    assert solver.config()["dimension"] == 2


@testing.parametrized(**{name: (name,) for name in SwarmSolver().config()})
def test_settings_are_read_only(name: str) -> None:
    solver = SwarmSolver(particle_count=20)
    assert getattr(solver, name) == solver.config()[name]
    with pytest.raises(AttributeError):
        setattr(solver, name, 3)
    assert repr(solver) == "SwarmSolver(particle_count=20)"


def test_register_callback_errors() -> None:
    solver = SwarmSolver(max_epochs=3)
    with pytest.raises(errors.SwarmValueError):
        solver.register_callback("tell", lambda s: None)
    calls: tp.List[int] = []
    solver.register_callback("epoch", lambda s: calls.append(s.epoch))
    solver.remove_all_callbacks()
    solver.minimize(bowl)
    assert not calls


def test_solver_logs(caplog: tp.Any) -> None:
    with caplog.at_level(logging.DEBUG, logger="swarmopt.optimization.solver"):
        solve(2, 5, -10.0, 10.0, 3, 0.0, bowl)
    assert "Initialized SwarmSolver(" in caplog.text
    assert "Stopped after 3 epochs" in caplog.text
