# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import logging
import warnings
import numpy as np
import swarmopt.common.typing as tp
from swarmopt.common import errors
from swarmopt.common import tools
from .particle import Particle
from .swarm import Swarm


# run with LOGLEVEL=DEBUG for more debug information
logger = logging.getLogger(__name__)

# constriction coefficients, see http://ieeexplore.ieee.org/stamp/stamp.jsp?arnumber=00870279
INERTIA = 0.729
COGNITIVE_WEIGHT = 1.49445
SOCIAL_WEIGHT = 1.49445
# initial velocities are drawn in the position bounds scaled by this factor
VELOCITY_DAMPING = 0.1
# probability for each particle to be reinitialized at each epoch
RESPAWN_PROBABILITY = 0.01

_EpochCallBack = tp.Callable[["SwarmSolver"], None]
_RespawnCallBack = tp.Callable[["SwarmSolver", Particle], None]
_CallBack = tp.Union[_EpochCallBack, _RespawnCallBack]


class SolveResult(tp.NamedTuple):
    """Output of a run, can be unpacked as
    :code:`best_position, final_swarm, final_epoch, min_error = result`
    """

    best_position: np.ndarray
    final_swarm: tp.List[Particle]
    final_epoch: int
    min_error: float


class SwarmSolver:
    """`Particle Swarm Optimization <https://en.wikipedia.org/wiki/Particle_swarm_optimization>`_
    minimizing a function on the box :code:`[min_x, max_x] ** dimension`.

    Each epoch, every particle is pulled both toward its own best position and toward the
    best position of the whole swarm, then clipped into the box. Each particle has a small
    probability to be respawned at a random position at each epoch, which maintains diversity.

    Parameters
    ----------
    dimension: int
        dimension of the optimization space
    particle_count: int
        number of particles in the swarm
    max_epochs: int
        maximum number of epochs (one epoch updates each particle once)
    min_x: float
        lower bound of each coordinate
    max_x: float
        upper bound of each coordinate
    min_accepted_error: float
        the run stops as soon as the best error is lower or equal to this value
    seed: int or None
        seed of the random state, which is reset at each call to :code:`minimize`
        (None provides non-deterministic runs)

    Note
    ----
    - Inertia and cognitive/social weights are the constriction coefficients 0.729 and 1.49445.
    - Velocities are not bounded, positions are hard-clipped into the box.
    - All random numbers are pulled from one random state in a fixed order, so that a
      given seed always provides the same run.
    """

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        dimension: int = 2,
        particle_count: int = 5,
        max_epochs: int = 1000,
        min_x: float = -10.0,
        max_x: float = 10.0,
        min_accepted_error: float = 0.0,
        seed: tp.Optional[int] = 0,
    ) -> None:
        if dimension < 1:
            raise errors.SwarmValueError(f"dimension must be at least 1 (got {dimension})")
        if particle_count < 1:
            raise errors.SwarmValueError(f"particle_count must be at least 1 (got {particle_count})")
        if max_epochs < 0:
            raise errors.SwarmValueError(f"max_epochs must be non-negative (got {max_epochs})")
        if not min_x < max_x:
            raise errors.SwarmValueError(f"min_x must be strictly lower than max_x (got {min_x} and {max_x})")
        if particle_count == 1:
            warnings.warn(
                "A swarm of 1 particle has no social component", errors.InefficientSettingsWarning
            )
        self._config: tp.Dict[str, tp.Any] = dict(
            dimension=int(dimension),
            particle_count=int(particle_count),
            max_epochs=int(max_epochs),
            min_x=float(min_x),
            max_x=float(max_x),
            min_accepted_error=float(min_accepted_error),
            seed=seed,
        )
        diff = tools.different_from_defaults(instance=self, instance_dict=self._config, check_mismatches=True)
        params = ", ".join(f"{x}={y!r}" for x, y in sorted(diff.items()))
        self.name = f"{self.__class__.__name__}({params})"
        self._callbacks: tp.Dict[str, tp.List[tp.Any]] = {}
        # run state, reset by each call to minimize
        self._rng = np.random.RandomState(seed)
        self._swarm = Swarm()
        self._epoch = 0
        self._num_evaluations = 0

    def config(self) -> tp.Dict[str, tp.Any]:
        return dict(self._config)

    def __repr__(self) -> str:
        return self.name

    # read-only settings

    @property
    def dimension(self) -> int:
        return self._config["dimension"]

    @property
    def particle_count(self) -> int:
        return self._config["particle_count"]

    @property
    def max_epochs(self) -> int:
        return self._config["max_epochs"]

    @property
    def min_x(self) -> float:
        return self._config["min_x"]

    @property
    def max_x(self) -> float:
        return self._config["max_x"]

    @property
    def min_accepted_error(self) -> float:
        return self._config["min_accepted_error"]

    @property
    def seed(self) -> tp.Optional[int]:
        return self._config["seed"]

    @property
    def epoch(self) -> int:
        """Number of epochs completed in the current (or last) run"""
        return self._epoch

    @property
    def num_evaluations(self) -> int:
        """Number of calls to the objective function in the current (or last) run"""
        return self._num_evaluations

    @property
    def swarm(self) -> Swarm:
        """Swarm of the current (or last) run"""
        return self._swarm

    def register_callback(self, name: str, callback: _CallBack) -> None:
        """Add a callback method called either at the end of each epoch or after each
        particle respawn. This can be useful for custom logging.

        Parameters
        ----------
        name: str
            name of the event to register the callback for (either :code:`epoch` or :code:`respawn`)
        callback: callable
            for :code:`epoch`, a callable taking the solver as input,
            for :code:`respawn`, a callable taking the solver and the respawned particle as inputs
        """
        if name not in ["epoch", "respawn"]:
            raise errors.SwarmValueError(f'Only "epoch" and "respawn" events can have callbacks (not {name})')
        self._callbacks.setdefault(name, []).append(callback)

    def remove_all_callbacks(self) -> None:
        """Removes all registered callables"""
        self._callbacks = {}

    def minimize(self, objective_function: tp.ObjectiveLike) -> SolveResult:
        """Optimization (minimization) procedure

        Parameters
        ----------
        objective_function: callable
            function taking a numpy array of size :code:`dimension` as input and returning a float.
            Constraints can be handled by returning a very high value (see :code:`swarmopt.functions.INFEASIBLE`).

        Returns
        -------
        SolveResult
            best position, copies of the particles of the final swarm, number of epochs and best error
        """
        self._rng = np.random.RandomState(self.seed)
        self._swarm = Swarm()
        self._epoch = 0
        self._num_evaluations = 0
        self._initialize_swarm(objective_function)
        logger.debug("Initialized %s, best error is %s", self.name, self._swarm.global_best_error)
        try:
            while self._epoch < self.max_epochs and self._swarm.global_best_error > self.min_accepted_error:
                for particle in self._swarm:
                    self._move(particle, objective_function)
                    if self._rng.rand() < RESPAWN_PROBABILITY:
                        self._respawn(particle, objective_function)
                self._epoch += 1
                for callback in self._callbacks.get("epoch", []):
                    callback(self)
        except errors.SwarmEarlyStopping as e:
            logger.debug("Early stopping at epoch %s: %s", self._epoch, e)
        logger.debug(
            "Stopped after %s epochs and %s evaluations, best error is %s",
            self._epoch,
            self._num_evaluations,
            self._swarm.global_best_error,
        )
        assert self._swarm.global_best_position is not None
        return SolveResult(
            best_position=self._swarm.global_best_position.copy(),
            final_swarm=self._swarm.snapshot(),
            final_epoch=self._epoch,
            min_error=self._swarm.global_best_error,
        )

    def _evaluate(self, objective_function: tp.ObjectiveLike, position: np.ndarray) -> float:
        self._num_evaluations += 1
        return float(objective_function(position.copy()))

    def _initialize_swarm(self, objective_function: tp.ObjectiveLike) -> None:
        low, high = self.min_x, self.max_x
        for _ in range(self.particle_count):
            position = self._rng.uniform(low, high, size=self.dimension)
            error = self._evaluate(objective_function, position)
            velocity = self._rng.uniform(VELOCITY_DAMPING * low, VELOCITY_DAMPING * high, size=self.dimension)
            particle = Particle(position, error, velocity, position, error)
            self._swarm.append(particle)
            self._swarm.consider(particle)

    def _move(self, particle: Particle, objective_function: tp.ObjectiveLike) -> None:
        """Updates velocity, position and bests of the particle"""
        global_best_position = self._swarm.global_best_position
        assert global_best_position is not None
        # one row per dimension, r1 then r2
        rand = self._rng.uniform(size=(self.dimension, 2))
        particle.velocity = (
            INERTIA * particle.velocity
            + COGNITIVE_WEIGHT * rand[:, 0] * (particle.best_position - particle.position)
            + SOCIAL_WEIGHT * rand[:, 1] * (global_best_position - particle.position)
        )
        particle.position = np.clip(particle.position + particle.velocity, self.min_x, self.max_x)
        particle.error = self._evaluate(objective_function, particle.position)
        if particle.error < particle.best_error:
            particle.best_position = particle.position.copy()
            particle.best_error = particle.error
        self._swarm.consider(particle)

    def _respawn(self, particle: Particle, objective_function: tp.ObjectiveLike) -> None:
        """Moves the particle to a new random position, forgetting its personal best.
        Velocity is kept as is.
        """
        particle.position = self._rng.uniform(self.min_x, self.max_x, size=self.dimension)
        particle.error = self._evaluate(objective_function, particle.position)
        particle.best_position = particle.position.copy()
        particle.best_error = particle.error
        if self._swarm.consider(particle):
            logger.debug("Respawned particle improved the best error to %s", particle.error)
        for callback in self._callbacks.get("respawn", []):
            callback(self, particle)


def solve(
    dimensions: int,
    particle_count: int,
    min_x: float,
    max_x: float,
    max_epochs: int,
    min_accepted_error: float,
    objective_function: tp.ObjectiveLike,
    seed: tp.Optional[int] = 0,
) -> SolveResult:
    """Runs a particle swarm optimization of the objective function on the box
    :code:`[min_x, max_x] ** dimensions` (see :code:`SwarmSolver`)
    """
    solver = SwarmSolver(
        dimension=dimensions,
        particle_count=particle_count,
        max_epochs=max_epochs,
        min_x=min_x,
        max_x=max_x,
        min_accepted_error=min_accepted_error,
        seed=seed,
    )
    return solver.minimize(objective_function)
