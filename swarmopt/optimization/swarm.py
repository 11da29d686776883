# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import swarmopt.common.typing as tp
from .particle import Particle


class Swarm:
    """Ordered collection of particles, along with the best position found
    by any of them during the run (global best).

    The global best is only replaced on strict improvement, hence it never
    regresses and ties keep the earliest position found.
    Before any particle is considered, the global best error is infinite.
    """

    def __init__(self) -> None:
        self.particles: tp.List[Particle] = []
        self.global_best_position: tp.Optional[np.ndarray] = None
        self.global_best_error = float("inf")

    def append(self, particle: Particle) -> None:
        self.particles.append(particle)
        if self.global_best_position is None:
            # placeholder until a particle provides a comparable error (NaN never does)
            self.global_best_position = particle.position.copy()

    def consider(self, particle: Particle) -> bool:
        """Updates the global best with the current state of the particle
        if it is a strict improvement, and returns whether it was.
        """
        if particle.error < self.global_best_error:
            self.global_best_error = particle.error
            self.global_best_position = particle.position.copy()
            return True
        return False

    def snapshot(self) -> tp.List[Particle]:
        """Independent copies of all particles"""
        return [particle.copy() for particle in self.particles]

    def __iter__(self) -> tp.Iterator[Particle]:
        return iter(self.particles)

    def __len__(self) -> int:
        return len(self.particles)

    def __getitem__(self, index: int) -> Particle:
        return self.particles[index]
