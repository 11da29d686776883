# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import swarmopt.common.typing as tp


def _format_vector(values: np.ndarray) -> str:
    return "".join(f"{v:.4f} " for v in values)


class Particle:
    """Candidate solution of a swarm, holding its current state and the best
    state it has visited so far.

    Parameters
    ----------
    position: array-like
        current position in the search space
    error: float
        objective value at the current position
    velocity: array-like
        current velocity (not bounded)
    best_position: array-like
        position which provided best_error
    best_error: float
        lowest error observed by the particle (since its last respawn)

    Note
    ----
    All arrays are copied, so that the caller buffers can be modified independently.
    The solver updates the attributes directly, the particle holds no update logic.
    """

    def __init__(
        self,
        position: tp.ArrayLike,
        error: float,
        velocity: tp.ArrayLike,
        best_position: tp.ArrayLike,
        best_error: float,
    ) -> None:
        self.position = np.array(position, dtype=float)
        self.error = float(error)
        self.velocity = np.array(velocity, dtype=float)
        self.best_position = np.array(best_position, dtype=float)
        self.best_error = float(best_error)

    @property
    def dimension(self) -> int:
        return self.position.size

    def copy(self) -> "Particle":
        return Particle(self.position, self.error, self.velocity, self.best_position, self.best_error)

    def __repr__(self) -> str:
        return f"Particle(error={self.error:.4f}, best_error={self.best_error:.4f})"

    def __str__(self) -> str:
        ruler = "=" * 26
        return (
            f"{ruler}\n"
            f"Position: {_format_vector(self.position)}\n"
            f"Error = {self.error:.4f}\n"
            f"Velocity: {_format_vector(self.velocity)}\n"
            f"Best Position: {_format_vector(self.best_position)}\n"
            f"Best Error = {self.best_error:.4f}\n"
            f"{ruler}\n"
        )
