# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Preset objective functions of the demo, all returning the squared distance of the
function value to its known global minimum (hence 0 is optimal).
Each function is registered along with the solver settings it is demonstrated with.
"""

import sys
import inspect
import functools
from math import pi
import numpy as np
import swarmopt.common.typing as tp
from swarmopt.common.decorators import Registry
from swarmopt.optimization import SwarmSolver


# presets may only be registered with settings of the solver
_SETTINGS = [x for x in inspect.signature(SwarmSolver.__init__).parameters if x != "self"]
registry: Registry[tp.Callable[[np.ndarray], float]] = Registry(info_keys=_SETTINGS)

# value returned for candidates violating a constraint, it can never become a best
INFEASIBLE = sys.float_info.max

_Func = tp.Callable[[np.ndarray], float]


def constrained(constraint: tp.Callable[[np.ndarray], bool]) -> tp.Callable[[_Func], _Func]:
    """Decorator returning INFEASIBLE instead of calling the function
    whenever the constraint is not satisfied
    """

    def decorator(func: _Func) -> _Func:
        @functools.wraps(func)
        def wrapped(x: np.ndarray) -> float:
            x = np.asarray(x, dtype=float)
            if not constraint(x):
                return INFEASIBLE
            return func(x)

        return wrapped

    return decorator


def _in_box(x: np.ndarray, lower: tp.Sequence[float], upper: tp.Sequence[float]) -> bool:
    return bool(np.all(x >= lower) and np.all(x <= upper))


@registry.register_with_info(dimension=2)
def sphere(x: np.ndarray) -> float:
    x = np.asarray(x, dtype=float)
    return float(x.dot(x))


@registry.register_with_info(dimension=2, particle_count=5, max_epochs=1000, min_accepted_error=0.0)
def peak(x: np.ndarray) -> float:
    """z = x * exp(-(x^2 + y^2)), with minimum -0.42888194 at (-sqrt(2)/2, 0)"""
    z = x[0] * np.exp(-(x[0] ** 2 + x[1] ** 2))
    return float((z + 0.42888194) ** 2)


@registry.register_with_info(dimension=1, particle_count=5, max_epochs=1000, min_accepted_error=1e-8)
def exponential(x: np.ndarray) -> float:
    """z = 2^x - x - 1, with minimum -0.0861 at x = 0.5288"""
    z = 2.0 ** x[0] - x[0] - 1
    return float((z + 0.0861) ** 2)


@registry.register_with_info(dimension=2, particle_count=1000, max_epochs=30, min_accepted_error=1e-8)
def himmelblau(x: np.ndarray) -> float:
    """Minimum 0 at (3, 2), (-2.805, 3.131), (-3.779, -3.283) and (3.584, -1.848)
    See https://en.wikipedia.org/wiki/Himmelblau%27s_function
    """
    z = (x[0] ** 2 + x[1] - 11) ** 2 + (x[0] + x[1] ** 2 - 7) ** 2
    return float(z ** 2)


def _michalewicz(x: np.ndarray, m: int = 10) -> float:
    # d! local minima, m defines their steepness
    indices = np.arange(1, len(x) + 1)
    return float(-np.sum(np.sin(x) * np.sin(indices * x ** 2 / pi) ** (2 * m)))


@registry.register_with_info(
    dimension=2, particle_count=1000, max_epochs=30, min_accepted_error=0.0, min_x=0.0, max_x=pi
)
def michalewicz(x: np.ndarray) -> float:
    """Minimum -1.8013 at (2.20, 1.57) in [0, pi]^2
    See https://www.sfu.ca/~ssurjano/michal.html
    """
    return (_michalewicz(x) + 1.8013) ** 2


@registry.register_with_info(
    dimension=5, particle_count=1000, max_epochs=1000, min_accepted_error=0.0, min_x=0.0, max_x=pi
)
def michalewicz5(x: np.ndarray) -> float:
    """Minimum -4.687658 in [0, pi]^5"""
    return (_michalewicz(x) + 4.687658) ** 2


@registry.register_with_info(
    dimension=2, particle_count=1000, max_epochs=30, min_accepted_error=0.0, min_x=-512.0, max_x=512.0
)
def eggholder(x: np.ndarray) -> float:
    """Minimum -959.6407 at (512, 404.2319) in [-512, 512]^2
    See https://www.sfu.ca/~ssurjano/egg.html
    """
    a, b = x[0], x[1] + 47
    z = -b * np.sin(np.sqrt(abs(b + a / 2))) - a * np.sin(np.sqrt(abs(a - b)))
    return float((z + 959.6407) ** 2)


def _mishra_bird_domain(x: np.ndarray) -> bool:
    if not _in_box(x, [-10, -6.5], [0, 0]):
        return False
    return bool((x[0] + 5) ** 2 + (x[1] + 5) ** 2 < 25)


@registry.register_with_info(
    dimension=2, particle_count=1000, max_epochs=30, min_accepted_error=0.0, min_x=-10.0, max_x=0.0
)
@constrained(_mishra_bird_domain)
def mishra_bird(x: np.ndarray) -> float:
    """Minimum -106.7645367 at (-3.1302468, -1.5821422), subject to (x + 5)^2 + (y + 5)^2 < 25
    in [-10, 0] x [-6.5, 0]
    See https://en.wikipedia.org/wiki/Test_functions_for_optimization
    """
    a, b = x[0], x[1]
    z = np.sin(b) * np.exp((1 - np.cos(a)) ** 2) + np.cos(a) * np.exp((1 - np.sin(b)) ** 2) + (a - b) ** 2
    return float((z + 106.7645367) ** 2)


def _townsend_domain(x: np.ndarray) -> bool:
    if not _in_box(x, [-2.25, -2.5], [2.5, 1.75]):
        return False
    t = np.arctan2(x[0], x[1])
    radius = (2 * np.cos(t) - np.cos(2 * t) / 2 - np.cos(3 * t) / 4 - np.cos(4 * t) / 8) ** 2 + (
        2 * np.sin(t)
    ) ** 2
    return bool(x[0] ** 2 + x[1] ** 2 < radius)


@registry.register_with_info(
    dimension=2, particle_count=1000, max_epochs=300, min_accepted_error=0.0, min_x=-2.5, max_x=2.5
)
@constrained(_townsend_domain)
def townsend(x: np.ndarray) -> float:
    """Minimum -2.0239884 at (2.0052938, 1.1944509), subject to a heart-shaped constraint
    in [-2.25, 2.5] x [-2.5, 1.75]
    See https://en.wikipedia.org/wiki/Test_functions_for_optimization
    """
    a, b = x[0], x[1]
    z = -np.cos((a - 0.1) * b) ** 2 - a * np.sin(3 * a + b)
    return float((z + 2.0239884) ** 2)
