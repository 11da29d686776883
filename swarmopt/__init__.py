# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .common import typing as typing
from .common import errors as errors
from .optimization import callbacks as callbacks
from .optimization import SwarmSolver as SwarmSolver
from .optimization import SolveResult as SolveResult
from .optimization import Particle as Particle
from .optimization import solve as solve
from . import functions as functions


__all__ = ["SwarmSolver", "SolveResult", "Particle", "solve", "callbacks", "functions", "errors", "typing"]


__version__ = "0.1.0"
