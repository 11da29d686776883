# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .particle import Particle  # snapshot items of the results
from .swarm import Swarm
from .solver import SwarmSolver
from .solver import SolveResult
from .solver import solve
from . import callbacks
