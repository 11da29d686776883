# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.


# base classes


class SwarmError(Exception):
    """Base class for error raised by swarmopt"""


class SwarmWarning(Warning):
    pass


# errors
# pylint: disable=too-many-ancestors


class SwarmEarlyStopping(StopIteration, SwarmError):
    """Stops the minimization loop if raised"""


class SwarmRuntimeError(RuntimeError, SwarmError):
    """Runtime error raised by swarmopt"""


class SwarmValueError(ValueError, SwarmError):
    """Value error raised by swarmopt, mostly for invalid settings"""


# warnings


class SwarmRuntimeWarning(RuntimeWarning, SwarmWarning):
    """Runtime warning raised by swarmopt"""


class InefficientSettingsWarning(SwarmRuntimeWarning):
    """Solver settings are not suited to the swarm"""
