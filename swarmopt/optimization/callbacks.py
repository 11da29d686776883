# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import json
import time
import warnings
import datetime
import logging
from pathlib import Path
import numpy as np
import swarmopt.common.typing as tp
from swarmopt.common import errors
from . import solver as solverlib

global_logger = logging.getLogger(__name__)


def _describe(solver: solverlib.SwarmSolver) -> str:
    swarm = solver.swarm
    position = swarm.global_best_position
    coords = "None" if position is None else np.array2string(position, precision=6)
    return f"best error {swarm.global_best_error} at {coords}"


class _RunTracker:
    """Detects the start of a new run of the solver: the epoch counter
    is reset by each call to minimize, and epoch callbacks are called with
    strictly increasing epochs within a run.
    """

    def __init__(self) -> None:
        self._last_epoch = 0

    def is_new_run(self, solver: solverlib.SwarmSolver) -> bool:
        new_run = solver.epoch <= self._last_epoch
        self._last_epoch = solver.epoch
        return new_run


class EpochPrinter:
    """Printer to register as "epoch" callback in a solver, for printing
    the best point regularly.

    Parameters
    ----------
    print_interval_epochs: int
        max number of epochs before performing another print
    print_interval_seconds: float
        max number of seconds before performing another print
    """

    def __init__(self, print_interval_epochs: int = 1, print_interval_seconds: float = 60.0) -> None:
        assert print_interval_epochs > 0
        assert print_interval_seconds > 0
        self._print_interval_epochs = int(print_interval_epochs)
        self._print_interval_seconds = print_interval_seconds
        self._run = _RunTracker()
        self._restart()

    def _restart(self) -> None:
        self._next_epoch = self._print_interval_epochs
        self._next_time = time.time() + self._print_interval_seconds

    def __call__(self, solver: solverlib.SwarmSolver) -> None:
        if self._run.is_new_run(solver):
            self._restart()
        if time.time() >= self._next_time or solver.epoch >= self._next_epoch:
            self._next_time = time.time() + self._print_interval_seconds
            self._next_epoch = solver.epoch + self._print_interval_epochs
            print(f"After epoch {solver.epoch}, {_describe(solver)}")


class EpochLogger:
    """Logger to register as "epoch" callback in a solver, for logging
    the best point regularly.

    Parameters
    ----------
    logger:
        given logger that callback will use to log
    log_level:
        log level that logger will write to
    log_interval_epochs: int
        max number of epochs before performing another log
    log_interval_seconds:
        max number of seconds before performing another log
    """

    def __init__(
        self,
        *,
        logger: logging.Logger = global_logger,
        log_level: int = logging.INFO,
        log_interval_epochs: int = 1,
        log_interval_seconds: float = 60.0,
    ) -> None:
        assert log_interval_epochs > 0
        assert log_interval_seconds > 0
        self._logger = logger
        self._log_level = log_level
        self._log_interval_epochs = int(log_interval_epochs)
        self._log_interval_seconds = log_interval_seconds
        self._run = _RunTracker()
        self._restart()

    def _restart(self) -> None:
        self._next_epoch = self._log_interval_epochs
        self._next_time = time.time() + self._log_interval_seconds

    def __call__(self, solver: solverlib.SwarmSolver) -> None:
        if self._run.is_new_run(solver):
            self._restart()
        if time.time() >= self._next_time or solver.epoch >= self._next_epoch:
            self._next_time = time.time() + self._log_interval_seconds
            self._next_epoch = solver.epoch + self._log_interval_epochs
            self._logger.log(self._log_level, "After epoch %s, %s", solver.epoch, _describe(solver))


class TraceLogger:
    """Logs the global best of the swarm into a file after each epoch,
    as one json record per line.

    Parameters
    ----------
    filepath: str or pathlib.Path
        the path to dump data to
    append: bool
        whether to append the file (otherwise it replaces it)

    Example
    -------

    .. code-block:: python

        logger = TraceLogger(filepath)
        solver.register_callback("epoch",  logger)
        solver.minimize(func)
        list_of_dict_of_data = logger.load()
    """

    def __init__(self, filepath: tp.PathLike, append: bool = True) -> None:
        self._session = datetime.datetime.now().strftime("%y-%m-%d %H:%M:%S")
        self._filepath = Path(filepath)
        if self._filepath.exists() and not append:
            self._filepath.unlink()
        self._filepath.parent.mkdir(exist_ok=True, parents=True)

    def __call__(self, solver: solverlib.SwarmSolver) -> None:
        swarm = solver.swarm
        position = swarm.global_best_position
        data: tp.Dict[str, tp.Any] = {
            "#solver": solver.name,
            "#session": self._session,
            "#epoch": solver.epoch,
            "#num-evaluations": solver.num_evaluations,
            "#min-error": swarm.global_best_error,
            "#best-position": [] if position is None else position.tolist(),
            # scaled before summing, so that infeasible errors do not overflow
            "#mean-error": float(np.sum(np.array([p.error for p in swarm]) / len(swarm))),
        }
        data.update({"#solver#" + x: y for x, y in solver.config().items()})
        try:  # avoid bugging as much as possible
            with self._filepath.open("a") as f:
                f.write(json.dumps(data) + "\n")
        except Exception as e:  # pylint: disable=broad-except
            warnings.warn(f"Failing to json data: {e}", errors.SwarmRuntimeWarning)

    def load(self) -> tp.List[tp.Dict[str, tp.Any]]:
        """Loads data from the log file"""
        data: tp.List[tp.Dict[str, tp.Any]] = []
        if self._filepath.exists():
            with self._filepath.open("r") as f:
                for line in f.readlines():
                    data.append(json.loads(line))
        return data


class EarlyStopping:
    """Callback for stopping the :code:`minimize` method before the maximum
    number of epochs or the accepted error is reached.

    Parameters
    ----------
    stopping_criterion: func(solver) -> bool
        function that takes the current solver as input and returns True
        if the minimization must be stopped

    Note
    ----
    This callback must be registered on the "epoch" event only.

    Example
    -------
    In the following code, the :code:`minimize` method will be stopped after the 4th epoch

    >>> early_stopping = EarlyStopping(lambda solver: solver.epoch > 3)
    >>> solver.register_callback("epoch", early_stopping)
    >>> solver.minimize(func)
    """

    def __init__(self, stopping_criterion: tp.Callable[[solverlib.SwarmSolver], bool]) -> None:
        self.stopping_criterion = stopping_criterion

    def __call__(self, solver: solverlib.SwarmSolver, *args: tp.Any, **kwargs: tp.Any) -> None:
        if args or kwargs:
            raise errors.SwarmRuntimeError("EarlyStopping must be registered on epoch event")
        if self.stopping_criterion(solver):
            raise errors.SwarmEarlyStopping("Early stopping criterion is reached")

    @classmethod
    def timer(cls, max_duration: float) -> "EarlyStopping":
        """Early stop when max_duration seconds has been reached (from the first epoch)"""
        return cls(_DurationCriterion(max_duration))

    @classmethod
    def no_improvement_stopper(cls, tolerance_window: int) -> "EarlyStopping":
        """Early stop when the best error didn't decrease during tolerance_window epochs"""
        return cls(_ErrorImprovementToleranceCriterion(tolerance_window))


class _DurationCriterion:
    def __init__(self, max_duration: float) -> None:
        self._start = float("inf")
        self._max_duration = max_duration
        self._run = _RunTracker()

    def __call__(self, solver: solverlib.SwarmSolver) -> bool:
        if self._run.is_new_run(solver) or np.isinf(self._start):
            self._start = time.time()
        return time.time() > self._start + self._max_duration


class _ErrorImprovementToleranceCriterion:
    def __init__(self, tolerance_window: int) -> None:
        self._tolerance_window = tolerance_window
        self._best_value: tp.Optional[float] = None
        self._tolerance_count = 0
        self._run = _RunTracker()

    def __call__(self, solver: solverlib.SwarmSolver) -> bool:
        best_value = solver.swarm.global_best_error
        if self._run.is_new_run(solver) or self._best_value is None:
            self._tolerance_count = 0
            self._best_value = best_value
            return False
        if self._best_value <= best_value:
            self._tolerance_count += 1
        else:
            self._tolerance_count = 0
            self._best_value = best_value
        return self._tolerance_count > self._tolerance_window
