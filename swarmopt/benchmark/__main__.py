# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import os
import logging
import argparse
from pathlib import Path
import swarmopt.common.typing as tp
from swarmopt.functions import registry
from swarmopt.optimization import callbacks
from swarmopt.optimization import SwarmSolver
from . import core


# pylint: disable=too-many-arguments
def launch(
    function: str,
    seed: int = 0,
    repetitions: int = 1,
    trace: tp.Optional[tp.PathLike] = None,
    output: tp.Optional[tp.PathLike] = None,
    verbosity: int = 0,
    **overrides: tp.Any,
) -> str:
    """Runs a preset function and returns the text to display:
    the full report for a single run, or a table of results for
    repeated runs (or when an output csv is requested).
    The trace file and the logs cover all the runs.
    """
    epoch_callbacks: tp.List[tp.Callable[[SwarmSolver], None]] = []
    if trace is not None:
        epoch_callbacks.append(callbacks.TraceLogger(trace))
    if verbosity:
        epoch_callbacks.append(callbacks.EpochLogger(log_interval_epochs=10 if verbosity == 1 else 1))
    if repetitions > 1 or output is not None:
        df = core.compute(function, repetitions=repetitions, seed=seed, epoch_callbacks=epoch_callbacks, **overrides)
        if output is not None:
            core.save_or_append_to_csv(df, Path(output))
            print(f"Saved data to {output}")
        return str(df.to_string(index=False))
    solver = core.build_solver(function, seed=seed, **overrides)
    for callback in epoch_callbacks:
        solver.register_callback("epoch", callback)
    result = solver.minimize(registry[function])
    return core.format_report(result, solver.config(), name=function)


def get_args(argv: tp.Optional[tp.List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Minimize a preset function with particle swarm optimization.")
    parser.add_argument("function", type=str, choices=sorted(registry), help="name of a registered preset function")
    parser.add_argument("--particles", type=int, default=None, help="Number of particles (overrides the preset)")
    parser.add_argument("--dimensions", type=int, default=None, help="Dimension of the problem (overrides the preset)")
    parser.add_argument("--epochs", type=int, default=None, help="Maximum number of epochs (overrides the preset)")
    parser.add_argument("--min-x", type=float, default=None, help="Lower bound of each coordinate (overrides the preset)")
    parser.add_argument("--max-x", type=float, default=None, help="Upper bound of each coordinate (overrides the preset)")
    parser.add_argument(
        "--min-error", type=float, default=None, help="Stop as soon as the best error is below (overrides the preset)"
    )
    parser.add_argument("--seed", type=int, default=0, help="Seed of the random state, for reproducibility")
    parser.add_argument(
        "--repetitions",
        type=int,
        default=1,
        help="Number of runs to perform (seeds will be incremented), a table of results is printed if more than 1",
    )
    parser.add_argument("--trace", type=str, default=None, help="Path of a file where to append the epoch trace (json lines)")
    parser.add_argument("--output", type=str, default=None, help="Path of a CSV file for the results. Existing files are appended")
    parser.add_argument(
        "--verbosity", type=int, default=0, help="0: report only, 1: log every 10 epochs, 2: log every epoch"
    )
    return parser.parse_args(argv)


def main(argv: tp.Optional[tp.List[str]] = None) -> None:
    # run with LOGLEVEL=DEBUG for more debug information
    logging.basicConfig(level=os.environ.get("LOGLEVEL", "INFO"))
    args = get_args(argv)
    text = launch(
        args.function,
        seed=args.seed,
        repetitions=args.repetitions,
        trace=args.trace,
        output=args.output,
        verbosity=args.verbosity,
        particle_count=args.particles,
        dimension=args.dimensions,
        max_epochs=args.epochs,
        min_x=args.min_x,
        max_x=args.max_x,
        min_accepted_error=args.min_error,
    )
    print(text)


if __name__ == "__main__":
    main()
