# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from pathlib import Path
import pandas as pd
import swarmopt.common.typing as tp
from swarmopt.optimization import SwarmSolver
from swarmopt.optimization import SolveResult
from swarmopt.functions import registry


def get_settings(name: str, **overrides: tp.Any) -> tp.Dict[str, tp.Any]:
    """Returns the solver settings registered with the preset, updated
    with the overrides which are not None
    """
    settings = dict(registry.get_info(name))
    settings.update({x: y for x, y in overrides.items() if y is not None})
    return settings


def build_solver(name: str, **overrides: tp.Any) -> SwarmSolver:
    """Creates the solver for a preset function, with its registered settings
    (and SwarmSolver defaults for the missing ones)
    """
    return SwarmSolver(**get_settings(name, **overrides))


def run_preset(name: str, **overrides: tp.Any) -> SolveResult:
    """Minimizes a preset function with its registered settings, possibly overridden
    (eg: :code:`run_preset("himmelblau", particle_count=50, seed=12)`)
    """
    return build_solver(name, **overrides).minimize(registry[name])


def format_report(result: SolveResult, settings: tp.Dict[str, tp.Any], name: tp.Optional[str] = None) -> str:
    """Human readable report of a run

    Parameters
    ----------
    result: SolveResult
        output of the run
    settings: dict
        full solver settings, as provided by :code:`SwarmSolver.config()`
    name: str or None
        name of the preset function, if any
    """
    lines = ["", "Begin Particle Swarm Optimization demo", ""]
    if name is not None:
        doc = (registry[name].__doc__ or "").strip().split("\n")[0]
        lines.append(f"Goal is to minimize {name}" + (f": {doc}" if doc else ""))
    lines += [
        f"Setting problem dimension to {settings['dimension']}",
        f"Setting particle_count = {settings['particle_count']}",
        f"Setting max_epochs = {settings['max_epochs']}",
        f"Setting early exit error = {settings['min_accepted_error']:.4f}",
        f"Setting min_x, max_x = {settings['min_x']:.1f} {settings['max_x']:.1f}",
        "",
        "Processing complete",
        "Final swarm:",
        "",
    ]
    lines += [str(particle) for particle in result.final_swarm]
    lines += [f"Final epoch: {result.final_epoch}", "Best position/solution found:"]
    lines += [f"x{k} = {value:.6f}" for k, value in enumerate(result.best_position)]
    lines += [f"Final best error = {result.min_error:.5f}", "", "End PSO demo", ""]
    return "\n".join(lines)


def compute(
    name: str,
    repetitions: int = 1,
    seed: int = 0,
    epoch_callbacks: tp.Sequence[tp.Callable[[SwarmSolver], None]] = (),
    **overrides: tp.Any,
) -> pd.DataFrame:
    """Runs a preset several times, incrementing the seed at each repetition,
    and returns one row per run. The epoch callbacks are registered for all runs.
    """
    rows: tp.List[tp.Dict[str, tp.Any]] = []
    for k in range(repetitions):
        solver = build_solver(name, seed=seed + k, **overrides)
        for callback in epoch_callbacks:
            solver.register_callback("epoch", callback)
        result = solver.minimize(registry[name])
        row = {"name": name, "seed": seed + k, "final_epoch": result.final_epoch, "min_error": result.min_error}
        row.update({f"x{i}": value for i, value in enumerate(result.best_position)})
        rows.append(row)
    return pd.DataFrame(rows)


def save_or_append_to_csv(df: pd.DataFrame, path: Path) -> None:
    """Saves a dataframe to a file in append mode
    """
    if path.exists():
        print("Appending to existing file")
        predf = pd.read_csv(str(path))
        df = pd.concat([predf, df], sort=False)
    df.to_csv(path, index=False)
