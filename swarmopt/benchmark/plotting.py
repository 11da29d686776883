# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import argparse
from pathlib import Path
import numpy as np
from matplotlib import pyplot as plt
import swarmopt.common.typing as tp
from swarmopt.common import errors
from swarmopt.optimization import callbacks


_DPI = 250


class TracePlotter:
    """Plots the best and mean errors of the swarm along the epochs of the last run of a trace

    Parameters
    ----------
    records: list of dict
        epoch records, as provided by :code:`TraceLogger.load()`
    title: str or None
        title of the plot (defaults to the solver name of the last record)
    """

    def __init__(self, records: tp.List[tp.Dict[str, tp.Any]], title: tp.Optional[str] = None) -> None:
        if not records:
            raise errors.SwarmValueError("Nothing to plot, the trace is empty")
        # only the last run of the file: its epochs increase within one session
        start = len(records) - 1
        while start > 0:
            previous, current = records[start - 1], records[start]
            if previous["#session"] != current["#session"] or previous["#epoch"] >= current["#epoch"]:
                break
            start -= 1
        records = records[start:]
        epochs = np.array([r["#epoch"] for r in records])
        curves = {
            name: np.array([r[key] for r in records], dtype=float)
            for name, key in [("best", "#min-error"), ("mean", "#mean-error")]
        }
        self._fig = plt.figure()
        self._ax = self._fig.add_subplot(111)
        # infeasible values are not plotted
        finite = [vals[np.isfinite(vals) & (vals < 10 ** 8)] for vals in curves.values()]
        logplot = all(vals.size and np.min(vals) > 0 for vals in finite)
        if logplot:
            self._ax.set_yscale("log")
        self._ax.set_xlabel("epoch")
        self._ax.set_ylabel("error")
        self._ax.grid(True, which="both")
        for (name, vals), style in zip(curves.items(), ["-b", "--g"]):
            mask = np.isfinite(vals) & (vals < 10 ** 8)
            self._ax.plot(epochs[mask], vals[mask], style, label=name)
        self._ax.legend(loc="upper right")
        self._ax.set_title(records[-1]["#solver"] if title is None else title)

    def save(self, output_filepath: tp.PathLike) -> None:
        """Saves the trace plot

        Parameters
        ----------
        output_filepath: Path or str
            path where the figure must be saved
        """
        self._fig.savefig(str(output_filepath), bbox_inches="tight", dpi=_DPI)

    def __del__(self) -> None:
        if hasattr(self, "_fig"):
            plt.close(self._fig)


def main(argv: tp.Optional[tp.List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Create the convergence plot of a trace file")
    parser.add_argument("filepath", type=str, help="trace file, as written by the --trace option of the benchmark")
    parser.add_argument("--output", type=str, default=None, help="Output path for the figure (default: <filename>.png next to the trace file)")
    parser.add_argument("--title", type=str, default=None, help="Title of the figure (default: the solver name)")
    args = parser.parse_args(argv)
    records = callbacks.TraceLogger(args.filepath).load()
    output = args.output
    if output is None:
        output = str(Path(args.filepath).with_suffix(".png"))
    TracePlotter(records, title=args.title).save(output)
    print(f"Saved plot to {output}")


if __name__ == "__main__":
    main()
