"""Matplotlib plots of solver trajectories."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence, Union

import matplotlib.pyplot as plt
from matplotlib.axes import Axes

from .solution import Solution


def plot_solution(
    solution: Solution,
    species: Optional[Sequence[str]] = None,
    *,
    ax: Optional[Axes] = None,
    step: Optional[bool] = None,
    title: Optional[str] = None,
    xlabel: str = "time",
    ylabel: Optional[str] = None,
    **plot_kwargs: Any,
) -> Axes:
    """Plot one line per species and return the Axes.

    Jump trajectories (SSA, tau-leaping) are drawn as post-steps unless
    `step` says otherwise.
    """
    if ax is None:
        _fig, ax = plt.subplots(figsize=(8, 4.5))
    names = list(species) if species is not None else list(solution.species)
    if step is None:
        step = solution.is_discrete

    for name in names:
        y = solution[name]
        if step:
            ax.step(solution.t, y, where="post", label=name, **plot_kwargs)
        else:
            ax.plot(solution.t, y, label=name, **plot_kwargs)

    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel or ("copy number" if solution.is_discrete else "amount"))
    ax.set_title(title if title is not None else solution.method)
    ax.legend(loc="best")
    return ax


def save_figure(ax: Axes, path: Union[str, Path], dpi: int = 150) -> Path:
    """Save the figure holding `ax` and close it."""
    path = Path(path)
    fig = ax.figure
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    return path
