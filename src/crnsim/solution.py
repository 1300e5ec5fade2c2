from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Sequence, Tuple, Union

import numpy as np

# Methods whose trajectories are piecewise constant between recorded times.
STEP_METHODS = frozenset({"ssa", "tau_leaping"})


@dataclass
class Solution:
    """A trajectory produced by one of the solvers.

    Attributes
    ----------
    t:
        Time points, shape (n_t,).
    u:
        States, shape (n_species, n_t); ``u[:, k]`` is the state at ``t[k]``
        (the same layout as ``scipy.integrate.solve_ivp``'s ``y``).
    species:
        Species names labelling the rows of ``u``.
    method:
        Name of the solver that produced the trajectory.
    """

    t: np.ndarray
    u: np.ndarray
    species: Tuple[str, ...]
    method: str
    success: bool = True
    message: str = ""
    stats: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.t = np.asarray(self.t, dtype=float)
        self.u = np.asarray(self.u)
        self.species = tuple(self.species)
        if self.u.shape != (len(self.species), self.t.size):
            raise ValueError(
                f"u must have shape ({len(self.species)}, {self.t.size}); got {self.u.shape}"
            )

    def __len__(self) -> int:
        return self.t.size

    def __getitem__(self, name: Union[str, int]) -> np.ndarray:
        """Trajectory of one species, by name or row index."""
        if isinstance(name, str):
            try:
                return self.u[self.species.index(name)]
            except ValueError:
                raise KeyError(f"Unknown species '{name}'. Known: {list(self.species)}") from None
        return self.u[name]

    @property
    def is_discrete(self) -> bool:
        return self.method in STEP_METHODS

    def final_state(self) -> Dict[str, float]:
        return {s: self.u[i, -1].item() for i, s in enumerate(self.species)}

    def sample(self, times: Sequence[float]) -> np.ndarray:
        """States at `times`, shape (n_species, len(times)).

        Jump trajectories are sampled as right-continuous step functions,
        continuous ones by linear interpolation.
        """
        times = np.asarray(times, dtype=float)
        if self.is_discrete:
            return sample_path(self.t, self.u, times)
        return np.vstack([np.interp(times, self.t, row) for row in self.u])

    def as_dict(self) -> Dict[str, Any]:
        """Plain lists, ready for JSON."""
        return {
            "method": self.method,
            "success": self.success,
            "message": self.message,
            "t": self.t.tolist(),
            "species": {s: self.u[i].tolist() for i, s in enumerate(self.species)},
        }


def sample_path(t: np.ndarray, u: np.ndarray, times: np.ndarray) -> np.ndarray:
    """Evaluate a piecewise-constant path recorded at jump times `t` on `times`."""
    idx = np.searchsorted(t, times, side="right") - 1
    idx = np.clip(idx, 0, t.size - 1)
    return u[:, idx]


def resolve_saveat(saveat: Union[None, float, Sequence[float]], tspan: Tuple[float, float]):
    """Turn a save spacing or explicit save times into an array (None = solver's own steps)."""
    if saveat is None:
        return None
    t0, t1 = tspan
    if np.ndim(saveat) == 0:
        step = float(saveat)
        if step <= 0:
            raise ValueError(f"saveat spacing must be positive; got {step}")
        grid = fixed_step_times(tspan, step)
    else:
        grid = np.sort(np.asarray(saveat, dtype=float))
        if grid.size == 0:
            raise ValueError("saveat must not be empty")
        if grid[0] < t0 or grid[-1] > t1:
            raise ValueError(f"saveat times must lie within tspan ({t0}, {t1})")
    return grid


def fixed_step_times(tspan: Tuple[float, float], dt: float) -> np.ndarray:
    """t0, t0+dt, ..., with the last point moved onto t1."""
    t0, t1 = tspan
    if dt <= 0:
        raise ValueError(f"dt must be positive; got {dt}")
    n = int(np.ceil((t1 - t0) / dt - 1e-9))
    times = t0 + dt * np.arange(n + 1)
    times[-1] = t1
    return times
