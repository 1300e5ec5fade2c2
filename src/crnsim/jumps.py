"""Stochastic simulation of integer copy numbers.

- `solve_ssa`: Gillespie's direct method (exact).
- `solve_tau_leaping`: fixed-step Poisson tau-leaping (approximate).
"""

from __future__ import annotations

import logging
import warnings
from typing import Optional, Sequence, Union

import numpy as np

from .exceptions import SolverError
from .problems import JumpProblem
from .solution import Solution, fixed_step_times, resolve_saveat, sample_path

logger = logging.getLogger(__name__)


def _rng(problem: JumpProblem, seed: Optional[int]) -> np.random.Generator:
    return np.random.default_rng(problem.seed if seed is None else seed)


def solve_ssa(
    problem: JumpProblem,
    *,
    saveat: Union[None, float, Sequence[float]] = None,
    seed: Optional[int] = None,
    max_steps: int = 10_000_000,
) -> Solution:
    """Simulate one exact trajectory with the direct method.

    Without `saveat` the state after every event is recorded, plus the
    state at ``tspan[1]``. With `saveat` the path is sampled on those times.
    """
    net = problem.network
    propensity = net.propensity_function()
    S = net.stoichiometry_array()
    p = problem.p
    rng = _rng(problem, seed)
    t0, t1 = problem.tspan

    x = problem.u0.copy()
    t = t0
    times = [t0]
    states = [x.copy()]
    n_events = 0
    while True:
        a = propensity(x, p)
        if np.any(a < 0):
            raise SolverError(f"Negative propensity at t={t}: {a.tolist()}")
        a0 = a.sum()
        if a0 <= 0:
            # Absorbing state, nothing can fire any more.
            break
        t += rng.exponential(1.0 / a0)
        if t >= t1:
            break
        if n_events >= max_steps:
            raise SolverError(f"SSA exceeded max_steps={max_steps} before t={t1} (reached t={t})")
        j = int(np.searchsorted(np.cumsum(a), rng.random() * a0, side="right"))
        x = x + S[:, min(j, a.size - 1)]
        times.append(t)
        states.append(x.copy())
        n_events += 1

    times.append(t1)
    states.append(x.copy())
    t_arr = np.array(times)
    u = np.array(states).T
    logger.info("SSA finished with %d events over %s", n_events, problem.tspan)

    grid = resolve_saveat(saveat, problem.tspan)
    if grid is not None:
        u = sample_path(t_arr, u, grid)
        t_arr = grid

    return Solution(
        t=t_arr,
        u=u,
        species=net.species_names,
        method="ssa",
        stats={"events": n_events},
    )


def solve_tau_leaping(
    problem: JumpProblem,
    dt: float,
    *,
    saveat: Union[None, float, Sequence[float]] = None,
    seed: Optional[int] = None,
) -> Solution:
    """Simulate with fixed-step tau-leaping.

    Each step fires Poisson(a_j(x) * dt) copies of every reaction j.
    Copy numbers that would become negative are clamped at zero.
    """
    net = problem.network
    propensity = net.propensity_function()
    S = net.stoichiometry_array()
    p = problem.p
    rng = _rng(problem, seed)

    steps = fixed_step_times(problem.tspan, dt)
    x = problem.u0.copy()
    u = np.empty((net.n_species, steps.size), dtype=np.int64)
    u[:, 0] = x
    clamped = 0
    for k in range(1, steps.size):
        h = steps[k] - steps[k - 1]
        a = np.maximum(propensity(x, p), 0.0)
        firings = rng.poisson(a * h)
        x = x + S @ firings
        if np.any(x < 0):
            clamped += 1
            x = np.maximum(x, 0)
        u[:, k] = x

    if clamped:
        warnings.warn(
            f"tau-leaping drove copy numbers negative in {clamped} of {steps.size - 1} steps; "
            "they were clamped at zero (consider a smaller dt)",
            RuntimeWarning,
            stacklevel=2,
        )
    logger.info("Tau-leaping finished %d steps of dt=%g", steps.size - 1, dt)

    t_arr = steps
    grid = resolve_saveat(saveat, problem.tspan)
    if grid is not None:
        u = sample_path(t_arr, u, grid)
        t_arr = grid

    return Solution(
        t=t_arr,
        u=u,
        species=net.species_names,
        method="tau_leaping",
        stats={"steps": int(steps.size - 1), "clamped_steps": clamped, "dt": float(dt)},
    )
