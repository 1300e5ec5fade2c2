"""Chemical Langevin equation integrated with Euler-Maruyama."""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

import numpy as np

from .exceptions import SolverError
from .problems import SDEProblem
from .solution import Solution, fixed_step_times, resolve_saveat, sample_path

logger = logging.getLogger(__name__)


def solve_cle(
    problem: SDEProblem,
    dt: float,
    *,
    saveat: Union[None, float, Sequence[float]] = None,
    seed: Optional[int] = None,
    positive: bool = False,
) -> Solution:
    """Integrate dX = S a(X) dt + s S diag(sqrt(a(X))) dW.

    Rates are clipped at zero before taking square roots. With
    ``positive=True`` the state is also clipped at zero after every step.
    """
    net = problem.network
    ratelaws = net.ratelaw_function()
    S = net.stoichiometry_array().astype(float)
    p = problem.p
    scale = float(problem.noise_scaling)
    rng = np.random.default_rng(problem.seed if seed is None else seed)

    steps = fixed_step_times(problem.tspan, dt)
    x = np.array(problem.u0, dtype=float)
    u = np.empty((net.n_species, steps.size))
    u[:, 0] = x
    for k in range(1, steps.size):
        h = steps[k] - steps[k - 1]
        a = np.maximum(ratelaws(x, p), 0.0)
        dW = rng.normal(0.0, np.sqrt(h), size=a.size)
        x = x + S @ (a * h) + scale * (S @ (np.sqrt(a) * dW))
        if positive:
            x = np.maximum(x, 0.0)
        if not np.all(np.isfinite(x)):
            raise SolverError(f"CLE state became non-finite at t={steps[k]}; try a smaller dt or positive=True")
        u[:, k] = x
    logger.info("Euler-Maruyama finished %d steps of dt=%g", steps.size - 1, dt)

    t_arr = steps
    grid = resolve_saveat(saveat, problem.tspan)
    if grid is not None:
        # Sample the step nearest below each save time.
        u = sample_path(t_arr, u, grid)
        t_arr = grid

    return Solution(
        t=t_arr,
        u=u,
        species=net.species_names,
        method="em",
        stats={"steps": int(steps.size - 1), "dt": float(dt)},
    )
