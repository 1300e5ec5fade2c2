"""Deterministic solves through ``scipy.integrate.solve_ivp``."""

from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np
from scipy.integrate import solve_ivp

from .problems import ODEProblem
from .solution import Solution, resolve_saveat

logger = logging.getLogger(__name__)

_ODE_METHODS = {
    "rk45": "RK45",
    "rk23": "RK23",
    "dop853": "DOP853",
    "radau": "Radau",
    "bdf": "BDF",
    "lsoda": "LSODA",
}

# Methods that make use of the analytic Jacobian.
IMPLICIT_METHODS = frozenset({"Radau", "BDF", "LSODA"})


def ode_method_name(method: str) -> str:
    try:
        return _ODE_METHODS[method.lower()]
    except KeyError:
        raise ValueError(f"Unknown ODE method '{method}'. Known: {sorted(_ODE_METHODS.values())}") from None


def solve_ode(
    problem: ODEProblem,
    method: str = "RK45",
    *,
    saveat: Union[None, float, Sequence[float]] = None,
    rtol: float = 1e-6,
    atol: float = 1e-8,
    max_step: float = np.inf,
) -> Solution:
    """Integrate the network's ODEs over ``problem.tspan``.

    Parameters
    ----------
    method:
        Any ``solve_ivp`` method (case-insensitive). Implicit methods
        receive the analytic Jacobian.
    saveat:
        Spacing of the saved time points, or the explicit times. By default
        the integrator's own steps are returned.
    """
    method = ode_method_name(method)
    net = problem.network
    p = problem.p
    f = net.ode_function()

    def rhs(t: float, u: np.ndarray) -> np.ndarray:
        return f(t, u, p)

    kwargs = {}
    if method in IMPLICIT_METHODS:
        jac = net.jacobian_function()
        kwargs["jac"] = lambda t, u: jac(t, u, p)

    t_eval = resolve_saveat(saveat, problem.tspan)
    logger.info("Solving %s ODEs with %s over %s", net.name or "network", method, problem.tspan)
    sol = solve_ivp(
        rhs,
        problem.tspan,
        np.array(problem.u0, dtype=float),
        method=method,
        t_eval=t_eval,
        rtol=rtol,
        atol=atol,
        max_step=max_step,
        **kwargs,
    )
    if not sol.success:
        logger.warning("ODE solve with %s stopped early: %s", method, sol.message)

    return Solution(
        t=sol.t,
        u=sol.y,
        species=net.species_names,
        method=method,
        success=bool(sol.success),
        message=str(sol.message),
        stats={"nfev": int(sol.nfev), "njev": int(sol.njev), "nlu": int(sol.nlu)},
    )
