"""One entry point for every problem type."""

from __future__ import annotations

from typing import Any, Optional, Union

from .jumps import solve_ssa, solve_tau_leaping
from .ode import solve_ode
from .problems import JumpProblem, ODEProblem, SDEProblem
from .sde import solve_cle
from .solution import Solution

SSA_METHODS = frozenset({"ssa", "direct", "gillespie"})
TAU_LEAPING_METHODS = frozenset({"tau_leaping", "tau-leaping", "tauleaping", "simple_tau_leaping"})
SDE_METHODS = frozenset({"em", "euler_maruyama", "cle"})


def solve(
    problem: Union[ODEProblem, JumpProblem, SDEProblem],
    method: Optional[str] = None,
    **options: Any,
) -> Solution:
    """Solve `problem` with `method` (a sensible default per problem type).

    ================  ====================================  =================
    problem           methods                               default
    ================  ====================================  =================
    ODEProblem        RK45, RK23, DOP853, Radau, BDF, LSODA  RK45
    JumpProblem       ssa (direct), tau_leaping (needs dt)  ssa
    SDEProblem        em (needs dt)                         em
    ================  ====================================  =================

    Remaining keyword arguments go to the solver (``saveat``, ``dt``,
    ``seed``, tolerances, ...).
    """
    if isinstance(problem, ODEProblem):
        return solve_ode(problem, method or "RK45", **options)

    name = (method or "").lower()
    if isinstance(problem, JumpProblem):
        if not name or name in SSA_METHODS:
            return solve_ssa(problem, **options)
        if name in TAU_LEAPING_METHODS:
            return solve_tau_leaping(problem, **options)
        raise ValueError(f"Unknown jump method '{method}'; use 'ssa' or 'tau_leaping'")

    if isinstance(problem, SDEProblem):
        if not name or name in SDE_METHODS:
            return solve_cle(problem, **options)
        raise ValueError(f"Unknown SDE method '{method}'; use 'em'")

    raise TypeError(f"Cannot solve objects of type {type(problem).__name__}")
