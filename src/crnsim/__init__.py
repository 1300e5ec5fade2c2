"""Top-level package API for crnsim.

This package defines chemical reaction networks through a compact reaction
notation, derives their mathematical representations symbolically (ODE
right-hand side, Jacobian, parameter Jacobian, chemical Langevin noise) and
simulates them as

- deterministic ODEs (SciPy),
- exact jump processes (Gillespie SSA),
- approximate tau-leaping, and
- chemical Langevin SDEs (Euler-Maruyama).

Public API:
- reaction_network, ReactionParser, Reaction, ReactionNetwork
- ODEProblem, JumpProblem, SDEProblem, solve, Solution
- plot_solution
- Built-in example networks
"""

from .exceptions import DSLParseError, ProblemDefinitionError, ReactionNetworkError, SolverError
from .reaction import Reaction
from .network import ReactionNetwork
from .parser import ReactionParser, reaction_network
from .problems import JumpProblem, ODEProblem, SDEProblem
from .solution import Solution
from .solve import solve
from .ode import solve_ode
from .jumps import solve_ssa, solve_tau_leaping
from .sde import solve_cle
from .plotting import plot_solution, save_figure
from .report import ReportOptions, format_network_report, format_solution_summary
from .examples import (
    ExampleSetup,
    birth_death_network,
    get_example,
    list_available_networks,
    michaelis_menten_network,
    repressilator_network,
)

__version__ = "0.1.0"

__all__ = [
    "DSLParseError",
    "ProblemDefinitionError",
    "ReactionNetworkError",
    "SolverError",
    "Reaction",
    "ReactionNetwork",
    "ReactionParser",
    "reaction_network",
    "ODEProblem",
    "JumpProblem",
    "SDEProblem",
    "Solution",
    "solve",
    "solve_ode",
    "solve_ssa",
    "solve_tau_leaping",
    "solve_cle",
    "plot_solution",
    "save_figure",
    "ReportOptions",
    "format_network_report",
    "format_solution_summary",
    "ExampleSetup",
    "birth_death_network",
    "get_example",
    "list_available_networks",
    "michaelis_menten_network",
    "repressilator_network",
]
