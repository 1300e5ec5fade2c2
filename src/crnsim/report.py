"""Human-readable reporting utilities.

This module provides lightweight helpers to produce readable console /
Markdown reports of

- the reactions of a network,
- its ODE right-hand side, conservation laws and Jacobians, and
- the end state of a simulation.

Nothing here is required for the modelling or the solvers; it is strictly
presentation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import sympy as sp

from .network import ReactionNetwork
from .solution import Solution


def _expr_to_str(e: sp.Expr) -> str:
    """Stable string for SymPy expressions in reports."""
    return sp.sstr(e)


def format_reactions(network: ReactionNetwork, *, max_items: int = 50) -> List[str]:
    """Format each directed reaction as 'A + B -> C  [rate]'."""
    out = [
        f"{i+1}. {r.to_string(network.species_names)}"
        for i, r in enumerate(network.reactions[: int(max_items)])
    ]
    if network.n_reactions > max_items:
        out.append(f"... ({network.n_reactions - max_items} more)")
    return out


def format_odes(network: ReactionNetwork) -> List[str]:
    """Format dx/dt = F(x, p) as a list of strings."""
    F = network.rhs()
    return [
        f"d{name}/dt = {_expr_to_str(F[i, 0])}"
        for i, name in enumerate(network.species_names)
    ]


def format_conservation_laws(network: ReactionNetwork) -> List[str]:
    """Format each conservation law μ·x = const."""
    x = network.x
    return [f"{_expr_to_str((mu * x)[0, 0])} = const" for mu in network.stoichiometric_first_integrals()]


@dataclass
class ReportOptions:
    """Tunable knobs for report verbosity."""

    max_reactions: int = 50
    include_odes: bool = True
    include_conservation_laws: bool = True
    include_jacobian: bool = False
    include_parameter_jacobian: bool = False


def format_network_report(network: ReactionNetwork, *, options: Optional[ReportOptions] = None) -> str:
    """Format a Markdown report of a network."""
    opt = options or ReportOptions()
    lines: List[str] = []

    lines.append(f"### {network.name or 'Reaction network'}")
    lines.append(f"Species ({network.n_species}): " + ", ".join(network.species_names))
    lines.append(f"Parameters ({network.n_parameters}): " + ", ".join(network.parameter_names))

    lines.append("Reactions:")
    lines.extend("  " + s for s in format_reactions(network, max_items=opt.max_reactions))

    if opt.include_odes:
        lines.append("ODEs:")
        lines.extend("  " + s for s in format_odes(network))

    if opt.include_conservation_laws:
        laws = format_conservation_laws(network)
        if laws:
            lines.append("Conservation laws:")
            lines.extend("  " + s for s in laws)

    if opt.include_jacobian:
        lines.append("Jacobian =")
        lines.append(sp.pretty(network.jacobian()))

    if opt.include_parameter_jacobian:
        lines.append("Parameter Jacobian =")
        lines.append(sp.pretty(network.parameter_jacobian()))

    return "\n".join(lines) + "\n"


def format_solution_summary(solution: Solution) -> str:
    """One block describing how a solve went and where it ended."""
    lines = [
        f"### {solution.method}",
        f"success: {solution.success}" + (f" ({solution.message})" if solution.message else ""),
        f"time points: {len(solution)} over [{solution.t[0]:g}, {solution.t[-1]:g}]",
    ]
    if solution.stats:
        lines.append("stats: " + ", ".join(f"{k}={v}" for k, v in solution.stats.items()))
    lines.append("final state:")
    lines.extend(f"  {name} = {value:g}" for name, value in solution.final_state().items())
    return "\n".join(lines) + "\n"
