"""Stochastic repressilator with Gillespie's direct method.

The same network as ``repressilator_ode.py``, now on integer copy numbers.
The proteins still cycle, but period and amplitude fluctuate.

Run:
    python examples/repressilator_ssa.py [seed]
"""

from __future__ import annotations

import sys

from crnsim import JumpProblem, plot_solution, save_figure, solve
from crnsim.examples import repressilator_network, repressilator_setup


def main() -> None:
    seed = int(sys.argv[1]) if len(sys.argv) > 1 else 1
    net = repressilator_network()
    setup = repressilator_setup()

    prob = JumpProblem(net, [int(v) for v in setup.u0], setup.tspan, setup.p, seed=seed)
    sol = solve(prob, "ssa")
    print(f"{sol.stats['events']} reaction events; final state {sol.final_state()}")

    ax = plot_solution(sol, ["P1", "P2", "P3"], title=f"Repressilator proteins, SSA (seed {seed})")
    print("Saved", save_figure(ax, "repressilator_ssa.png"))


if __name__ == "__main__":
    main()
