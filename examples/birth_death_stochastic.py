"""Birth-death process: tau-leaping and the chemical Langevin equation.

Compares ensemble means of both approximations with the exact mean
50 - 45 exp(-t) of the linear birth-death process with immigration.

Run:
    python examples/birth_death_stochastic.py
"""

from __future__ import annotations

import math

import matplotlib.pyplot as plt
import numpy as np

from crnsim import JumpProblem, SDEProblem, save_figure, solve
from crnsim.examples import birth_death_network, birth_death_setup


def main() -> None:
    net = birth_death_network()
    setup = birth_death_setup()
    n_runs = 50

    print("Diffusion matrix of the chemical Langevin equation:")
    print(net.diffusion_matrix())

    jprob = JumpProblem(net, setup.u0, setup.tspan, setup.p)
    sprob = SDEProblem(net, setup.u0, setup.tspan, setup.p)

    fig, ax = plt.subplots(figsize=(8, 4.5))
    for label, prob, method in (("tau-leaping", jprob, "tau_leaping"), ("CLE", sprob, "em")):
        sols = [solve(prob, method, dt=setup.dt, saveat=0.05, seed=s) for s in range(n_runs)]
        mean = np.mean([s["X"] for s in sols], axis=0)
        ax.plot(sols[0].t, mean, label=f"{label} mean of {n_runs}")
        print(f"{label}: mean X(4) = {mean[-1]:.2f}")

    t = np.linspace(*setup.tspan, 200)
    ax.plot(t, 50 - 45 * np.exp(-t), "k--", label="exact mean")
    ax.set_xlabel("time")
    ax.set_ylabel("X")
    ax.legend(loc="best")
    print(f"exact: mean X(4) = {50 - 45 * math.exp(-4):.2f}")
    print("Saved", save_figure(ax, "birth_death_means.png"))


if __name__ == "__main__":
    main()
