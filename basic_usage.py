#!/usr/bin/env python3
"""
Basic Usage Examples for crnsim

This script demonstrates the core features of the package with small,
self-contained examples.
"""

import math
import sys

import numpy as np

sys.path.insert(0, 'src')
from crnsim import (
    JumpProblem, ODEProblem, Reaction, ReactionNetwork, SDEProblem,
    birth_death_network, list_available_networks, michaelis_menten_network,
    reaction_network, solve,
)
from crnsim.report import format_network_report, format_solution_summary


def example_1_string_parser():
    """Demonstrate the reaction notation."""
    print("\n" + "=" * 50)
    print("Example 1: Creating Networks from Strings")
    print("=" * 50)

    # Method 1: one reversible reaction, rates named automatically
    network = ReactionNetwork.from_string("A + B <-> C")
    print("\nFrom 'A + B <-> C':")
    print(f"  Species: {network.species_names}")
    print(f"  Parameters: {network.parameter_names}")

    # Method 2: explicit rates and rate laws
    network = reaction_network("""
        (kb, ku), S + E <--> C
        kcat, C --> E + P
        mm(X, v, K), 0 ⇒ X
    """)
    print("\nWith explicit rates:")
    for i, rxn in enumerate(network.reactions):
        print(f"    {i+1}. {rxn.to_string(network.species_names)}")

    # Method 3: stoichiometric coefficients and the empty complex
    network = reaction_network("k1, 2A --> B; k2, B --> ∅")
    print("\nFrom 'k1, 2A --> B; k2, B --> ∅':")
    for i, rxn in enumerate(network.reactions):
        print(f"    {i+1}. {rxn.to_string(network.species_names)}")


def example_2_built_in_networks():
    """Demonstrate built-in network factory functions."""
    print("\n" + "=" * 50)
    print("Example 2: Built-in Networks")
    print("=" * 50)

    print("\nAvailable networks:")
    for name, desc in list_available_networks().items():
        print(f"  {name}: {desc}")

    print("\n" + format_network_report(michaelis_menten_network()))


def example_3_hand_built_network():
    """Build a network from coefficient vectors."""
    print("\n" + "=" * 50)
    print("Example 3: Networks from Reaction objects")
    print("=" * 50)

    import sympy as sp

    k, d = sp.symbols("k d", positive=True)
    network = ReactionNetwork(
        species_names=["G", "M"],
        reactions=[
            Reaction((1, 0), (1, 1), k),  # G -> G + M
            Reaction((0, 1), (0, 0), d),  # M -> 0
        ],
        name="Transcription",
    )
    print("\n" + network.summary())
    print("\nODE right-hand side:")
    sp.pprint(network.rhs())


def example_4_numerical_functions():
    """Evaluate the compiled right-hand side and Jacobians."""
    print("\n" + "=" * 50)
    print("Example 4: Numerical functions")
    print("=" * 50)

    network = michaelis_menten_network()
    u = np.array([100.0, 20.0, 0.0, 0.0])
    p = np.array([0.01, 0.1, 0.1, 0.001])
    print(f"\n  F(u, p)  = {network.ode_function()(0.0, u, p)}")
    print(f"  dF/du    shape {network.jacobian_function()(0.0, u, p).shape}")
    print(f"  dF/dp    shape {network.parameter_jacobian_function()(0.0, u, p).shape}")


def example_5_solvers():
    """Solve the birth-death process four ways."""
    print("\n" + "=" * 50)
    print("Example 5: ODE, SSA, tau-leaping and CLE")
    print("=" * 50)

    network = birth_death_network()
    p = (1.0, 2.0, 50.0)
    tspan = (0.0, 4.0)
    print(f"\nExact mean at t=4: {50 - 45 * math.exp(-4):.3f}")

    runs = [
        solve(ODEProblem(network, [5.0], tspan, p), "LSODA"),
        solve(JumpProblem(network, [5], tspan, p, seed=1), "ssa"),
        solve(JumpProblem(network, [5], tspan, p, seed=1), "tau_leaping", dt=0.001),
        solve(SDEProblem(network, [5.0], tspan, p, seed=1), "em", dt=0.001),
    ]
    for sol in runs:
        print()
        print(format_solution_summary(sol))


def example_6_latex_export():
    """Demonstrate LaTeX export."""
    print("\n" + "=" * 50)
    print("Example 6: LaTeX Export")
    print("=" * 50)

    network = michaelis_menten_network()

    print("\nReactions in LaTeX:")
    print("-" * 40)
    print(network.reactions_to_latex())

    print("\nODE system in LaTeX:")
    print("-" * 40)
    print(network.to_latex())


def main():
    """Run all examples."""
    print("=" * 50)
    print("CRNSIM - BASIC USAGE EXAMPLES")
    print("=" * 50)

    example_1_string_parser()
    example_2_built_in_networks()
    example_3_hand_built_network()
    example_4_numerical_functions()
    example_5_solvers()
    example_6_latex_export()

    print("\n" + "=" * 50)
    print("All examples completed successfully!")
    print("=" * 50)


if __name__ == '__main__':
    main()
