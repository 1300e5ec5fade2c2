"""Symbolic objects of a network defined in the reaction notation.

Prints the species and parameter orders, the ODE right-hand side, both
Jacobians and the LaTeX form of the equations.

Run:
    python examples/inspect_network.py
"""

from __future__ import annotations

import sympy as sp

from crnsim import reaction_network


def main() -> None:
    net = reaction_network(
        """
        (k1, km1), S + E <--> C
        k2, C --> E + P
        """,
        name="MichaelisMenten",
    )
    print(net.summary())

    print("\nF(x, p):")
    sp.pprint(net.rhs())

    print("\ndF/dx:")
    sp.pprint(net.jacobian())

    print("\ndF/dp:")
    sp.pprint(net.parameter_jacobian())

    print("\nConservation laws:")
    for mu in net.stoichiometric_first_integrals():
        print("  ", (mu * net.x)[0], "= const")

    print("\nLaTeX:")
    print(net.to_latex())


if __name__ == "__main__":
    main()
