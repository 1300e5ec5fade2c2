from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import sympy as sp

from .network import ReactionNetwork
from .parser import reaction_network
from .reaction import Reaction


@dataclass(frozen=True)
class ExampleSetup:
    """Demonstration values for a built-in network.

    ``u0`` and ``p`` follow the network's species and parameter order.
    """

    u0: Tuple[float, ...]
    p: Tuple[float, ...]
    tspan: Tuple[float, float]
    saveat: Optional[float] = None
    dt: Optional[float] = None


REPRESSILATOR = """
hillr(P3, alpha, K, n), 0 --> m1
hillr(P1, alpha, K, n), 0 --> m2
hillr(P2, alpha, K, n), 0 --> m3
(delta, gamma), m1 <--> 0
(delta, gamma), m2 <--> 0
(delta, gamma), m3 <--> 0
beta, m1 --> m1 + P1
beta, m2 --> m2 + P2
beta, m3 --> m3 + P3
mu, P1 --> 0
mu, P2 --> 0
mu, P3 --> 0
"""


def repressilator_network() -> ReactionNetwork:
    """Three genes repressing each other in a cycle (Elowitz & Leibler).

    Species order: [m1, m2, m3, P1, P2, P3]
    Parameters: alpha, K, n, delta, gamma, beta, mu

    Each mRNA m_i is transcribed at the repressive Hill rate of the previous
    protein, degraded at rate delta and produced basally at rate gamma; each
    protein P_i is translated from m_i at rate beta and degraded at rate mu.
    """
    return reaction_network(
        REPRESSILATOR,
        parameters="alpha K n delta gamma beta mu",
        name="Repressilator",
    )


def repressilator_setup() -> ExampleSetup:
    return ExampleSetup(
        u0=(0.0, 0.0, 0.0, 20.0, 0.0, 0.0),
        p=(0.5, 40.0, 2.0, math.log(2) / 120, 5e-3, 20 * math.log(2) / 120, math.log(2) / 60),
        tspan=(0.0, 10000.0),
        saveat=10.0,
    )


BIRTH_DEATH = """
c1, X --> 2X
c2, X --> 0
c3, 0 --> X
"""


def birth_death_network() -> ReactionNetwork:
    """Birth-death process with immigration.

    Species order: [X]
    Parameters: c1 (birth), c2 (death), c3 (immigration)

    The mean obeys dX/dt = (c1 - c2) X + c3.
    """
    return reaction_network(BIRTH_DEATH, parameters="c1 c2 c3", name="BirthDeath")


def birth_death_setup() -> ExampleSetup:
    return ExampleSetup(u0=(5.0,), p=(1.0, 2.0, 50.0), tspan=(0.0, 4.0), dt=0.001)


def michaelis_menten_network() -> ReactionNetwork:
    """Reversible Michaelis--Menten system.

    Reaction scheme:
        S + E <-> C <-> E + P

    Species order: [S, E, C, P]
    Rate constants: k1, km1, k2, km2 (km* are the reverse rates)
    """
    k1, km1, k2, km2 = sp.symbols("k1 km1 k2 km2", positive=True)

    # S + E -> C
    r1 = Reaction((1, 1, 0, 0), (0, 0, 1, 0), k1)
    # C -> S + E
    r2 = Reaction((0, 0, 1, 0), (1, 1, 0, 0), km1)

    # C -> E + P
    r3 = Reaction((0, 0, 1, 0), (0, 1, 0, 1), k2)
    # E + P -> C
    r4 = Reaction((0, 1, 0, 1), (0, 0, 1, 0), km2)

    return ReactionNetwork(
        species_names=["S", "E", "C", "P"],
        reactions=[r1, r2, r3, r4],
        parameters=[k1, km1, k2, km2],
        name="MichaelisMenten",
    )


def michaelis_menten_setup() -> ExampleSetup:
    return ExampleSetup(
        u0=(100.0, 20.0, 0.0, 0.0),
        p=(0.01, 0.1, 0.1, 0.001),
        tspan=(0.0, 200.0),
        saveat=1.0,
        dt=0.01,
    )


_EXAMPLES: Dict[str, Tuple[Callable[[], ReactionNetwork], Callable[[], ExampleSetup], str]] = {
    "repressilator": (
        repressilator_network,
        repressilator_setup,
        "Three-gene repressilator with Hill-type repression (6 species, 7 parameters)",
    ),
    "birth_death": (
        birth_death_network,
        birth_death_setup,
        "Birth-death process with immigration (1 species, 3 parameters)",
    ),
    "michaelis_menten": (
        michaelis_menten_network,
        michaelis_menten_setup,
        "Reversible Michaelis-Menten enzyme kinetics (4 species, 4 parameters)",
    ),
}


def list_available_networks() -> Dict[str, str]:
    """Name -> one-line description of every built-in example."""
    return {name: desc for name, (_net, _setup, desc) in _EXAMPLES.items()}


def get_example(name: str) -> Tuple[ReactionNetwork, ExampleSetup]:
    """Return a fresh built-in network and its demonstration setup."""
    try:
        make_network, make_setup, _desc = _EXAMPLES[name]
    except KeyError:
        raise KeyError(f"Unknown example '{name}'. Known: {sorted(_EXAMPLES)}") from None
    return make_network(), make_setup()
