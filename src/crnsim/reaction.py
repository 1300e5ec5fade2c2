from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import sympy as sp


def species_symbol(name: str) -> sp.Symbol:
    """SymPy symbol used for a species amount."""
    return sp.Symbol(name, real=True)


def parameter_symbol(name: str) -> sp.Symbol:
    """SymPy symbol used for a rate parameter."""
    return sp.Symbol(name, positive=True)


@dataclass(frozen=True)
class Reaction:
    """A single reaction with a (possibly non mass-action) rate.

    Parameters
    ----------
    reactants:
        Stoichiometric coefficients of the substrate complex (length n).
    products:
        Stoichiometric coefficients of the product complex (length n).
    rate:
        SymPy expression for the rate. It may contain parameters and, for
        e.g. Hill-type regulation, species symbols.
    only_use_rate:
        If True, `rate` is the complete rate law and no mass-action factor is
        multiplied in.

    Notes
    -----
    For a reaction Y1 -> Y2 with substrate coefficients m_i and product
    coefficients r_i, mass action kinetics yields the term

        rate * prod_i x_i**m_i / m_i! * (r - m)

    in the ODE system dx/dt (the factorials are dropped when combinatoric
    rate laws are disabled). For discrete counts the propensity is

        rate * prod_i C(x_i, m_i).
    """

    reactants: Tuple[int, ...]
    products: Tuple[int, ...]
    rate: sp.Expr
    only_use_rate: bool = False

    def __post_init__(self) -> None:
        if len(self.reactants) != len(self.products):
            raise ValueError("reactants and products must have the same length")
        if any(int(c) < 0 for c in self.reactants) or any(int(c) < 0 for c in self.products):
            raise ValueError("stoichiometric coefficients must be nonnegative integers")
        object.__setattr__(self, "rate", sp.sympify(self.rate))

    @property
    def n_species(self) -> int:
        return len(self.reactants)

    @property
    def order(self) -> int:
        """Molecularity of the substrate complex."""
        return sum(int(m) for m in self.reactants)

    def reaction_vector(self) -> sp.Matrix:
        """Return v = products - reactants as an n×1 SymPy Matrix."""
        return sp.Matrix([int(p) - int(r) for r, p in zip(self.reactants, self.products)])

    def reactant_monomial(self, x: Sequence[sp.Symbol], combinatoric: bool = False) -> sp.Expr:
        """Return the mass-action monomial φ(x) = ∏ x_i^{m_i} (/ m_i! if combinatoric)."""
        if len(x) != self.n_species:
            raise ValueError("x must have length n_species")
        mon = sp.Integer(1)
        for xi, mi in zip(x, self.reactants):
            mi_int = int(mi)
            if mi_int:
                mon *= xi ** mi_int
                if combinatoric:
                    mon /= sp.factorial(mi_int)
        return mon

    def ode_ratelaw(self, x: Sequence[sp.Symbol], combinatoric: bool = True) -> sp.Expr:
        """Return the deterministic rate law of this reaction."""
        if self.only_use_rate:
            return self.rate
        return self.rate * self.reactant_monomial(x, combinatoric=combinatoric)

    def jump_propensity(self, x: Sequence[sp.Symbol]) -> sp.Expr:
        """Return the propensity for integer copy numbers x.

        Uses the number of distinct substrate combinations, i.e.
        x*(x-1)/2 for a 2X substrate complex.
        """
        if self.only_use_rate:
            return self.rate
        if len(x) != self.n_species:
            raise ValueError("x must have length n_species")
        combos = sp.Integer(1)
        for xi, mi in zip(x, self.reactants):
            mi_int = int(mi)
            for j in range(mi_int):
                combos *= xi - j
            if mi_int > 1:
                combos /= sp.factorial(mi_int)
        return self.rate * combos

    def contribution(self, x: Sequence[sp.Symbol], combinatoric: bool = True) -> sp.Matrix:
        """Return this reaction's contribution to the RHS F(x,p)."""
        return self.reaction_vector() * self.ode_ratelaw(x, combinatoric=combinatoric)

    def is_reactant(self, species_index: int) -> bool:
        """True iff the given species appears as a reactant (mi > 0)."""
        return int(self.reactants[species_index]) > 0

    def is_nonreactant(self, species_index: int) -> bool:
        """True iff the given species does not appear as a reactant (mi = 0)."""
        return int(self.reactants[species_index]) == 0

    def is_mass_action(self, species_symbols: Iterable[sp.Symbol]) -> bool:
        """True iff the rate is a species-independent constant times the mass-action factor."""
        if self.only_use_rate:
            return False
        return not (self.rate.free_symbols & set(species_symbols))

    def to_string(self, species_names: Optional[Sequence[str]] = None) -> str:
        """Render as e.g. ``'2A + B -> C  [k1]'``."""
        names = list(species_names) if species_names is not None else [
            f"x{i+1}" for i in range(self.n_species)
        ]

        def complex_to_str(coeffs: Sequence[int]) -> str:
            terms = []
            for name, c in zip(names, coeffs):
                c = int(c)
                if c == 0:
                    continue
                terms.append(name if c == 1 else f"{c}{name}")
            return " + ".join(terms) if terms else "0"

        arrow = "⇒" if self.only_use_rate else "->"
        return f"{complex_to_str(self.reactants)} {arrow} {complex_to_str(self.products)}  [{sp.sstr(self.rate)}]"

    @staticmethod
    def from_coeff_vectors(
        reactants: Iterable[int],
        products: Iterable[int],
        rate: sp.Expr,
        only_use_rate: bool = False,
    ) -> "Reaction":
        return Reaction(
            tuple(int(c) for c in reactants),
            tuple(int(c) for c in products),
            rate,
            only_use_rate,
        )
