from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import sympy as sp

from .exceptions import ReactionNetworkError
from .reaction import Reaction, parameter_symbol, species_symbol

logger = logging.getLogger(__name__)


def _sanitize_symbol_name(name: str) -> str:
    # SymPy symbols may include many characters, but we keep a conservative subset
    allowed = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")
    if not name:
        return "x"
    cleaned = "".join(ch if ch in allowed else "_" for ch in name)
    if cleaned[0].isdigit():
        cleaned = "x_" + cleaned
    return cleaned


def _ordered_free_symbols(expr: sp.Expr) -> List[sp.Symbol]:
    return sorted(expr.free_symbols, key=lambda z: str(z))


@dataclass
class ReactionNetwork:
    """A reaction network with symbolic rate expressions.

    Parameters
    ----------
    species_names:
        Ordered species names. The order fixes the layout of every state
        vector (initial conditions, solutions, Jacobian rows).
    reactions:
        List of `Reaction` objects sized to ``len(species_names)``.
    parameters:
        Optional ordered parameters (names or SymPy symbols). When omitted
        they are collected reaction by reaction, and alphabetically within
        one rate expression since SymPy keeps no textual order. Networks
        read from text pass their parameters in textual order.
    name:
        Optional network name used in summaries and plots.
    combinatoric_ratelaws:
        If True (default) the deterministic rate law of a substrate complex
        ``m X`` is scaled by ``1/m!``.

    Notes
    -----
    The ODE system is
        dx/dt = Σ_j v_j a_j(x, p)
    with reaction vectors v_j and rate laws a_j.
    """

    species_names: List[str]
    reactions: List[Reaction]
    parameters: Optional[Sequence[Union[str, sp.Symbol]]] = None
    name: Optional[str] = None
    combinatoric_ratelaws: bool = True
    _cache: Dict[str, Any] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.species_names = [str(s) for s in self.species_names]
        if not self.species_names:
            raise ReactionNetworkError("a reaction network needs at least one species")
        if len(set(self.species_names)) != len(self.species_names):
            raise ReactionNetworkError(f"species names must be unique; got {self.species_names}")
        self.reactions = list(self.reactions)
        if any(r.n_species != self.n_species for r in self.reactions):
            raise ReactionNetworkError("all reactions must use the same n_species as the network")

        self._x = sp.Matrix([species_symbol(_sanitize_symbol_name(s)) for s in self.species_names])

        # Rates built by hand may use species symbols without our assumptions.
        by_name = {str(s): s for s in self._x}
        fixed: List[Reaction] = []
        for r in self.reactions:
            subs = {
                sym: by_name[str(sym)]
                for sym in r.rate.free_symbols
                if str(sym) in by_name and sym != by_name[str(sym)]
            }
            fixed.append(replace(r, rate=r.rate.xreplace(subs)) if subs else r)
        self.reactions = fixed

        self.parameters = self._resolve_parameters(self.parameters)

    def _resolve_parameters(self, declared: Optional[Sequence[Union[str, sp.Symbol]]]) -> List[sp.Symbol]:
        species = set(self.x_symbols)
        used: List[sp.Symbol] = []
        for r in self.reactions:
            for sym in _ordered_free_symbols(r.rate):
                if sym not in species and sym not in used:
                    used.append(sym)
        if declared is None:
            return used

        used_by_name = {str(s): s for s in used}
        out: List[sp.Symbol] = []
        for item in declared:
            nm = str(item)
            if nm in self.species_names:
                raise ReactionNetworkError(f"'{nm}' is declared both as a species and a parameter")
            if nm in used_by_name:
                sym = used_by_name[nm]
            elif isinstance(item, sp.Symbol):
                sym = item
            else:
                sym = parameter_symbol(nm)
            if sym in out:
                raise ReactionNetworkError(f"parameter '{nm}' is declared twice")
            out.append(sym)

        declared_names = {str(s) for s in out}
        missing = [str(s) for s in used if str(s) not in declared_names]
        if missing:
            raise ReactionNetworkError(
                f"rate expressions use undeclared parameters: {', '.join(missing)}"
            )
        return out

    # -----------------------------
    # Basic queries
    # -----------------------------

    @property
    def n_species(self) -> int:
        return len(self.species_names)

    @property
    def n_reactions(self) -> int:
        return len(self.reactions)

    @property
    def n_parameters(self) -> int:
        return len(self.parameters)

    @property
    def x(self) -> sp.Matrix:
        """Species symbols as an n×1 vector."""
        return self._x

    @property
    def x_symbols(self) -> Tuple[sp.Symbol, ...]:
        return tuple(self._x)

    @property
    def parameter_names(self) -> List[str]:
        return [str(p) for p in self.parameters]

    @property
    def rate_constants(self) -> List[sp.Symbol]:
        """Alias for `parameters`."""
        return list(self.parameters)

    def species_index(self, name: Union[str, sp.Symbol]) -> int:
        try:
            return self.species_names.index(str(name))
        except ValueError:
            raise KeyError(f"Unknown species '{name}'. Known: {self.species_names}") from None

    def parameter_index(self, name: Union[str, sp.Symbol]) -> int:
        try:
            return self.parameter_names.index(str(name))
        except ValueError:
            raise KeyError(f"Unknown parameter '{name}'. Known: {self.parameter_names}") from None

    # -----------------------------
    # Symbolic representations
    # -----------------------------

    def stoichiometric_matrix(self) -> sp.Matrix:
        """Return the net stoichiometric matrix S with columns reaction vectors."""
        if not self.reactions:
            return sp.Matrix.zeros(self.n_species, 0)
        cols = [r.reaction_vector() for r in self.reactions]
        return sp.Matrix.hstack(*cols)

    def reactant_matrix(self) -> sp.Matrix:
        """Return the substrate stoichiometry matrix with columns reactant complexes."""
        if not self.reactions:
            return sp.Matrix.zeros(self.n_species, 0)
        return sp.Matrix.hstack(*[sp.Matrix(r.reactants) for r in self.reactions])

    def product_matrix(self) -> sp.Matrix:
        """Return the product stoichiometry matrix with columns product complexes."""
        if not self.reactions:
            return sp.Matrix.zeros(self.n_species, 0)
        return sp.Matrix.hstack(*[sp.Matrix(r.products) for r in self.reactions])

    def ode_ratelaws(self) -> sp.Matrix:
        """Deterministic rate laws a(x, p) as an r×1 Matrix."""
        x = list(self.x_symbols)
        return sp.Matrix(
            [r.ode_ratelaw(x, combinatoric=self.combinatoric_ratelaws) for r in self.reactions]
        )

    def propensities(self) -> sp.Matrix:
        """Propensities for integer copy numbers as an r×1 Matrix."""
        x = list(self.x_symbols)
        return sp.Matrix([r.jump_propensity(x) for r in self.reactions])

    def rhs(self, simplify: bool = False) -> sp.Matrix:
        """Return the RHS F(x,p) as an n×1 SymPy Matrix."""
        F = sp.Matrix.zeros(self.n_species, 1)
        x = list(self.x_symbols)
        for r in self.reactions:
            F += r.contribution(x, combinatoric=self.combinatoric_ratelaws)
        return sp.simplify(F) if simplify else F

    def jacobian(self, simplify: bool = False) -> sp.Matrix:
        """Return the Jacobian dF/dx as an n×n SymPy Matrix."""
        J = self.rhs().jacobian(self.x_symbols)
        return sp.simplify(J) if simplify else J

    def parameter_jacobian(self, simplify: bool = False) -> sp.Matrix:
        """Return dF/dp as an n×n_parameters SymPy Matrix."""
        if not self.parameters:
            return sp.Matrix.zeros(self.n_species, 0)
        pJ = self.rhs().jacobian(list(self.parameters))
        return sp.simplify(pJ) if simplify else pJ

    def diffusion_matrix(self) -> sp.Matrix:
        """Noise matrix of the chemical Langevin equation, S·diag(√a) (n×r)."""
        S = self.stoichiometric_matrix()
        a = self.ode_ratelaws()
        return sp.Matrix(self.n_species, self.n_reactions, lambda i, j: S[i, j] * sp.sqrt(a[j]))

    def stoichiometric_first_integrals(self, integer_basis: bool = True) -> List[sp.Matrix]:
        """Return a basis of stoichiometric first integrals (conservation laws).

        Each element is returned as a 1×n row vector μ^T such that μ^T S = 0.
        """
        S = self.stoichiometric_matrix()
        if S.cols == 0:
            # No reactions: every coordinate is an integral.
            return [
                sp.Matrix([[1 if i == j else 0 for j in range(self.n_species)]])
                for i in range(self.n_species)
            ]

        # Left nullspace of S is right nullspace of S.T.
        out: List[sp.Matrix] = []
        for v in S.T.nullspace():
            row = sp.Matrix(v).T
            if integer_basis:
                row = _make_integer_row(row)
            out.append(row)
        return out

    def common_non_reactants(self) -> List[int]:
        """Return indices of species that never appear as reactants in any reaction."""
        return [
            i for i in range(self.n_species) if all(r.is_nonreactant(i) for r in self.reactions)
        ]

    # -----------------------------
    # Numerical functions
    # -----------------------------

    def _lambdify(self, key: str, expr: sp.Matrix, shape: Tuple[int, ...]) -> Callable[..., np.ndarray]:
        if key in self._cache:
            return self._cache[key]

        logger.debug("Compiling %s for network %s", key, self.name or "<unnamed>")
        x = list(self.x_symbols)
        p = list(self.parameters)
        if 0 in shape:
            def fn(u, params):
                return np.zeros(shape)
        elif p:
            raw = sp.lambdify([x, p], expr, modules="numpy")

            def fn(u, params):
                return np.asarray(raw(u, params), dtype=float).reshape(shape)
        else:
            raw = sp.lambdify([x], expr, modules="numpy")

            def fn(u, params):
                return np.asarray(raw(u), dtype=float).reshape(shape)

        self._cache[key] = fn
        return fn

    def ode_function(self) -> Callable[[float, np.ndarray, np.ndarray], np.ndarray]:
        """Return f(t, u, p) -> du/dt."""
        raw = self._lambdify("rhs", self.rhs(), (self.n_species,))

        def f(t: float, u: np.ndarray, p: np.ndarray) -> np.ndarray:
            return raw(u, p)

        return f

    def jacobian_function(self) -> Callable[[float, np.ndarray, np.ndarray], np.ndarray]:
        """Return J(t, u, p) -> dF/du (n×n)."""
        raw = self._lambdify("jacobian", self.jacobian(), (self.n_species, self.n_species))

        def jac(t: float, u: np.ndarray, p: np.ndarray) -> np.ndarray:
            return raw(u, p)

        return jac

    def parameter_jacobian_function(self) -> Callable[[float, np.ndarray, np.ndarray], np.ndarray]:
        """Return pJ(t, u, p) -> dF/dp (n×n_parameters)."""
        raw = self._lambdify(
            "parameter_jacobian", self.parameter_jacobian(), (self.n_species, self.n_parameters)
        )

        def paramjac(t: float, u: np.ndarray, p: np.ndarray) -> np.ndarray:
            return raw(u, p)

        return paramjac

    def ratelaw_function(self) -> Callable[[np.ndarray, np.ndarray], np.ndarray]:
        """Return a(u, p), the deterministic rate of each reaction."""
        return self._lambdify("ratelaws", self.ode_ratelaws(), (self.n_reactions,))

    def propensity_function(self) -> Callable[[np.ndarray, np.ndarray], np.ndarray]:
        """Return a(u, p), the jump propensity of each reaction."""
        return self._lambdify("propensities", self.propensities(), (self.n_reactions,))

    def stoichiometry_array(self) -> np.ndarray:
        """Net stoichiometric matrix as an integer NumPy array (n×r)."""
        if "stoich" not in self._cache:
            self._cache["stoich"] = np.array(self.stoichiometric_matrix().tolist(), dtype=np.int64).reshape(
                (self.n_species, self.n_reactions)
            )
        return self._cache["stoich"]

    # -----------------------------
    # Presentation
    # -----------------------------

    def summary(self) -> str:
        """Human-readable summary."""
        lines = []
        title = f"ReactionNetwork(n_species={self.n_species}, n_reactions={self.n_reactions})"
        if self.name:
            title = f"{self.name}: {title}"
        lines.append(title)
        lines.append("Species: " + ", ".join(self.species_names))
        lines.append("Parameters: " + ", ".join(self.parameter_names))
        return "\n".join(lines)

    def to_latex(self) -> str:
        """Export the ODE system to LaTeX.

        Returns an ``align`` environment with equations of the form
            \\frac{d x_i}{dt} = F_i(x,p).
        """
        F = self.rhs()
        lines = []
        for i, xi in enumerate(self.x_symbols):
            lhs = f"\\frac{{d{sp.latex(xi)}}}{{dt}}"
            rhs = sp.latex(F[i, 0])
            lines.append(f"{lhs} &= {rhs}")
        body = " \\\\\n".join(lines)
        return "\\begin{align}\n" + body + "\n\\end{align}"

    def reactions_to_latex(self) -> str:
        """Export directed reactions to LaTeX.

        Notes
        -----
        This prints each directed reaction separately. If your network is built from
        reversible reactions, you will see two lines per reversible pair.
        """
        names = [sp.latex(s) for s in self.x_symbols]

        def complex_to_str(coeffs):
            terms = []
            for name, c in zip(names, coeffs):
                c = int(c)
                if c == 0:
                    continue
                terms.append(name if c == 1 else f"{c}{name}")
            return " + ".join(terms) if terms else "\\varnothing"

        lines = []
        for r in self.reactions:
            lhs = complex_to_str(r.reactants)
            rhs = complex_to_str(r.products)
            arrow = "\\xRightarrow" if r.only_use_rate else "\\xrightarrow"
            lines.append(f"{lhs} &{arrow}{{{sp.latex(r.rate)}}} {rhs}")

        body = " \\\\\n".join(lines)
        return "\\begin{align}\n" + body + "\n\\end{align}"

    # -----------------------------
    # Constructors
    # -----------------------------

    @classmethod
    def from_string(
        cls,
        text: str,
        species_names: Optional[Sequence[str]] = None,
        parameters: Optional[Union[str, Sequence[str]]] = None,
        name: Optional[str] = None,
        rate_prefix: str = "k",
        combinatoric_ratelaws: bool = True,
    ) -> "ReactionNetwork":
        """Parse a reaction network from a multi-line string.

        Parameters
        ----------
        text:
            Reaction lines separated by newlines or semicolons, e.g.::

                hillr(P3, alpha, K, n), 0 --> m1
                (delta, gamma), m1 <--> 0
                A + B ->[k1] C
                A <->[k1, km1] B

            See `crnsim.parser` for the full notation.
        species_names:
            Optional explicit ordering of species.
        parameters:
            Optional explicit ordering of parameters.
        rate_prefix:
            Prefix used when auto-generating rate constants.

        Returns
        -------
        ReactionNetwork
        """
        from .parser import ReactionParser  # local import to avoid circular import

        parser = ReactionParser(rate_prefix=rate_prefix, combinatoric_ratelaws=combinatoric_ratelaws)
        return parser.parse_network(text=text, species_names=species_names, parameters=parameters, name=name)


def _make_integer_row(row: sp.Matrix) -> sp.Matrix:
    """Scale a rational row vector to a primitive integer row vector."""
    if row.shape[0] != 1:
        raise ValueError("row must be 1×n")

    # Clear denominators.
    dens = []
    nums = []
    for entry in row.tolist()[0]:
        num, den = sp.fraction(sp.nsimplify(entry))
        nums.append(num)
        dens.append(den)

    lcm = 1
    for d in dens:
        lcm = sp.ilcm(lcm, int(d))
    scaled = [sp.expand(num * (lcm // int(den))) for num, den in zip(nums, dens)]

    # Make primitive by dividing gcd.
    ints = [int(sp.Integer(s)) for s in scaled]
    if all(v == 0 for v in ints):
        return row
    g = abs(ints[0])
    for v in ints[1:]:
        g = sp.igcd(g, abs(v))
    g = int(g) if g != 0 else 1
    prim = [sp.Integer(v // g) for v in ints]

    # Canonical sign: make first nonzero entry positive.
    for v in prim:
        if v != 0:
            if v < 0:
                prim = [-vv for vv in prim]
            break

    return sp.Matrix([prim])
