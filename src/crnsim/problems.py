"""Simulation problems: a network paired with an initial state, a time span and parameters.

Initial states and parameters may be given either as sequences ordered like
``network.species_names`` / ``network.parameters`` or as mappings keyed by
name (or SymPy symbol). Mappings must name every entry.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import sympy as sp

from .exceptions import ProblemDefinitionError
from .network import ReactionNetwork

ValuesLike = Union[Sequence[float], Mapping[Union[str, sp.Symbol], float], np.ndarray]


def resolve_values(values: ValuesLike, names: Sequence[str], what: str) -> np.ndarray:
    """Order `values` like `names` and return a float array."""
    if isinstance(values, Mapping):
        given = {str(k): v for k, v in values.items()}
        unknown = [k for k in given if k not in names]
        if unknown:
            raise ProblemDefinitionError(f"Unknown {what} {unknown}. Known: {list(names)}")
        missing = [nm for nm in names if nm not in given]
        if missing:
            raise ProblemDefinitionError(f"Missing {what} values for {missing}")
        values = [given[nm] for nm in names]
    try:
        arr = np.atleast_1d(np.asarray(values, dtype=float)).ravel()
    except (TypeError, ValueError) as exc:
        raise ProblemDefinitionError(f"{what} values must be numeric; got {values!r}") from exc
    if arr.size != len(names):
        raise ProblemDefinitionError(
            f"Expected {len(names)} {what} values ({', '.join(names)}); got {arr.size}"
        )
    if not np.all(np.isfinite(arr)):
        raise ProblemDefinitionError(f"{what} values must be finite; got {arr.tolist()}")
    return arr


def resolve_tspan(tspan: Sequence[float]) -> Tuple[float, float]:
    if len(tspan) != 2:
        raise ProblemDefinitionError(f"tspan must be (t0, t1); got {tspan!r}")
    t0, t1 = float(tspan[0]), float(tspan[1])
    if not t1 > t0:
        raise ProblemDefinitionError(f"tspan must be increasing; got ({t0}, {t1})")
    return t0, t1


@dataclass
class _Problem:
    network: ReactionNetwork
    u0: ValuesLike
    tspan: Tuple[float, float]
    p: ValuesLike = ()

    def __post_init__(self) -> None:
        self.u0 = resolve_values(self.u0, self.network.species_names, "species")
        self.p = resolve_values(self.p, self.network.parameter_names, "parameter")
        self.tspan = resolve_tspan(self.tspan)

    def remake(self, **changes: Any):
        """Return a copy with some fields replaced (e.g. a new ``u0``)."""
        return replace(self, **changes)

    def parameter_map(self) -> dict:
        return dict(zip(self.network.parameter_names, self.p.tolist()))


@dataclass
class ODEProblem(_Problem):
    """Deterministic mass-action (or general rate law) ODE problem."""


@dataclass
class JumpProblem(_Problem):
    """Discrete stochastic problem on integer copy numbers.

    Solved exactly with the SSA (``aggregator="direct"``) or approximately
    with tau-leaping.
    """

    aggregator: str = "direct"
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        u0 = self.u0
        if np.any(u0 < 0) or np.any(u0 != np.round(u0)):
            raise ProblemDefinitionError(
                f"Jump problems need nonnegative integer copy numbers; got {u0.tolist()}"
            )
        self.u0 = u0.astype(np.int64)
        if self.aggregator != "direct":
            raise ProblemDefinitionError(f"Unknown aggregator '{self.aggregator}'; only 'direct' is available")


@dataclass
class SDEProblem(_Problem):
    """Chemical Langevin equation problem.

    ``noise_scaling`` multiplies the diffusion term (0 recovers the ODE).
    """

    noise_scaling: float = 1.0
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.noise_scaling < 0:
            raise ProblemDefinitionError("noise_scaling must be nonnegative")
