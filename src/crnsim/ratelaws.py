"""Rate laws that may be used inside rate expressions of the network notation.

All functions return SymPy expressions, so they work both for symbolic
derivation (RHS, Jacobians) and, after ``lambdify``, for numerics.

    mm(X, v, K)          = v*X / (X + K)
    mmr(X, v, K)         = v*K / (X + K)
    hill(X, v, K, n)     = v*X**n / (K**n + X**n)
    hillr(X, v, K, n)    = v*K**n / (K**n + X**n)
    hillar(X, Y, v, K, n) = v*X**n / (X**n + Y**n + K**n)
"""

from __future__ import annotations

from typing import Callable, Dict

import sympy as sp


def mm(X, v, K) -> sp.Expr:
    """Michaelis-Menten rate."""
    return v * X / (X + K)


def mmr(X, v, K) -> sp.Expr:
    """Repressive Michaelis-Menten rate."""
    return v * K / (X + K)


def hill(X, v, K, n) -> sp.Expr:
    """Activating Hill function."""
    return v * X**n / (K**n + X**n)


def hillr(X, v, K, n) -> sp.Expr:
    """Repressive Hill function."""
    return v * K**n / (K**n + X**n)


def hillar(X, Y, v, K, n) -> sp.Expr:
    """Hill function activated by X and repressed by Y."""
    return v * X**n / (X**n + Y**n + K**n)


RATE_LAWS: Dict[str, Callable[..., sp.Expr]] = {
    "mm": mm,
    "mmr": mmr,
    "hill": hill,
    "hillr": hillr,
    "hillar": hillar,
}
