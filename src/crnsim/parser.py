from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from tokenize import TokenError
from typing import Dict, List, Optional, Sequence, Tuple, Union

import sympy as sp
from sympy.parsing.sympy_parser import convert_xor, parse_expr, standard_transformations

from .exceptions import DSLParseError
from .ratelaws import RATE_LAWS
from .reaction import Reaction, parameter_symbol, species_symbol

logger = logging.getLogger(__name__)


# A single term like "2A", "2 A", "2*A" or "A".
_TERM_RE = re.compile(r"^\s*(?:(\d+)\s*\*?\s*)?([A-Za-z_][A-Za-z0-9_]*)\s*$")

# Identifiers inside rate expressions (not the exponent letter of 1e-3).
_IDENT_RE = re.compile(r"(?<![\w.])([A-Za-z_][A-Za-z0-9_]*)(\s*\()?")

_EMPTY_COMPLEX = {"", "0", "∅", "Ø", "ø"}

_CONSTANTS = {"pi": sp.pi}

# Arrow tokens, longest first so that "<-->" is not read as "<--".
_ARROWS: Tuple[Tuple[str, str], ...] = (
    ("<-->", "reversible"),
    ("<->", "reversible"),
    ("<=>", "reversible"),
    ("<--", "backward"),
    ("<-", "backward"),
    ("-->", "forward"),
    ("->", "forward"),
    ("=>", "forward"),
    ("↔", "reversible"),
    ("⇌", "reversible"),
    ("⟷", "reversible"),
    ("→", "forward"),
    ("⟶", "forward"),
    ("←", "backward"),
    ("⟵", "backward"),
    ("⇒", "full_rate"),
    ("⟾", "full_rate"),
)
_ARROW_KIND = dict(_ARROWS)
_ARROW_RE = re.compile("|".join(re.escape(a) for a, _ in _ARROWS))

_DECLARATIONS = ("@species", "@parameters")


def _split_top_level(s: str, sep: str) -> List[str]:
    """Split on `sep` outside of () and [] groups."""
    parts: List[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(s):
        if ch in "([":
            depth += 1
        elif ch in ")]":
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append(s[start:i])
            start = i + 1
    parts.append(s[start:])
    return parts


def _parse_names(spec: Union[str, Sequence[str]]) -> List[str]:
    """Split 'a b, c' (or pass through a sequence) into names."""
    if isinstance(spec, str):
        return [tok for tok in re.split(r"[\s,]+", spec.strip()) if tok]
    return [str(tok) for tok in spec]


def _parse_complex(complex_str: str, line: str) -> Dict[str, int]:
    """Parse a complex string like '2A + B' into {'A':2, 'B':1}.

    Accepted:
    - '0', '∅' or '' for the empty complex
    - terms separated by '+'
    - coefficients as nonnegative integers (e.g. '2A', '2 A', '2*A')

    Returns
    -------
    dict
        Mapping species names to coefficients, in order of appearance.
    """
    s = complex_str.strip()
    if s in _EMPTY_COMPLEX:
        return {}

    coeffs: Dict[str, int] = {}
    for part in (p.strip() for p in s.split("+")):
        if part in _EMPTY_COMPLEX:
            continue
        m = _TERM_RE.match(part)
        if not m:
            raise DSLParseError(f"Could not parse complex term '{part}' in line: '{line}'")
        c_str, name = m.group(1), m.group(2)
        c = int(c_str) if c_str is not None else 1
        coeffs[name] = coeffs.get(name, 0) + c
    return coeffs


def _complex_to_vector(complex_dict: Dict[str, int], species_order: Sequence[str]) -> Tuple[int, ...]:
    return tuple(int(complex_dict.get(name, 0)) for name in species_order)


def _consume_leading_rate_brackets(s: str, line: str) -> Tuple[List[str], str]:
    """Consume leading [ ... ] blocks and return (tokens, remainder).

    Supported forms:
        "[k1] C"
        "[k1][km1] C"
        "[k1, km1] C"

    Returns
    -------
    tokens:
        A flat list of rate expressions found in brackets.
    remainder:
        The remainder of the string after removing leading brackets.
    """
    tokens: List[str] = []
    rest = s.strip()

    while rest.startswith("["):
        end = rest.find("]")
        if end == -1:
            raise DSLParseError(f"Unclosed '[' in rate specification: '{line}'")
        inside = rest[1:end].strip()
        if inside:
            # Allow comma or semicolon separated tokens inside a single bracket.
            parts = _split_top_level(inside.replace(";", ","), ",")
            tokens.extend(p.strip() for p in parts if p.strip())
        rest = rest[end + 1 :].strip()

    return tokens, rest


def _split_rate_tuple(rate_str: str) -> List[str]:
    """'(kf, kr)' -> ['kf', 'kr']; anything else is a single rate."""
    s = rate_str.strip()
    if s.startswith("(") and s.endswith(")"):
        depth = 0
        for i, ch in enumerate(s):
            if ch in "([":
                depth += 1
            elif ch in ")]":
                depth -= 1
            if depth == 0 and i < len(s) - 1:
                # The opening parenthesis closes early, e.g. "(a+b)*c".
                return [s]
        inner = _split_top_level(s[1:-1], ",")
        if len(inner) > 1:
            return [p.strip() for p in inner]
    return [s]


@dataclass
class _ReactionLine:
    text: str
    lhs: Dict[str, int]
    rhs: Dict[str, int]
    kind: str
    rates: List[str]


@dataclass
class ReactionParser:
    """Parse the reaction-network notation into a `ReactionNetwork`.

    Each line holds one reaction (``;`` also separates reactions):

    - leading rate:  ``k, A + B --> C``  or  ``(kf, kr), A <--> B``
    - bracket rate:  ``A + B ->[k1] C``, ``A <->[k1][km1] B``, ``A <->[k1, km1] B``
    - no rate:       ``A -> B`` (rates auto-generated as k1, km1, ...)

    Arrows
    ------
    - irreversible: '-->', '->', '=>', '→', '⟶'
    - reversible: '<-->', '<->', '<=>', '↔', '⇌'
    - backward: '<--', '<-', '←' (products on the left)
    - full rate law, no mass-action factor: '⇒', '⟾'

    Complexes use '0' or '∅' for nothing and integer coefficients ('2A').
    Rates are SymPy expressions; '^' is a power and the rate laws in
    `crnsim.ratelaws` (mm, mmr, hill, hillr, hillar) are available.

    Lines ``@species A B`` and ``@parameters k1 k2`` declare orderings.
    Otherwise species are ordered by first appearance in the complexes and
    parameters by first appearance in the rate expressions.
    """

    rate_prefix: str = "k"
    combinatoric_ratelaws: bool = True
    _seen_parameters: List[str] = field(default_factory=list, init=False, repr=False)

    def parse_network(
        self,
        text: str,
        species_names: Optional[Sequence[str]] = None,
        parameters: Optional[Union[str, Sequence[str]]] = None,
        name: Optional[str] = None,
    ):
        declared_species: Optional[List[str]] = list(species_names) if species_names is not None else None
        declared_params: Optional[List[str]] = _parse_names(parameters) if parameters is not None else None

        parsed: List[_ReactionLine] = []
        for ln in self._split_lines(text):
            head = ln.split(None, 1)
            if head[0] in _DECLARATIONS:
                names = _parse_names(head[1] if len(head) > 1 else "")
                if head[0] == "@species":
                    declared_species = (declared_species or []) + names
                else:
                    declared_params = (declared_params or []) + names
                continue
            parsed.append(self._split_reaction_line(ln))

        if not parsed:
            raise DSLParseError("No reactions found in input")

        # First pass: species in order of appearance unless declared.
        if declared_species is None:
            species_order: List[str] = []
            for rl in parsed:
                for nm in list(rl.lhs) + list(rl.rhs):
                    if nm not in species_order:
                        species_order.append(nm)
        else:
            species_order = list(declared_species)
            for rl in parsed:
                unknown = [nm for nm in list(rl.lhs) + list(rl.rhs) if nm not in species_order]
                if unknown:
                    raise DSLParseError(
                        f"Undeclared species {', '.join(unknown)} in line: '{rl.text}'"
                    )

        if declared_params is not None:
            clash = set(declared_params) & set(species_order)
            if clash:
                raise DSLParseError(f"Names declared as both species and parameters: {sorted(clash)}")

        self._seen_parameters = []
        reactions: List[Reaction] = []
        pair_idx = 1
        for rl in parsed:
            lhs = _complex_to_vector(rl.lhs, species_order)
            rhs = _complex_to_vector(rl.rhs, species_order)
            rates = [self._parse_rate(tok, species_order, declared_params, rl.text) for tok in rl.rates]

            if rl.kind == "reversible":
                # Rate token handling:
                #  - none:          auto k{i}, km{i}
                #  - kf:            forward fixed, reverse auto km{i}
                #  - kf, kr:        both fixed
                if len(rates) == 0:
                    kf = self._auto_rate(f"{self.rate_prefix}{pair_idx}")
                    kr = self._auto_rate(f"{self.rate_prefix}m{pair_idx}")
                elif len(rates) == 1:
                    kf = rates[0]
                    kr = self._auto_rate(f"{self.rate_prefix}m{pair_idx}")
                elif len(rates) == 2:
                    kf, kr = rates
                else:
                    raise DSLParseError(
                        f"Too many rates for reversible reaction '{rl.text}'. "
                        "Use at most two (forward, reverse)."
                    )
                reactions.append(Reaction(lhs, rhs, kf))
                reactions.append(Reaction(rhs, lhs, kr))
            else:
                if len(rates) == 0:
                    k = self._auto_rate(f"{self.rate_prefix}{pair_idx}")
                elif len(rates) == 1:
                    k = rates[0]
                else:
                    raise DSLParseError(
                        f"Too many rates for irreversible reaction '{rl.text}'. Use at most one."
                    )
                if rl.kind == "backward":
                    reactions.append(Reaction(rhs, lhs, k))
                else:
                    reactions.append(Reaction(lhs, rhs, k, only_use_rate=rl.kind == "full_rate"))
            pair_idx += 1

        from .network import ReactionNetwork  # local import to avoid circular import

        param_order = declared_params if declared_params is not None else list(self._seen_parameters)
        logger.debug(
            "Parsed %d reactions over species %s with parameters %s",
            len(reactions),
            species_order,
            param_order,
        )
        return ReactionNetwork(
            species_names=species_order,
            reactions=reactions,
            parameters=param_order,
            name=name,
            combinatoric_ratelaws=self.combinatoric_ratelaws,
        )

    def _auto_rate(self, name: str) -> sp.Symbol:
        if name not in self._seen_parameters:
            self._seen_parameters.append(name)
        return parameter_symbol(name)

    def _parse_rate(
        self,
        text: str,
        species_order: Sequence[str],
        declared_params: Optional[Sequence[str]],
        line: str,
    ) -> sp.Expr:
        """Turn a rate expression into SymPy, resolving species and parameters by name."""
        local: Dict[str, object] = dict(RATE_LAWS)
        for m in _IDENT_RE.finditer(text):
            ident, is_call = m.group(1), m.group(2)
            if is_call:
                if ident not in RATE_LAWS and not callable(getattr(sp, ident, None)):
                    raise DSLParseError(f"Unknown function '{ident}' in line: '{line}'")
                continue
            if ident in species_order:
                local[ident] = species_symbol(ident)
            elif ident in _CONSTANTS and (declared_params is None or ident not in declared_params):
                local[ident] = _CONSTANTS[ident]
            else:
                if declared_params is not None and ident not in declared_params:
                    raise DSLParseError(f"Undeclared parameter '{ident}' in line: '{line}'")
                local[ident] = parameter_symbol(ident)
                if ident not in self._seen_parameters:
                    self._seen_parameters.append(ident)

        try:
            expr = parse_expr(text, local_dict=local, transformations=standard_transformations + (convert_xor,))
        except (SyntaxError, TypeError, ValueError, TokenError) as exc:
            raise DSLParseError(f"Could not parse rate '{text}' in line: '{line}'") from exc
        if not isinstance(expr, sp.Expr):
            raise DSLParseError(f"Rate '{text}' is not an expression in line: '{line}'")
        return expr

    @staticmethod
    def _split_lines(text: str) -> List[str]:
        lines: List[str] = []
        for raw in text.splitlines():
            for chunk in _split_top_level(raw, ";"):
                ln = chunk.strip()
                if ln and not ln.startswith("#"):
                    lines.append(ln)
        return lines

    @staticmethod
    def _split_reaction_line(line: str) -> _ReactionLine:
        """Split a reaction line into complexes, arrow kind and rate expressions."""
        m = _ARROW_RE.search(line)
        if not m:
            raise DSLParseError(f"No supported arrow found in line: '{line}'")
        kind = _ARROW_KIND[m.group(0)]

        before = line[: m.start()]
        after = line[m.end() :]

        # Leading rate: everything before the last top-level comma.
        pieces = _split_top_level(before, ",")
        lead_rates: List[str] = []
        if len(pieces) > 1:
            rate_str = ",".join(pieces[:-1]).strip()
            if not rate_str:
                raise DSLParseError(f"Empty rate in line: '{line}'")
            lead_rates = _split_rate_tuple(rate_str)
            before = pieces[-1]

        bracket_rates, after = _consume_leading_rate_brackets(after, line)
        if lead_rates and bracket_rates:
            raise DSLParseError(f"Give rates either before the reaction or in brackets, not both: '{line}'")

        if after.strip() == "" and before.strip() == "":
            raise DSLParseError(f"Reaction has no species in line: '{line}'")

        return _ReactionLine(
            text=line,
            lhs=_parse_complex(before, line),
            rhs=_parse_complex(after, line),
            kind=kind,
            rates=lead_rates or bracket_rates,
        )


def reaction_network(
    text: str,
    parameters: Optional[Union[str, Sequence[str]]] = None,
    species: Optional[Sequence[str]] = None,
    name: Optional[str] = None,
    combinatoric_ratelaws: bool = True,
):
    """Build a `ReactionNetwork` from the reaction notation.

    >>> rn = reaction_network('''
    ...     c1, X --> 2X
    ...     c2, X --> 0
    ...     c3, 0 --> X
    ... ''', parameters="c1 c2 c3")
    >>> rn.species_names, rn.parameter_names
    (['X'], ['c1', 'c2', 'c3'])
    """
    parser = ReactionParser(combinatoric_ratelaws=combinatoric_ratelaws)
    return parser.parse_network(text, species_names=species, parameters=parameters, name=name)
