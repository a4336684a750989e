"""Binary representations, clause helpers and the XOR constraint with its encoder."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from typing import Iterable, Optional, Sequence

from .core import ClauseDatabase, Coeff, Lit, Unsatisfiable, Valuation
from .linear import LinExp

_COEFF_BITS = 64


def is_powers_of_two(coefs: Iterable[Coeff]) -> bool:
    """True if the coefficients are ``c, 2c, 4c, 8c, ...`` for their first value ``c``."""
    it = iter(coefs)
    try:
        mult = next(it)
    except StopIteration:
        return False
    return all(c == 2**i * mult for i, c in enumerate(it, start=1))


def unsigned_binary_range_ub(bits: int) -> Coeff:
    """The largest value representable as an unsigned binary number of ``bits`` bits."""
    return sum(2**i for i in range(bits))


def required_bits(lb: Coeff, ub: Coeff) -> int:
    """Number of bits needed to represent values up to ``ub`` in unsigned binary."""
    if ub < 0:
        return _COEFF_BITS
    return ub.bit_length()


def as_binary(k: Coeff, bits: Optional[int] = None) -> list[bool]:
    """The unsigned binary representation of ``k``, least significant bit first."""
    if k < 0:
        raise ValueError("cannot create a PosCoeff with a negative value")
    if bits is None:
        bits = required_bits(0, k)
    if k > unsigned_binary_range_ub(bits):
        raise ValueError(f"{k} cannot be represented in {bits} bits")
    return [k & (1 << b) != 0 for b in range(bits)]


def add_clauses_for(
    db: ClauseDatabase, expression: Sequence[Sequence[Sequence[Lit]]]
) -> None:
    """Add the clauses of a disjunction whose elements are conjunctions.

    For example ``(a ∧ ¬b) ∨ c`` becomes the clauses ``a ∨ c`` and ``¬b ∨ c``.
    An element without any conjunction satisfies the whole formula; an
    empty conjunction is falsified in every resulting clause.
    """
    for choice in product(*expression):
        db.add_clause([lit for part in choice for lit in part])


def negate_cnf(clauses: Sequence[Sequence[Lit]]) -> list[list[Lit]]:
    """Negate a formula, flipping between the empty formula and the empty clause."""
    if not clauses:
        return [[]]
    if any(len(clause) == 0 for clause in clauses):
        return []
    if len(clauses) != 1:
        raise ValueError("can only negate a formula of a single clause")
    return [[~lit for lit in clause] for clause in clauses]


@dataclass(frozen=True)
class XorConstraint:
    """The constraint ``lits[0] ⊕ ... ⊕ lits[n]``."""

    lits: tuple[Lit, ...]

    def __init__(self, lits: Iterable[Lit]) -> None:
        object.__setattr__(self, "lits", tuple(lits))

    def check(self, value: Valuation) -> None:
        """Raise Unsatisfiable unless an odd number of literals is true."""
        count = LinExp.from_terms([(lit, 1) for lit in self.lits]).value(value)
        if count % 2 != 1:
            raise Unsatisfiable()


class XorEncoder:
    """Encodes XOR constraints of one, two or three literals."""

    def encode(self, db: ClauseDatabase, xor: XorConstraint) -> None:
        lits = xor.lits
        if len(lits) == 1:
            (a,) = lits
            db.add_clause([a])
        elif len(lits) == 2:
            a, b = lits
            db.add_clause([a, b])
            db.add_clause([~a, ~b])
        elif len(lits) == 3:
            a, b, c = lits
            db.add_clause([a, b, c])
            db.add_clause([a, ~b, ~c])
            db.add_clause([~a, b, ~c])
            db.add_clause([~a, ~b, c])
        else:
            raise ValueError(
                "Unexpected usage of XOR with zero or more than three arguments"
            )