"""Cardinality constraints: at most / exactly k of a set of literals."""

from __future__ import annotations

from dataclasses import dataclass, field

from .core import ClauseDatabase, Coeff, Lit, Valuation
from .linear import LimitComp, Linear, Part, PartKind, pos_coeff


@dataclass
class CardinalityOne:
    """At most one (LESS_EQ) or exactly one (EQUAL) of ``lits`` holds."""

    lits: list[Lit]
    cmp: LimitComp

    def __post_init__(self) -> None:
        self.lits = list(self.lits)

    def to_linear(self) -> Linear:
        return Cardinality.from_cardinality_one(self).to_linear()

    def check(self, value: Valuation) -> None:
        """Raise Unsatisfiable unless ``value`` satisfies the constraint."""
        self.to_linear().check(value)

    def __str__(self) -> str:
        op = "≤" if self.cmp is LimitComp.LESS_EQ else "="
        return f"{' + '.join(str(lit) for lit in self.lits)} {op} 1"


@dataclass
class Cardinality:
    """The number of true literals in ``lits`` is at most / exactly ``k``."""

    lits: list[Lit]
    cmp: LimitComp
    k: Coeff = field(default=0)

    def __post_init__(self) -> None:
        self.lits = list(self.lits)
        pos_coeff(self.k)

    @classmethod
    def from_cardinality_one(cls, card1: CardinalityOne) -> Cardinality:
        return cls(list(card1.lits), card1.cmp, 1)

    def to_linear(self) -> Linear:
        parts = [Part(PartKind.AMO, ((lit, 1),)) for lit in self.lits]
        return Linear(parts, self.cmp, self.k)

    def check(self, value: Valuation) -> None:
        """Raise Unsatisfiable unless ``value`` satisfies the constraint."""
        self.to_linear().check(value)

    def __str__(self) -> str:
        op = "≤" if self.cmp is LimitComp.LESS_EQ else "="
        return f"{' + '.join(str(lit) for lit in self.lits)} {op} {self.k}"


def at_least_one_clause(db: ClauseDatabase, card1: CardinalityOne) -> None:
    """Add the clause requiring that at least one literal of ``card1`` holds."""
    if card1.cmp is not LimitComp.EQUAL:
        raise ValueError("an at-least-one clause is only part of an exactly-one constraint")
    db.add_clause(list(card1.lits))