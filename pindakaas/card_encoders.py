"""Encoders for at-most-one and exactly-one constraints."""

from __future__ import annotations

from itertools import combinations

from .cardinality import CardinalityOne, at_least_one_clause
from .core import ClauseDatabase, Lit
from .linear import LimitComp


def _fresh_lit(db: ClauseDatabase) -> Lit:
    return Lit.from_var(db.new_var())


class PairwiseEncoder:
    """For every pair of literals, states that at least one of them is false."""

    def encode(self, db: ClauseDatabase, card1: CardinalityOne) -> None:
        if card1.cmp is LimitComp.EQUAL:
            at_least_one_clause(db, card1)
        for a, b in combinations(card1.lits, 2):
            db.add_clause([~a, ~b])


class LadderEncoder:
    """Channels the literals through a ladder of auxiliary order variables."""

    def encode(self, db: ClauseDatabase, card1: CardinalityOne) -> None:
        a = _fresh_lit(db)
        if card1.cmp is LimitComp.EQUAL:
            db.add_clause([a])
        for x in card1.lits:
            b = _fresh_lit(db)
            db.add_clause([~b, a])  # y_v -> y_v-1
            # x_v <-> (y_v-1 /\ ¬y_v)
            db.add_clause([~x, a])
            db.add_clause([~x, ~b])
            db.add_clause([~a, b, x])
            a = b
        if card1.cmp is LimitComp.EQUAL:
            db.add_clause([~a])


class BitwiseEncoder:
    """Uses a binary selector so that only the selected literal may hold."""

    def encode(self, db: ClauseDatabase, card1: CardinalityOne) -> None:
        size = len(card1.lits)
        bits = max(size - 1, 0).bit_length()

        if card1.cmp is LimitComp.EQUAL:
            at_least_one_clause(db, card1)

        signals = [_fresh_lit(db) for _ in range(bits)]
        for i, lit in enumerate(card1.lits):
            for j, sig in enumerate(signals):
                if i & (1 << j):
                    db.add_clause([~lit, sig])
                else:
                    db.add_clause([~lit, ~sig])