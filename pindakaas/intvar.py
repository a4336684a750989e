"""Boolean encodings of integer variables: order, binary and constant."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import pairwise
from typing import Iterable, Mapping, Optional, Sequence, Union

from .core import ClauseDatabase, Coeff, Lit, Unsatisfiable, Valuation
from .helpers import as_binary, is_powers_of_two, required_bits, unsigned_binary_range_ub
from .linear import LinExp, pos_coeff

Cnf = list[list[Lit]]
"""A small formula: ``[]`` is true, ``[[]]`` is false."""

_ELIPSIZE = 8


def _trunc_div(a: Coeff, b: Coeff) -> Coeff:
    """Integer division rounding towards zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _sorted_intervals(intervals: Iterable[range]) -> list[range]:
    return sorted(set(intervals), key=lambda iv: (iv.start, iv.stop))


def display_dom(dom: Iterable[Coeff]) -> str:
    """A compact rendering of a set of integers."""
    values = sorted(set(dom))
    if not values:
        raise ValueError("cannot display an empty domain")
    lb, ub = values[0], values[-1]
    if len(values) > _ELIPSIZE and len(values) == ub - lb + 1:
        return f"{lb}..{ub}"
    if len(values) > _ELIPSIZE:
        head = ",".join(str(v) for v in values[:_ELIPSIZE])
        return f"{{{head},..,{ub}}} ({len(values)}|{required_bits(lb, ub)})"
    return "{" + ",".join(str(v) for v in values) + "}"


def ord_plus_ord_le_ord_sparse_dom(
    a: Iterable[Coeff], b: Iterable[Coeff], l: Coeff, u: Coeff
) -> list[range]:
    """Intervals of the order encoding of the sums ``a + b`` within ``l..=u``."""
    b = list(b)
    sums = sorted({x + y for x in a for y in b if l <= x + y <= u})
    return [range(x + 1, y + 1) for x, y in pairwise(sums)]


@dataclass(frozen=True)
class LitOrConst:
    """Either a literal or a fixed truth value."""

    value: Union[Lit, bool]

    def is_const(self) -> bool:
        return isinstance(self.value, bool)

    def __invert__(self) -> LitOrConst:
        if isinstance(self.value, bool):
            return LitOrConst(not self.value)
        return LitOrConst(~self.value)

    def __str__(self) -> str:
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)


@dataclass(frozen=True)
class ImplicationChainConstraint:
    """Consecutive literals of ``lits`` form a chain of implications."""

    lits: tuple[Lit, ...]

    def __init__(self, lits: Iterable[Lit]) -> None:
        object.__setattr__(self, "lits", tuple(lits))

    def check(self, sol: Valuation) -> None:
        """Raise Unsatisfiable when a literal holds while its successor does not."""
        for a, b in pairwise(self.lits):
            va, vb = sol(a), sol(b)
            if (True if va is None else va) and not (False if vb is None else vb):
                raise Unsatisfiable()


class ImplicationChainEncoder:
    """Encodes that each literal of a chain implies the one before it."""

    def encode(self, db: ClauseDatabase, ic: ImplicationChainConstraint) -> None:
        for a, b in pairwise(ic.lits):
            db.add_clause([~b, a])


def _fresh_lit(db: ClauseDatabase) -> Lit:
    return Lit.from_var(db.new_var())


@dataclass
class IntVarOrd:
    """An order-encoded integer: the literal of interval ``a..b`` means ``x >= b - 1``."""

    xs: list[tuple[range, Lit]]
    lbl: str = field(default="x")

    @classmethod
    def from_bounds(cls, db: ClauseDatabase, lb: Coeff, ub: Coeff, lbl: str) -> IntVarOrd:
        return cls.from_dom(db, list(range(lb, ub + 1)), lbl)

    @classmethod
    def from_dom(cls, db: ClauseDatabase, dom: Sequence[Coeff], lbl: str) -> IntVarOrd:
        return cls.from_syms(db, [range(a + 1, b + 1) for a, b in pairwise(dom)], lbl)

    @classmethod
    def from_syms(cls, db: ClauseDatabase, syms: Iterable[range], lbl: str) -> IntVarOrd:
        return cls.from_views(db, [(iv, None) for iv in _sorted_intervals(syms)], lbl)

    @classmethod
    def from_views(
        cls,
        db: ClauseDatabase,
        views: Union[Mapping[range, Optional[Lit]], Iterable[tuple[range, Optional[Lit]]]],
        lbl: str,
    ) -> IntVarOrd:
        """Build from intervals, creating a fresh literal where none is given."""
        pairs = views.items() if isinstance(views, Mapping) else views
        merged: dict[range, Optional[Lit]] = {}
        for iv, lit in pairs:
            merged[iv] = lit
        ordered = sorted(merged.items(), key=lambda kv: (kv[0].start, kv[0].stop))
        if not ordered:
            raise ValueError("an order encoding needs at least one interval")
        if any(a.stop != b.start for (a, _), (b, _) in pairwise(ordered)):
            raise ValueError(
                f"Expecting contiguous domain of intervals but was {ordered!r}"
            )
        xs = [(iv, lit if lit is not None else _fresh_lit(db)) for iv, lit in ordered]
        return cls(xs, lbl)

    def consistency(self) -> ImplicationChainConstraint:
        return ImplicationChainConstraint(lit for _, lit in self.xs)

    def consistent(self, db: ClauseDatabase) -> None:
        """Add the implication chain that keeps the encoding well-formed."""
        ImplicationChainEncoder().encode(db, self.consistency())

    def div(self, c: Coeff) -> IntVarEnc:
        if c != 2:
            raise ValueError("Can only divide IntVarOrd by 2")
        xs = []
        for iv, lit in self.xs:
            if (iv.stop - 1) % 2 == 0:
                half = _trunc_div(iv.stop - 1, 2)
                xs.append((range(half, half + 1), lit))
        if not xs:
            return IntVarConst(_trunc_div(self.lb(), c))
        xs.sort(key=lambda kv: (kv[0].start, kv[0].stop))
        return IntVarOrd(xs, self.lbl)

    def dom(self) -> list[range]:
        lb = self.lb()
        return _sorted_intervals([range(lb, lb + 1), *(iv for iv, _ in self.xs)])

    def leqs(self) -> list[tuple[range, Cnf]]:
        ub = self.ub()
        result: list[tuple[range, Cnf]] = [
            (range(iv.start - 1, iv.stop - 1), [[~x]]) for iv, x in self.xs
        ]
        result.append((range(ub, ub + 1), []))
        return result

    def geqs(self) -> list[tuple[range, Cnf]]:
        lb = self.lb()
        result: list[tuple[range, Cnf]] = [(range(lb, lb + 1), [])]
        result.extend((iv, [[x]]) for iv, x in self.xs)
        return result

    def lb(self) -> Coeff:
        return min(iv.start for iv, _ in self.xs) - 1

    def ub(self) -> Coeff:
        return max(iv.stop for iv, _ in self.xs) - 1

    def _lit_at(self, v: Coeff) -> Lit:
        found = [x for iv, x in self.xs if v in iv]
        if len(found) != 1:
            raise ValueError(f"No or multiple literals at {v} for var {self!r}")
        return found[0]

    def leq(self, v: range) -> Cnf:
        """Formula for ``x <= v.start``."""
        w = v.start + 1
        if w <= self.lb():
            return [[]]
        if w > self.ub():
            return []
        return [[~self._lit_at(w)]]

    def geq(self, v: range) -> Cnf:
        """Formula for ``x >= v.stop - 1``."""
        w = v.stop - 1
        if w <= self.lb():
            return []
        if w > self.ub():
            return [[]]
        return [[self._lit_at(w)]]

    def lits(self) -> int:
        return len(self.xs)

    def to_linexp(self) -> LinExp:
        acc = self.lb()
        terms = []
        for iv, lit in self.xs:
            step = iv.stop - 1 - acc
            acc += step
            terms.append((lit, step))
        return LinExp().add_chain(terms).add_constant(self.lb())

    def __str__(self) -> str:
        return f"{self.lbl}:O ∈ {display_dom(iv.stop - 1 for iv in self.dom())}"


@dataclass
class IntVarBin:
    """A binary-encoded integer within ``lb..=ub``, least significant bit first."""

    xs: list[Lit]
    lb_: Coeff
    ub_: Coeff
    lbl: str = field(default="x")

    @classmethod
    def from_bounds(cls, db: ClauseDatabase, lb: Coeff, ub: Coeff, lbl: str) -> IntVarBin:
        xs = [_fresh_lit(db) for _ in range(required_bits(lb, ub))]
        return cls(xs, lb, ub, lbl)

    @classmethod
    def from_terms(
        cls, terms: Sequence[tuple[Lit, Coeff]], lb: Coeff, ub: Coeff, lbl: str
    ) -> IntVarBin:
        if not is_powers_of_two(c for _, c in terms):
            raise ValueError("binary encoding terms must have powers of two as coefficients")
        return cls([lit for lit, _ in terms], pos_coeff(lb), pos_coeff(ub), lbl)

    def dom(self) -> list[range]:
        return [range(i, i + 1) for i in range(self.lb_, self.ub_ + 1)]

    def leqs(self) -> list[tuple[range, Cnf]]:
        return [(c, self.leq(c)) for c in self.dom()]

    def geqs(self) -> list[tuple[range, Cnf]]:
        return [(c, self.geq(c)) for c in self.dom()]

    def lb(self) -> Coeff:
        return self.lb_

    def ub(self) -> Coeff:
        return self.ub_

    def geq(self, v: range) -> Cnf:
        return self._ineq(v, geq=True)

    def leq(self, v: range) -> Cnf:
        return self._ineq(v, geq=False)

    def _ineq(self, v: range, geq: bool) -> Cnf:
        bits = self.lits()
        range_lb = 0
        range_ub = unsigned_binary_range_ub(bits)
        result: Cnf = []
        for w in range(max(range_lb - 1, v.start), min(v.stop, range_ub + 2)):
            w = w - 1 if geq else w + 1
            if w < range_lb:
                if not geq:
                    result.append([])
            elif w > range_ub:
                if geq:
                    result.append([])
            else:
                # for >= the zero bits matter, for <= the one bits
                result.append(
                    [
                        x if geq else ~x
                        for b, x in zip(as_binary(w, bits), self.xs)
                        if b != geq
                    ]
                )
        return result

    def lits(self) -> int:
        return len(self.xs)

    def to_linexp(self) -> LinExp:
        terms = [(x, 2**i) for i, x in enumerate(self.xs)]
        return LinExp().add_bounded_log_encoding(terms, self.lb_, self.ub_)

    def __str__(self) -> str:
        dom = display_dom(iv.stop - 1 for iv in self.dom())
        return f"{self.lbl}:B ∈ {dom} [{self.lits()}]"


@dataclass(frozen=True)
class IntVarConst:
    """An integer fixed to ``value``."""

    value: Coeff

    def div(self, c: Coeff) -> IntVarConst:
        return IntVarConst(_trunc_div(self.value, c))

    def dom(self) -> list[range]:
        return [range(self.value, self.value + 1)]

    def leqs(self) -> list[tuple[range, Cnf]]:
        return [(c, self.leq(c)) for c in self.dom()]

    def geqs(self) -> list[tuple[range, Cnf]]:
        return [(c, self.geq(c)) for c in self.dom()]

    def lb(self) -> Coeff:
        return self.value

    def ub(self) -> Coeff:
        return self.value

    def leq(self, v: range) -> Cnf:
        return [[]] if v.start + 1 <= self.value else []

    def geq(self, v: range) -> Cnf:
        return [] if v.stop - 1 <= self.value else [[]]

    def lits(self) -> int:
        return 0

    def consistent(self, db: ClauseDatabase) -> None:
        """A constant needs no clauses."""

    def to_linexp(self) -> LinExp:
        return LinExp.from_constant(self.value)

    def __str__(self) -> str:
        return str(self.value)


IntVarEnc = Union[IntVarOrd, IntVarBin, IntVarConst]


def int_var_from_dom(db: ClauseDatabase, dom: Sequence[Coeff], lbl: str) -> IntVarEnc:
    """A constant for a single value, otherwise an order encoding of ``dom``."""
    if not dom:
        raise Unsatisfiable()
    if len(dom) == 1:
        return IntVarConst(dom[0])
    return IntVarOrd.from_dom(db, dom, lbl)