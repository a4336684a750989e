"""Linear pseudo-Boolean expressions and constraints over Boolean literals."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from itertools import islice
from typing import Iterable, Iterator, Optional, Sequence, Union

from .core import Coeff, Incomplete, Lit, Unsatisfiable, Valuation

Term = tuple[Lit, Coeff]


def pos_coeff(c: Coeff) -> Coeff:
    """Return ``c``, raising ValueError if it is negative."""
    if c < 0:
        raise ValueError("cannot create a PosCoeff with a negative value")
    return c


class LimitComp(Enum):
    """Comparison of a sum against a non-negative limit."""

    EQUAL = "=="
    LESS_EQ = "<="

    def __str__(self) -> str:
        return self.value


class Comparator(Enum):
    """Comparison between an expression (left) and a constant (right)."""

    LESS_EQ = "<="
    EQUAL = "=="
    GREATER_EQ = ">="

    @classmethod
    def from_limit_comp(cls, cmp: LimitComp) -> Comparator:
        return cls.EQUAL if cmp is LimitComp.EQUAL else cls.LESS_EQ

    def __str__(self) -> str:
        return self.value


class ConstraintKind(Enum):
    """The kind of side constraint placed on a group of terms."""

    AT_MOST_ONE = "at_most_one"
    IMPLICATION_CHAIN = "implication_chain"
    DOMAIN = "domain"


@dataclass(frozen=True)
class Constraint:
    """A side constraint on a group of terms; ``lb``/``ub`` are used by DOMAIN."""

    kind: ConstraintKind
    lb: Optional[Coeff] = None
    ub: Optional[Coeff] = None


class PartKind(Enum):
    """How the terms of a part of a linear constraint relate to each other."""

    AMO = "amo"
    IC = "ic"
    DOM = "dom"


@dataclass(frozen=True)
class Part:
    """A group of terms with non-negative coefficients in a linear constraint."""

    kind: PartKind
    terms: tuple[Term, ...]
    lb: Optional[Coeff] = None
    ub: Optional[Coeff] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "terms", tuple(self.terms))
        for _, coef in self.terms:
            pos_coeff(coef)
        if self.kind is PartKind.DOM:
            if self.lb is None or self.ub is None:
                raise ValueError("a domain part needs both a lower and an upper bound")
            pos_coeff(self.lb)
            pos_coeff(self.ub)

    def __iter__(self) -> Iterator[Term]:
        return iter(self.terms)


@dataclass(frozen=True)
class DirectEncoding:
    """Integer ``X`` with ``X = first + i`` exactly when ``vals[i]`` holds."""

    first: Coeff
    vals: Sequence[Lit]


@dataclass(frozen=True)
class OrderEncoding:
    """Integer ``X`` with ``X > first + i`` exactly when ``vals[i]`` holds."""

    first: Coeff
    vals: Sequence[Lit]


@dataclass(frozen=True)
class LogEncoding:
    """Integer ``X = sum(2**i * bits[i])``, two's complement when ``signed``."""

    signed: bool
    bits: Sequence[Lit]


IntEncoding = Union[DirectEncoding, OrderEncoding, LogEncoding]


class LinExp:
    """A pseudo-Boolean linear expression ``mult * (sum(c*l) + add)``.

    Free terms are kept at the front; groups of terms under side
    constraints follow in the order the constraints were added.
    """

    def __init__(self, add: Coeff = 0, mult: Coeff = 1) -> None:
        self._terms: deque[Term] = deque()
        self._num_free = 0
        self._constraints: list[tuple[Constraint, int]] = []
        self.add = add
        self.mult = mult

    def _copy(self) -> LinExp:
        other = LinExp(self.add, self.mult)
        other._terms = deque(self._terms)
        other._num_free = self._num_free
        other._constraints = list(self._constraints)
        return other

    @classmethod
    def from_slices(cls, weights: Sequence[Coeff], lits: Sequence[Lit]) -> LinExp:
        if len(weights) != len(lits):
            raise ValueError("the number of weights and literals must be equal")
        return cls.from_terms(list(zip(lits, weights)))

    @classmethod
    def from_terms(cls, terms: Iterable[Term]) -> LinExp:
        exp = cls()
        exp._terms.extend(terms)
        exp._num_free = len(exp._terms)
        return exp

    @classmethod
    def from_lit(cls, lit: Lit) -> LinExp:
        return cls.from_terms([(lit, 1)])

    @classmethod
    def from_constant(cls, value: Coeff) -> LinExp:
        return cls(add=value)

    @classmethod
    def from_int_encoding(cls, encoding: IntEncoding) -> LinExp:
        exp = cls()
        if isinstance(encoding, DirectEncoding):
            exp._terms.extend(
                (lit, encoding.first + i) for i, lit in enumerate(encoding.vals)
            )
            exp._constraints.append(
                (Constraint(ConstraintKind.AT_MOST_ONE), len(encoding.vals))
            )
        elif isinstance(encoding, OrderEncoding):
            exp._terms.extend((lit, 1) for lit in encoding.vals)
            exp._constraints.append(
                (Constraint(ConstraintKind.IMPLICATION_CHAIN), len(encoding.vals))
            )
            exp.add = encoding.first
        elif isinstance(encoding, LogEncoding):
            terms = [(lit, 2**i) for i, lit in enumerate(encoding.bits)]
            if encoding.signed:
                if not terms:
                    raise ValueError("a signed log encoding needs at least one bit")
                lit, coef = terms[-1]
                terms[-1] = (lit, -coef)
            exp._terms.extend(terms)
            exp._num_free = len(terms)
        else:
            raise TypeError(f"unsupported integer encoding: {encoding!r}")
        return exp

    def _add_group(self, terms: Sequence[Term], kind: ConstraintKind) -> LinExp:
        if len(terms) == 1:
            return self + terms[0]
        exp = self._copy()
        exp._terms.extend(terms)
        exp._constraints.append((Constraint(kind), len(terms)))
        return exp

    def add_choice(self, choice: Sequence[Term]) -> LinExp:
        """Add terms of which at most one can be chosen."""
        return self._add_group(list(choice), ConstraintKind.AT_MOST_ONE)

    def add_chain(self, chain: Sequence[Term]) -> LinExp:
        """Add terms where each literal is implied by the literal of the next term."""
        return self._add_group(list(chain), ConstraintKind.IMPLICATION_CHAIN)

    def add_constant(self, k: Coeff) -> LinExp:
        exp = self._copy()
        exp.add += k
        return exp

    def add_lit(self, lit: Lit) -> LinExp:
        return self + (lit, 1)

    def add_bounded_log_encoding(
        self, terms: Sequence[Term], lb: Coeff, ub: Coeff
    ) -> LinExp:
        """Add binary-encoded terms whose sum must lie within ``lb..=ub``."""
        exp = self._copy()
        terms = list(terms)
        exp._constraints.append((Constraint(ConstraintKind.DOMAIN, lb, ub), len(terms)))
        exp._terms.extend(terms)
        return exp

    def groups(self) -> Iterator[tuple[Optional[Constraint], list[Term]]]:
        """The free terms (constraint None), then each constrained group."""
        it = iter(self._terms)
        yield None, list(islice(it, self._num_free))
        for constraint, count in self._constraints:
            yield constraint, list(islice(it, count))

    def terms(self) -> Iterator[Term]:
        return iter(list(self._terms))

    def value(self, sol: Valuation) -> Coeff:
        """Evaluate under ``sol``; raise Unsatisfiable if a side constraint is broken."""
        total = self.add
        for constraint, terms in self.groups():
            total_group = 0
            for lit, coef in terms:
                assigned = sol(lit)
                if assigned is None:
                    raise Incomplete((lit,))
                if assigned:
                    total_group += coef
            if constraint is not None:
                kind = constraint.kind
                if kind is ConstraintKind.AT_MOST_ONE:
                    if total_group != 0 and sum(
                        1 for lit, _ in terms if _or(sol(lit), True)
                    ) > 1:
                        raise Unsatisfiable()
                elif kind is ConstraintKind.IMPLICATION_CHAIN:
                    if any(
                        not _or(sol(a), False) and _or(sol(b), True)
                        for (a, _), (b, _) in zip(terms, terms[1:])
                    ):
                        raise Unsatisfiable()
                elif kind is ConstraintKind.DOMAIN:
                    assert constraint.lb is not None and constraint.ub is not None
                    if constraint.lb > total_group or total_group > constraint.ub:
                        raise Unsatisfiable()
            total += total_group
        return total * self.mult

    def _add_encoding(self, encoding: IntEncoding) -> LinExp:
        exp = self._copy()
        if isinstance(encoding, DirectEncoding):
            exp._terms.extend(
                (lit, encoding.first + i) for i, lit in enumerate(encoding.vals)
            )
            exp._constraints.append(
                (Constraint(ConstraintKind.AT_MOST_ONE), len(encoding.vals))
            )
        elif isinstance(encoding, OrderEncoding):
            exp._terms.extend((lit, 1) for lit in encoding.vals)
            exp.add += encoding.first
            exp._constraints.append(
                (Constraint(ConstraintKind.IMPLICATION_CHAIN), len(encoding.vals))
            )
        else:
            for i, lit in enumerate(encoding.bits):
                exp._terms.appendleft((lit, 2**i))
            if encoding.signed:
                if not encoding.bits:
                    raise ValueError("a signed log encoding needs at least one bit")
                lit, coef = exp._terms[0]
                exp._terms[0] = (lit, -coef)
            exp._num_free += len(encoding.bits)
        return exp

    def _add_linexp(self, rhs: LinExp) -> LinExp:
        exp = self._copy()
        if exp.mult != 1:
            exp.add *= exp.mult
            exp._terms = deque((lit, c * exp.mult) for lit, c in exp._terms)
        exp.mult = 1
        exp.add += rhs.add * rhs.mult
        rhs_terms = [(lit, c * rhs.mult) for lit, c in rhs._terms]
        free, constrained = rhs_terms[: rhs._num_free], rhs_terms[rhs._num_free :]
        exp._terms.extend(constrained)
        exp._terms.extendleft(reversed(free))
        exp._num_free += rhs._num_free
        exp._constraints.extend(rhs._constraints)
        return exp

    def __add__(self, other: object) -> LinExp:
        if isinstance(other, LinExp):
            return self._add_linexp(other)
        if isinstance(other, (DirectEncoding, OrderEncoding, LogEncoding)):
            return self._add_encoding(other)
        if isinstance(other, tuple) and len(other) == 2 and isinstance(other[0], Lit):
            exp = self._copy()
            exp._terms.appendleft((other[0], other[1]))
            exp._num_free += 1
            return exp
        return NotImplemented

    def __mul__(self, k: object) -> LinExp:
        if not isinstance(k, int) or isinstance(k, bool):
            return NotImplemented
        exp = self._copy()
        exp.mult *= k
        return exp

    def __repr__(self) -> str:
        terms = ", ".join(f"({int(lit)}, {c})" for lit, c in self._terms)
        return f"LinExp([{terms}], add={self.add}, mult={self.mult})"


def _or(value: Optional[bool], default: bool) -> bool:
    return default if value is None else value


@dataclass
class Linear:
    """A constraint ``sum(parts) cmp k`` with non-negative coefficients."""

    terms: list[Part]
    cmp: LimitComp
    k: Coeff = field(default=0)

    def __post_init__(self) -> None:
        self.terms = list(self.terms)
        pos_coeff(self.k)

    def set_k(self, k: Coeff) -> None:
        self.k = pos_coeff(k)

    def __len__(self) -> int:
        return len(self.terms)

    def check(self, sol: Valuation) -> None:
        """Raise Unsatisfiable unless ``sol`` satisfies the constraint."""
        total = 0
        for part in self.terms:
            for lit, coef in part:
                assigned = sol(lit)
                if assigned is True:
                    total += coef
                elif assigned is None:
                    if self.cmp is LimitComp.LESS_EQ:
                        total += coef
                    else:
                        raise Unsatisfiable()
        ok = total <= self.k if self.cmp is LimitComp.LESS_EQ else total == self.k
        if not ok:
            raise Unsatisfiable()


@dataclass
class LinearConstraint:
    """A constraint ``exp cmp k`` over a general linear expression."""

    exp: LinExp
    cmp: Comparator
    k: Coeff

    @classmethod
    def from_linear(cls, lin: Linear) -> LinearConstraint:
        terms = [term for part in lin.terms for term in part]
        return cls(LinExp.from_terms(terms), Comparator.from_limit_comp(lin.cmp), lin.k)

    def check(self, value: Valuation) -> None:
        """Raise Unsatisfiable unless ``value`` satisfies the constraint."""
        lhs = self.exp.value(value)
        if self.cmp is Comparator.LESS_EQ:
            ok = lhs <= self.k
        elif self.cmp is Comparator.EQUAL:
            ok = lhs == self.k
        else:
            ok = lhs >= self.k
        if not ok:
            raise Unsatisfiable()