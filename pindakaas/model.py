"""A small model of integer variables under ternary linear constraints."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from itertools import product
from typing import Iterable, Optional

from .core import Coeff, Unsatisfiable
from .intvar import IntVarEnc, display_dom
from .linear import LimitComp


def _trunc_div(a: Coeff, b: Coeff) -> Coeff:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


class Consistency(Enum):
    """The level of propagation applied to the model's constraints."""

    NONE = "none"
    BOUNDS = "bounds"
    DOMAIN = "domain"


@dataclass
class IntVar:
    """An integer variable with an explicit finite domain."""

    id: int
    dom: set[Coeff]
    add_consistency: bool = False
    views: dict[Coeff, tuple[int, Coeff]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.dom = set(self.dom)

    def size(self) -> int:
        return len(self.dom)

    def lb(self, c: Coeff) -> Coeff:
        """Lower bound of ``c * x``."""
        return c * (max(self.dom) if c < 0 else min(self.dom))

    def ub(self, c: Coeff) -> Coeff:
        """Upper bound of ``c * x``."""
        return c * (min(self.dom) if c < 0 else max(self.dom))

    def ge(self, bound: Coeff) -> None:
        """Remove the values below ``bound``."""
        self.dom = {d for d in self.dom if d >= bound}

    def le(self, bound: Coeff) -> None:
        """Remove the values above ``bound``."""
        self.dom = {d for d in self.dom if d <= bound}

    def prefer_order(self, cutoff: Optional[Coeff]) -> bool:
        """Whether an order encoding is preferred over a binary one."""
        if cutoff is None:
            return True
        if cutoff == 0:
            return False
        return len(self.dom) < cutoff

    def __str__(self) -> str:
        return f"x{self.id} ∈ {display_dom(self.dom)}"


@dataclass
class Lin:
    """A linear constraint ``sum(c * x) cmp 0`` over integer variables."""

    xs: list[tuple[Coeff, IntVar]]
    cmp: LimitComp

    @classmethod
    def tern(cls, x: IntVar, y: IntVar, cmp: LimitComp, z: IntVar) -> Lin:
        """The constraint ``x + y cmp z``."""
        return cls([(1, x), (1, y), (-1, z)], cmp)

    def lb(self) -> Coeff:
        return sum(x.lb(c) for c, x in self.xs)

    def ub(self) -> Coeff:
        return sum(x.ub(c) for c, x in self.xs)

    def propagate(self, consistency: Consistency) -> list[int]:
        """Prune the domains; return the ids of the variables that changed."""
        if consistency is Consistency.NONE:
            raise ValueError("cannot propagate without a consistency level")
        if consistency is Consistency.BOUNDS:
            return self._propagate_bounds()
        return self._propagate_domain()

    @staticmethod
    def _check_nonempty(x: IntVar) -> None:
        if x.size() == 0:
            raise Unsatisfiable(f"domain of x{x.id} became empty")

    def _propagate_bounds(self) -> list[int]:
        changed: list[int] = []
        while True:
            fixpoint = True
            if self.cmp is LimitComp.EQUAL:
                for c, x in self.xs:
                    xs_ub = self.ub()
                    size = x.size()
                    x_ub = max(x.dom) if c > 0 else min(x.dom)
                    b = x_ub - _trunc_div(xs_ub, c)
                    if c >= 0:
                        x.ge(b)
                    else:
                        x.le(b)
                    if x.size() < size:
                        changed.append(x.id)
                        fixpoint = False
                    self._check_nonempty(x)

            rs_lb = self.lb()
            for c, x in self.xs:
                size = x.size()
                x_lb = min(x.dom) if c > 0 else max(x.dom)
                b = x_lb - _trunc_div(rs_lb, c)
                if c < 0:
                    x.ge(b)
                else:
                    x.le(b)
                if x.size() < size:
                    changed.append(x.id)
                    fixpoint = False
                self._check_nonempty(x)

            if fixpoint:
                return changed

    def _propagate_domain(self) -> list[int]:
        if self.cmp is not LimitComp.EQUAL:
            raise ValueError("domain consistency is only supported for equality")
        changed: list[int] = []
        while True:
            fixpoint = True
            for i, (c_i, x_i) in enumerate(self.xs):
                others = [
                    [c_j * d for d in sorted(x_j.dom)]
                    for j, (c_j, x_j) in enumerate(self.xs)
                    if j != i
                ]
                keep = set()
                for d_i in sorted(x_i.dom):
                    if any(c_i * d_i + sum(rs) == 0 for rs in product(*others)):
                        keep.add(d_i)
                    else:
                        fixpoint = False
                        changed.append(x_i.id)
                x_i.dom = keep
                self._check_nonempty(x_i)
            if fixpoint:
                return changed

    def __str__(self) -> str:
        for c, _ in self.xs:
            if abs(c) != 1:
                raise ValueError("can only display constraints with unit coefficients")
        head = " + ".join(str(x) for _, x in self.xs[0:2])
        return f"{head} {self.cmp} {self.xs[2][1]}"


class Model:
    """Integer variables, their encodings, and the constraints between them."""

    def __init__(self) -> None:
        self.vars: dict[int, IntVarEnc] = {}
        self.cons: list[Lin] = []
        self._var_ids = 0

    def add_int_var_enc(self, x: IntVarEnc) -> IntVar:
        """Register an already encoded integer and return its model variable."""
        var = self.new_var((iv.stop - 1 for iv in x.dom()), False)
        self.vars[var.id] = x
        return var

    def new_var(self, dom: Iterable[Coeff], add_consistency: bool = False) -> IntVar:
        self._var_ids += 1
        return IntVar(self._var_ids, set(dom), add_consistency)

    def new_constant(self, c: Coeff) -> IntVar:
        return self.new_var({c}, False)

    def add_constraint(self, con: Lin) -> None:
        self.cons.append(con)

    def propagate(
        self, consistency: Consistency, queue: Optional[Iterable[int]] = None
    ) -> None:
        """Propagate the constraints whose indices are queued (all by default)."""
        if consistency is Consistency.NONE:
            return
        pending = list(range(len(self.cons))) if queue is None else list(queue)
        while pending:
            con = pending.pop()
            changed = set(self.cons[con].propagate(consistency))
            pending.extend(
                i
                for i, other in enumerate(self.cons)
                if any(x.id in changed for _, x in other.xs)
            )

    def __str__(self) -> str:
        return "".join(f"{con}\n" for con in self.cons)