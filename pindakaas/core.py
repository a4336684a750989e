"""Boolean variables, literals, error types and the clause database interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import total_ordering
from typing import Any, Callable, Iterable, Optional, Sequence

I32_MIN = -(2**31)
I32_MAX = 2**31 - 1

Coeff = int
"""Number type used for coefficients in pseudo-Boolean constraints."""

Valuation = Callable[["Lit"], Optional[bool]]
"""A model: maps a literal to its truth value, or None when unassigned."""

_SUBSCRIPT = str.maketrans("0123456789-", "₀₁₂₃₄₅₆₇₈₉₋")


def _validate_nonzero_i32(value: object, kind: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{kind} value must be an int, not {type(value).__name__}")
    if value == 0:
        raise ValueError(f"cannot create {kind} with value zero")
    if not I32_MIN <= value <= I32_MAX:
        raise ValueError(f"{kind} value {value} is out of the 32-bit range")


@dataclass(frozen=True, order=True)
class Var:
    """A Boolean decision variable, identified by a non-zero integer."""

    value: int

    def __post_init__(self) -> None:
        _validate_nonzero_i32(self.value, "variable")

    def next_var(self) -> Optional[Var]:
        """The variable following this one, or None on overflow."""
        return self.checked_add(1)

    def prev_var(self) -> Optional[Var]:
        """The variable preceding this one, or None if there is none."""
        prev = self.value - 1
        return Var(prev) if prev > 0 else None

    def checked_add(self, b: int) -> Optional[Var]:
        """Offset this variable by ``b``; None if the result overflows."""
        _validate_nonzero_i32(b, "offset")
        result = self.value + b
        if not I32_MIN <= result <= I32_MAX:
            return None
        return Var(result)

    def __invert__(self) -> Lit:
        return ~Lit(self.value)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return "x" + str(self.value).translate(_SUBSCRIPT)

    def __repr__(self) -> str:
        return f"Var({self.value})"


@total_ordering
@dataclass(frozen=True)
class Lit:
    """A Boolean variable or its negation; negative values are negations."""

    value: int

    def __post_init__(self) -> None:
        _validate_nonzero_i32(self.value, "literal")

    @classmethod
    def from_var(cls, var: Var) -> Lit:
        return cls(var.value)

    def var(self) -> Var:
        return Var(abs(self.value))

    def is_negated(self) -> bool:
        return self.value < 0

    def __invert__(self) -> Lit:
        return Lit(-self.value)

    def __int__(self) -> int:
        return self.value

    def _key(self) -> tuple[Var, bool]:
        return (self.var(), self.is_negated())

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Lit):
            return NotImplemented
        return self._key() < other._key()

    def __str__(self) -> str:
        return ("¬" if self.is_negated() else "") + str(self.var())

    def __repr__(self) -> str:
        return f"Lit({self.value})"


class CheckError(Exception):
    """Raised when an assignment does not satisfy a constraint."""


class Unsatisfiable(CheckError):
    """The problem being encoded, or checked, is inconsistent."""

    def __init__(self, message: str = "Problem inconsistency detected") -> None:
        super().__init__(message)


class CheckFailure(CheckError):
    """A constraint check failed, with an explanation."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Incomplete(Exception):
    """An assignment leaves literals that a check needs unassigned."""

    def __init__(self, missing: Iterable[Lit] = ()) -> None:
        self.missing: tuple[Lit, ...] = tuple(missing)
        super().__init__(str(self))

    def __str__(self) -> str:
        if not self.missing:
            return "Unknown literal is unassigned"
        if len(self.missing) == 1:
            return f"Literal {self.missing[0]!r} is unassigned"
        *head, last = self.missing
        first, *middle = head
        text = f"Literals {first!r}"
        for lit in middle:
            text += f", {lit!r}"
        return text + f", and {last!r} are unassigned"


class ClauseDatabase(ABC):
    """Receives the variables and clauses produced by encoders."""

    @abstractmethod
    def new_var(self) -> Var:
        """Return a fresh Boolean variable."""

    @abstractmethod
    def add_clause(self, clause: Iterable[Lit]) -> None:
        """Add a clause; raise Unsatisfiable once the clauses are proven inconsistent."""

    def encode(self, constraint: Any, encoder: Any) -> None:
        """Encode ``constraint`` into this database using ``encoder``."""
        encoder.encode(self, constraint)


class ConditionalDatabase(ClauseDatabase):
    """Wraps a database, adding a fixed set of literals to every clause."""

    def __init__(self, db: ClauseDatabase, conditions: Sequence[Lit]) -> None:
        self.db = db
        self.conditions = tuple(conditions)

    def new_var(self) -> Var:
        return self.db.new_var()

    def add_clause(self, clause: Iterable[Lit]) -> None:
        self.db.add_clause([*self.conditions, *clause])