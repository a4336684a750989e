"""Formulas in conjunctive normal form, plain and weighted, with DIMACS I/O."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

from .core import I32_MAX, ClauseDatabase, Coeff, Lit, Var
from .varrange import VarRange

PathLike = Union[str, "os.PathLike[str]"]


class DimacsError(ValueError):
    """A (W)DIMACS file is not formatted as expected."""


@dataclass
class _VarFactory:
    """Hands out consecutive fresh variables, starting at 1."""

    next_value: int = 1

    def emitted_vars(self) -> int:
        return self.next_value - 1

    def next_var(self) -> Var:
        if self.next_value > I32_MAX:
            raise RuntimeError("exhausted variable pool")
        var = Var(self.next_value)
        self.next_value += 1
        return var

    def next_var_range(self, size: int) -> Optional[VarRange]:
        if size < 0:
            raise ValueError("size of a variable range cannot be negative")
        if size == 0:
            return VarRange.empty()
        last = self.next_value + size - 1
        if last > I32_MAX:
            return None
        var_range = VarRange(Var(self.next_value), Var(last))
        self.next_value = last + 1
        return var_range


def _write_with_comment(path: PathLike, text: str, comment: Optional[str]) -> None:
    with open(path, "w", encoding="utf-8") as file:
        if comment is not None:
            for line in comment.splitlines():
                file.write(f"c {line}\n")
        file.write(text)


class Cnf(ClauseDatabase):
    """A Boolean formula in conjunctive normal form.

    It can be built by hand, receive the output of encoders, and be read
    from and written to DIMACS files.
    """

    def __init__(self) -> None:
        self._factory = _VarFactory()
        self._clauses: list[tuple[Lit, ...]] = []

    def new_var(self) -> Var:
        return self._factory.next_var()

    def add_clause(self, clause: Iterable[Lit]) -> None:
        """Add a clause; empty clauses are ignored."""
        lits = tuple(clause)
        if lits:
            self._clauses.append(lits)

    def next_var_range(self, size: int) -> Optional[VarRange]:
        """Reserve ``size`` consecutive fresh variables."""
        return self._factory.next_var_range(size)

    def variables(self) -> int:
        return self._factory.emitted_vars()

    def clauses(self) -> int:
        return len(self._clauses)

    def literals(self) -> int:
        return sum(len(cl) for cl in self._clauses)

    def __iter__(self) -> Iterator[tuple[Lit, ...]]:
        return iter(self._clauses)

    def __str__(self) -> str:
        lines = [f"p cnf {self.variables()} {self.clauses()}"]
        lines.extend(
            "".join(f"{int(lit)} " for lit in clause) + "0" for clause in self._clauses
        )
        return "\n".join(lines) + "\n"

    def to_file(self, path: PathLike, comment: Optional[str] = None) -> None:
        """Store the formula at ``path`` in DIMACS format, optionally with a comment."""
        _write_with_comment(path, str(self), comment)

    @classmethod
    def from_file(cls, path: PathLike) -> Cnf:
        """Read a formula from a DIMACS CNF file."""
        return _parse_dimacs_file(path, expect_wcnf=False).to_cnf()


class Wcnf(ClauseDatabase):
    """A weighted CNF formula: each clause has a weight, or is hard (None)."""

    def __init__(self) -> None:
        self._cnf = Cnf()
        self._weights: list[Optional[Coeff]] = []

    def new_var(self) -> Var:
        return self._cnf.new_var()

    def add_clause(self, clause: Iterable[Lit]) -> None:
        """Add a hard clause."""
        self.add_weighted_clause(clause, None)

    def add_weighted_clause(self, clause: Iterable[Lit], weight: Optional[Coeff]) -> None:
        """Add a clause with a weight; None makes it a hard clause."""
        before = self._cnf.clauses()
        self._cnf.add_clause(clause)
        if self._cnf.clauses() > before:
            self._weights.append(weight)

    def next_var_range(self, size: int) -> Optional[VarRange]:
        return self._cnf.next_var_range(size)

    def variables(self) -> int:
        return self._cnf.variables()

    def clauses(self) -> int:
        return self._cnf.clauses()

    def literals(self) -> int:
        return self._cnf.literals()

    def __iter__(self) -> Iterator[tuple[tuple[Lit, ...], Optional[Coeff]]]:
        return zip(self._cnf, self._weights)

    def _top(self) -> Coeff:
        return 1 + sum(w for w in self._weights if w is not None)

    def __str__(self) -> str:
        top = self._top()
        lines = [f"p wcnf {self.variables()} {self.clauses()} {top}"]
        for clause, weight in self:
            body = "".join(f"{int(lit)} " for lit in clause)
            lines.append(f"{top if weight is None else weight} {body}0")
        return "\n".join(lines) + "\n"

    def to_file(self, path: PathLike, comment: Optional[str] = None) -> None:
        """Store the formula at ``path`` in WDIMACS format, optionally with a comment."""
        _write_with_comment(path, str(self), comment)

    @classmethod
    def from_file(cls, path: PathLike) -> Wcnf:
        """Read a formula from a (W)DIMACS WCNF file."""
        return _parse_dimacs_file(path, expect_wcnf=True)

    @classmethod
    def from_cnf(cls, cnf: Cnf) -> Wcnf:
        """A weighted formula in which every clause of ``cnf`` is hard."""
        wcnf = cls()
        wcnf._cnf._factory = _VarFactory(cnf._factory.next_value)
        wcnf._cnf._clauses = list(cnf)
        wcnf._weights = [None] * cnf.clauses()
        return wcnf

    def to_cnf(self) -> Cnf:
        """The hard clauses of this formula; weighted clauses are dropped."""
        cnf = Cnf()
        cnf._factory = _VarFactory(self._cnf._factory.next_value)
        cnf._clauses = [clause for clause, weight in self if weight is None]
        return cnf


def _parse_header(line: str, expect_wcnf: bool) -> tuple[int, Optional[Coeff]]:
    tokens = line.split()
    if expect_wcnf:
        if len(tokens) != 5 or tokens[:2] != ["p", "wcnf"]:
            raise DimacsError(
                'expected DIMACS WCNF header formatted "p wcnf {variables} {clauses} {top}"'
            )
    elif len(tokens) != 4 or tokens[:2] != ["p", "cnf"]:
        raise DimacsError('expected DIMACS CNF header formatted "p cnf {variables} {clauses}"')

    try:
        num_var = int(tokens[2])
    except ValueError:
        raise DimacsError("unable to parse number of variables") from None
    if not 0 < num_var <= I32_MAX:
        raise DimacsError("unable to parse number of variables")

    try:
        num_clauses = int(tokens[3])
    except ValueError:
        raise DimacsError("unable to parse number of clauses") from None
    if num_clauses < 0:
        raise DimacsError("unable to parse number of clauses")

    top: Optional[Coeff] = None
    if expect_wcnf:
        try:
            top = int(tokens[4])
        except ValueError:
            raise DimacsError("unable to parse top weight") from None
    return num_var, top


def _parse_dimacs_file(path: PathLike, expect_wcnf: bool) -> Wcnf:
    wcnf = Wcnf()
    had_header = False
    top: Optional[Coeff] = None
    clause: list[Lit] = []
    weight: Optional[Coeff] = None
    awaiting_weight = True

    with open(path, encoding="utf-8") as file:
        for raw in file:
            line = raw.rstrip("\r\n")
            if not line or line.startswith("c"):
                continue
            if not had_header:
                num_var, top = _parse_header(line, expect_wcnf)
                wcnf._cnf._factory = _VarFactory(num_var + 1)
                had_header = True
                continue
            for seg in line.split():
                if expect_wcnf and awaiting_weight:
                    try:
                        value = int(seg)
                    except ValueError:
                        raise DimacsError(f"Cannot parse line {line}") from None
                    assert top is not None
                    if value > top:
                        raise DimacsError(
                            f"Found weight {value} greater than top {top} from header"
                        )
                    weight = None if value == top else value
                    awaiting_weight = False
                    continue
                try:
                    lit = int(seg)
                except ValueError:
                    continue
                if lit == 0:
                    wcnf.add_weighted_clause(clause, weight)
                    clause = []
                    weight = None
                    awaiting_weight = True
                else:
                    clause.append(Lit(lit))
    return wcnf