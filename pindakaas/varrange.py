"""Contiguous, inclusive ranges of Boolean variables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from .core import Var


@dataclass(frozen=True)
class VarRange:
    """The variables from ``start`` up to and including ``end``."""

    start: Var
    end: Var

    @classmethod
    def empty(cls) -> VarRange:
        """A range containing no variables."""
        return cls(Var(2), Var(1))

    def is_empty(self) -> bool:
        return self.start > self.end

    def __len__(self) -> int:
        return max(self.end.value - self.start.value + 1, 0)

    def __getitem__(self, index: int) -> Var:
        size = len(self)
        if index < 0:
            index += size
        if not 0 <= index < size:
            raise IndexError("out of bounds access")
        return Var(self.start.value + index)

    def find(self, var: Var) -> Optional[int]:
        """The position of ``var`` within the range, or None."""
        if var not in self:
            return None
        return var.value - self.start.value

    def __contains__(self, var: object) -> bool:
        return isinstance(var, Var) and self.start <= var <= self.end

    def __iter__(self) -> Iterator[Var]:
        return (Var(v) for v in range(self.start.value, self.end.value + 1))

    def __reversed__(self) -> Iterator[Var]:
        return (Var(v) for v in range(self.end.value, self.start.value - 1, -1))