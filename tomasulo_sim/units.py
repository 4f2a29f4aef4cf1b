"""
Identifiers for the places a value can live: floating-point slots, integer
registers and reservation stations.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

from .config import FU_SIZE
from .isa import StationKind

__all__ = ["FuId", "RegId", "StationId", "Unit", "parse_unit"]

UNIT_RE = re.compile(r"^([FR])(\d+)$")


@dataclass(frozen=True)
class FuId:
    """Floating-point slot ``F<number>``; only even numbers below 32 exist."""

    number: int

    def __post_init__(self) -> None:
        if self.number % 2 != 0 or not 0 <= self.number < 2 * FU_SIZE:
            raise ValueError(
                f"F{self.number} is not a floating-point unit (expected even F0..F{2 * FU_SIZE - 2})"
            )

    @property
    def index(self) -> int:
        return self.number // 2

    @classmethod
    def from_index(cls, index: int) -> "FuId":
        return cls(index * 2)

    def __str__(self) -> str:
        return f"F{self.number}"


@dataclass(frozen=True)
class RegId:
    number: int

    def __str__(self) -> str:
        return f"R{self.number}"


@dataclass(frozen=True)
class StationId:
    kind: StationKind
    index: int

    def __str__(self) -> str:
        return f"{self.kind.label}{self.index + 1}"


Unit = Union[FuId, RegId, StationId]


def parse_unit(token: str) -> Optional[Unit]:
    """Parse ``F<n>`` or ``R<n>``.

    Returns ``None`` when the token does not look like a unit at all, and raises
    ``ValueError`` when it does but names a slot that does not exist.
    """
    match = UNIT_RE.match(token.strip().upper())
    if not match:
        return None
    prefix, number = match.groups()
    if prefix == "F":
        return FuId(int(number))
    return RegId(int(number))
