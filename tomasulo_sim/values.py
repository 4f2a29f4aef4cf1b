"""
Symbolic operand and result values.

Every value is an immutable node. Composite nodes only point at nodes that
already exist, so a value graph is always acyclic and can be shared freely
between stations and functional-unit slots.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .isa import Opcode
from .units import FuId, Unit

__all__ = [
    "Value",
    "Immediate",
    "FloatConstant",
    "UnitReference",
    "MemoryAddress",
    "BinaryOp",
    "apply_op",
    "is_numeric",
]


@dataclass(frozen=True)
class Immediate:
    value: int

    def brief(self) -> str:
        return str(self)

    def __str__(self) -> str:
        return f"{self.value}"


@dataclass(frozen=True)
class FloatConstant:
    value: float

    def brief(self) -> str:
        return str(self)

    def __str__(self) -> str:
        return f"{self.value:.2f}"


@dataclass(frozen=True)
class UnitReference:
    unit: Unit

    @property
    def is_fu(self) -> bool:
        return isinstance(self.unit, FuId)

    def brief(self) -> str:
        return str(self)

    def __str__(self) -> str:
        return f"{self.unit}"


@dataclass(frozen=True)
class MemoryAddress:
    address: "Value"

    def brief(self) -> str:
        return "M[..]"

    def __str__(self) -> str:
        return f"M[{self.address}]"


@dataclass(frozen=True)
class BinaryOp:
    op: Opcode
    left: "Value"
    right: "Value"

    def brief(self) -> str:
        return f"..{self.op.symbol}.."

    def __str__(self) -> str:
        return f"({self.left}{self.op.symbol}{self.right})"


Value = Union[Immediate, FloatConstant, UnitReference, MemoryAddress, BinaryOp]


def is_numeric(value: Value) -> bool:
    return isinstance(value, (Immediate, FloatConstant))


def apply_op(op: Opcode, left: Value, right: Value, fold: bool = False) -> Value:
    """Build the deferred result of ``left op right``.

    With ``fold`` set and two numeric leaves the result is evaluated right away.
    """
    if fold and is_numeric(left) and is_numeric(right):
        return FloatConstant(_evaluate(op, float(left.value), float(right.value)))
    return BinaryOp(op, left, right)


def _evaluate(op: Opcode, lhs: float, rhs: float) -> float:
    if op is Opcode.ADDD:
        return lhs + rhs
    if op is Opcode.SUBD:
        return lhs - rhs
    if op is Opcode.MULTD:
        return lhs * rhs
    if op is Opcode.DIVD:
        return lhs / rhs if rhs != 0 else float("inf")
    raise ValueError(f"{op.value} is not an arithmetic operation")
