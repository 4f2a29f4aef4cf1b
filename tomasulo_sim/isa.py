"""
Opcodes of the floating-point instruction set and the station kinds that run them.
"""
from __future__ import annotations

from enum import Enum

__all__ = ["Opcode", "StationKind"]


class StationKind(Enum):
    ADD = "Add"
    MULT = "Mult"
    LOAD = "Load"
    STORE = "Store"

    @property
    def label(self) -> str:
        return self.value


class Opcode(Enum):
    ADDD = "ADDD"
    SUBD = "SUBD"
    MULTD = "MULTD"
    DIVD = "DIVD"
    LD = "LD"
    SD = "SD"

    @property
    def symbol(self) -> str:
        return _SYMBOLS.get(self, "")

    @property
    def station_kind(self) -> StationKind:
        return _KINDS[self]

    @property
    def is_memory(self) -> bool:
        return self in (Opcode.LD, Opcode.SD)

    @classmethod
    def parse(cls, text: str) -> "Opcode":
        try:
            return cls(text.upper())
        except ValueError:
            raise ValueError(f"unsupported opcode '{text}'") from None


_SYMBOLS = {
    Opcode.ADDD: "+",
    Opcode.SUBD: "-",
    Opcode.MULTD: "*",
    Opcode.DIVD: "/",
}

_KINDS = {
    Opcode.ADDD: StationKind.ADD,
    Opcode.SUBD: StationKind.ADD,
    Opcode.MULTD: StationKind.MULT,
    Opcode.DIVD: StationKind.MULT,
    Opcode.LD: StationKind.LOAD,
    Opcode.SD: StationKind.STORE,
}
