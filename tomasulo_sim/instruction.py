"""
Instructions, their lifecycle timestamps and the program text parser.
"""
from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from .config import DEFAULT_LATENCIES
from .errors import InvariantViolation, ParseError
from .isa import Opcode
from .units import FuId, Unit, parse_unit
from .values import Immediate, UnitReference, Value

__all__ = ["Instruction", "parse_instruction", "parse_program"]

logger = logging.getLogger(__name__)

TOKEN_SPLIT_RE = re.compile(r"[,\s]+")
LITERAL_RE = re.compile(r"^[+-]?\d+\+?$")


@dataclass
class Instruction:
    op: Opcode
    dest: Unit
    src1: Value
    src2: Value
    emit_cycle: Optional[int] = None
    start_cycle: Optional[int] = None
    exec_cycle: Optional[int] = None
    write_cycle: Optional[int] = None
    # Cycles left before the result is available; None while not counting.
    remaining: Optional[int] = None
    # Latency the countdown was armed with at emit.
    armed_latency: Optional[int] = None

    def clone(self) -> "Instruction":
        return copy.deepcopy(self)

    @property
    def latency(self) -> int:
        if self.armed_latency is not None:
            return self.armed_latency
        return DEFAULT_LATENCIES[self.op]

    @property
    def is_memory(self) -> bool:
        return self.op.is_memory

    @property
    def finished(self) -> bool:
        return self.exec_cycle is not None

    def emit(self, cycle: int, latency: Optional[int] = None) -> None:
        """Issue the instruction and arm its latency countdown."""
        self.emit_cycle = cycle
        self.armed_latency = latency if latency is not None else DEFAULT_LATENCIES[self.op]
        self.remaining = self.armed_latency

    def advance(self, cycle: int) -> bool:
        """Spend one calculating cycle. Returns True on the cycle the countdown hits zero."""
        if self.remaining is None:
            raise InvariantViolation(f"'{self}' advanced without a running countdown")
        if self.start_cycle is None:
            self.start_cycle = cycle
        self.remaining -= 1
        if self.remaining == 0:
            self.remaining = None
            self.exec_cycle = cycle
            return True
        return False

    def write(self, cycle: int) -> None:
        if self.exec_cycle is None:
            raise InvariantViolation(f"'{self}' written back before it finished")
        if self.write_cycle is not None:
            raise InvariantViolation(f"'{self}' written back twice")
        self.write_cycle = cycle

    def __str__(self) -> str:
        return f"{self.op.value} {self.dest} {self.src1} {self.src2}"


def parse_instruction(line: str, line_no: Optional[int] = None) -> Instruction:
    """Parse ``OPCODE DEST SRC1 SRC2``."""
    tokens = [tok for tok in TOKEN_SPLIT_RE.split(line.strip()) if tok]
    if len(tokens) != 4:
        raise ParseError(
            f"expected 'OPCODE DEST SRC1 SRC2', got {len(tokens)} token(s) in '{line.strip()}'",
            line_no,
            line,
        )
    try:
        op = Opcode.parse(tokens[0])
        dest = parse_unit(tokens[1])
        if not isinstance(dest, FuId):
            raise ValueError(f"destination '{tokens[1]}' is not a floating-point unit")
        src1 = _parse_operand(tokens[2])
        src2 = _parse_operand(tokens[3])
    except ValueError as exc:
        raise ParseError(str(exc), line_no, line) from exc
    return Instruction(op=op, dest=dest, src1=src1, src2=src2)


def _parse_operand(token: str) -> Value:
    unit = parse_unit(token)
    if unit is not None:
        return UnitReference(unit)
    if not LITERAL_RE.match(token):
        raise ValueError(f"invalid operand '{token}'")
    # "34+" is offset notation for a memory operand.
    return Immediate(int(token.rstrip("+")))


def parse_program(text: str) -> List[Instruction]:
    instructions: List[Instruction] = []
    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.split("#", 1)[0].strip()
        if not line:
            continue
        instructions.append(parse_instruction(line, line_no))
    logger.debug("Parsed %d instruction(s)", len(instructions))
    return instructions
