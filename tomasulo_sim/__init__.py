"""
Cycle-accurate simulator of Tomasulo's dynamic scheduling algorithm.
"""
from __future__ import annotations

from .config import SimulatorConfig
from .errors import InvariantViolation, ParseError, SimulationDivergence, TomasuloError
from .executer import Executer
from .fu_table import FunctionalUnitTable
from .instruction import Instruction, parse_instruction, parse_program
from .isa import Opcode, StationKind
from .programs import SAMPLE_PROGRAM_TEXT, SAMPLE_PROGRAMS, build_sample_program
from .snapshot import CycleSnapshot, InstructionTiming
from .stations import ReservationStation, StationPool, StationState
from .units import FuId, RegId, StationId
from .values import (
    BinaryOp,
    FloatConstant,
    Immediate,
    MemoryAddress,
    UnitReference,
    Value,
    apply_op,
)

__all__ = [
    "SimulatorConfig",
    "TomasuloError",
    "ParseError",
    "InvariantViolation",
    "SimulationDivergence",
    "Executer",
    "FunctionalUnitTable",
    "Instruction",
    "parse_instruction",
    "parse_program",
    "Opcode",
    "StationKind",
    "SAMPLE_PROGRAM_TEXT",
    "SAMPLE_PROGRAMS",
    "build_sample_program",
    "CycleSnapshot",
    "InstructionTiming",
    "ReservationStation",
    "StationPool",
    "StationState",
    "FuId",
    "RegId",
    "StationId",
    "BinaryOp",
    "FloatConstant",
    "Immediate",
    "MemoryAddress",
    "UnitReference",
    "Value",
    "apply_op",
]
