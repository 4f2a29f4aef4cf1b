"""
Plain, immutable views of the machine state handed to reporters once per cycle.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .fu_table import FunctionalUnitSlot
from .instruction import Instruction
from .stations import ReservationStation

__all__ = [
    "StationSnapshot",
    "UnitSnapshot",
    "InstructionTiming",
    "CycleSnapshot",
    "snapshot_station",
    "snapshot_unit",
    "timing_of",
    "timings_of",
]


@dataclass(frozen=True)
class StationSnapshot:
    name: str
    kind: str
    state: str
    instruction: Optional[str] = None
    vj: Optional[str] = None
    vk: Optional[str] = None
    qj: Optional[str] = None
    qk: Optional[str] = None
    address: Optional[str] = None
    remaining: Optional[int] = None


@dataclass(frozen=True)
class UnitSnapshot:
    name: str
    owner: Optional[str] = None
    value: Optional[str] = None


@dataclass(frozen=True)
class InstructionTiming:
    instruction: str
    emit_cycle: Optional[int]
    start_cycle: Optional[int]
    exec_cycle: Optional[int]
    write_cycle: Optional[int]


@dataclass(frozen=True)
class CycleSnapshot:
    """What the machine looked like at the end of one cycle, before release."""

    cycle: int
    finished: bool
    stations: Tuple[StationSnapshot, ...]
    units: Tuple[UnitSnapshot, ...]
    issued: Optional[Tuple[str, str]] = None  # (instruction, station)
    issue_stall: Optional[Tuple[str, str]] = None  # (instruction, reason)
    exec_started: Tuple[str, ...] = ()
    exec_completed: Tuple[str, ...] = ()
    written: Tuple[Tuple[str, str], ...] = ()  # (station, value)
    completed: Tuple[InstructionTiming, ...] = field(default_factory=tuple)


def _text(value) -> Optional[str]:
    return None if value is None else str(value)


def snapshot_station(station: ReservationStation) -> StationSnapshot:
    inst = station.instruction
    return StationSnapshot(
        name=station.name,
        kind=station.kind.label,
        state=station.state.value,
        instruction=_text(inst),
        vj=_text(station.vj),
        vk=_text(station.vk),
        qj=_text(station.qj),
        qk=_text(station.qk),
        address=_text(station.address),
        remaining=inst.remaining if inst is not None else None,
    )


def snapshot_unit(slot: FunctionalUnitSlot) -> UnitSnapshot:
    return UnitSnapshot(name=str(slot.fu_id), owner=_text(slot.owner), value=_text(slot.value))


def timing_of(instruction: Instruction) -> InstructionTiming:
    return InstructionTiming(
        instruction=str(instruction),
        emit_cycle=instruction.emit_cycle,
        start_cycle=instruction.start_cycle,
        exec_cycle=instruction.exec_cycle,
        write_cycle=instruction.write_cycle,
    )


def timings_of(instructions: Iterable[Instruction]) -> List[InstructionTiming]:
    return [timing_of(inst) for inst in instructions]
