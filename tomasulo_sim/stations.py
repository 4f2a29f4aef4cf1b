"""
Reservation stations and the kind-partitioned pool that owns them.

Every station walks the same four states::

    FREE --apply--> BUSY --operands resolved--> CALCULATING --countdown done--> READY --release--> FREE

Pending operands are named by the tag (``StationId``) of the station that will
produce them. They are resolved either by the producer's broadcast or, failing
that, by polling the functional-unit table on the next tick.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from .config import SimulatorConfig
from .errors import InvariantViolation
from .fu_table import FunctionalUnitTable
from .instruction import Instruction
from .isa import Opcode, StationKind
from .units import FuId, StationId
from .values import MemoryAddress, UnitReference, Value, apply_op

__all__ = ["StationState", "ReservationStation", "StationPool"]

logger = logging.getLogger(__name__)


class StationState(Enum):
    FREE = "Free"
    BUSY = "Busy"
    CALCULATING = "Calculating"
    READY = "Ready"


@dataclass
class ReservationStation:
    id: StationId
    state: StationState = StationState.FREE
    instruction: Optional[Instruction] = None
    vj: Optional[Value] = None
    vk: Optional[Value] = None
    qj: Optional[StationId] = None
    qk: Optional[StationId] = None
    address: Optional[Value] = None

    @property
    def kind(self) -> StationKind:
        return self.id.kind

    @property
    def name(self) -> str:
        return str(self.id)

    @property
    def is_free(self) -> bool:
        return self.state is StationState.FREE

    def reset(self) -> None:
        self.state = StationState.FREE
        self.instruction = None
        self.vj = None
        self.vk = None
        self.qj = None
        self.qk = None
        self.address = None

    def operands_ready(self) -> bool:
        return self.qj is None and self.qk is None

    def poll(self, fu_table: FunctionalUnitTable) -> None:
        """Snoop the functional-unit table for the values this station waits on."""
        if self.qj is not None:
            value = fu_table.try_get_value(self.qj)
            if value is not None:
                logger.debug("%s picked up Vj from %s by polling", self.id, self.qj)
                self.vj, self.qj = value, None
        if self.qk is not None:
            value = fu_table.try_get_value(self.qk)
            if value is not None:
                logger.debug("%s picked up Vk from %s by polling", self.id, self.qk)
                self.vk, self.qk = value, None

    def result(self, fold: bool = False) -> Optional[Value]:
        """The value this station writes back. Stores produce nothing."""
        inst = self.instruction
        if inst is None or self.state is not StationState.READY:
            raise InvariantViolation(f"{self.id} has no finished instruction")
        if inst.op is Opcode.SD:
            return None
        if inst.op is Opcode.LD:
            return MemoryAddress(apply_op(Opcode.ADDD, self.vk, self.address, fold))
        return apply_op(inst.op, self.vj, self.vk, fold)


class StationPool:
    def __init__(self, config: Optional[SimulatorConfig] = None) -> None:
        self.config = config or SimulatorConfig()
        self.stations: List[ReservationStation] = [
            ReservationStation(StationId(kind, index))
            for kind in StationKind
            for index in range(self.config.station_counts[kind])
        ]
        # Events of the most recent tick, for reporting.
        self.started: List[StationId] = []
        self.finished: List[StationId] = []

    def __iter__(self) -> Iterator[ReservationStation]:
        return iter(self.stations)

    def __len__(self) -> int:
        return len(self.stations)

    def clear(self) -> None:
        for station in self.stations:
            station.reset()
        self.started = []
        self.finished = []

    def get(self, station_id: StationId) -> ReservationStation:
        for station in self.stations:
            if station.id == station_id:
                return station
        raise KeyError(station_id)

    def by_kind(self, kind: StationKind) -> List[ReservationStation]:
        return [station for station in self.stations if station.kind is kind]

    def find_free(self, kind: StationKind) -> Optional[ReservationStation]:
        for station in self.stations:
            if station.kind is kind and station.is_free:
                return station
        return None

    def apply(
        self,
        station: ReservationStation,
        instruction: Instruction,
        fu_table: FunctionalUnitTable,
        cycle: int,
    ) -> None:
        if not station.is_free:
            raise InvariantViolation(f"{station.id} is {station.state.value}, cannot accept '{instruction}'")
        if instruction.op.station_kind is not station.kind:
            raise InvariantViolation(f"'{instruction}' cannot run on {station.id}")

        vj: Optional[Value] = None
        qj: Optional[StationId] = None
        address: Optional[Value] = None
        if instruction.is_memory:
            address = instruction.src2
            vk, qk = self._resolve(instruction.src1, fu_table)
            if instruction.op is Opcode.SD:
                # The stored register travels in the DEST field.
                vj, qj = self._resolve(UnitReference(instruction.dest), fu_table)
        else:
            vj, qj = self._resolve(self._require_fu(instruction.src1, instruction), fu_table)
            vk, qk = self._resolve(self._require_fu(instruction.src2, instruction), fu_table)

        station.vj, station.qj = vj, qj
        station.vk, station.qk = vk, qk
        station.address = address
        instruction.emit(cycle, self.config.latency_for(instruction.op))
        station.instruction = instruction
        station.state = StationState.BUSY
        logger.debug(
            "Cycle %d: %s <- '%s' (Qj=%s, Qk=%s)", cycle, station.id, instruction, station.qj, station.qk
        )

    @staticmethod
    def _require_fu(operand: Value, instruction: Instruction) -> UnitReference:
        if not (isinstance(operand, UnitReference) and operand.is_fu):
            raise InvariantViolation(
                f"'{instruction}': operand '{operand}' must be a floating-point unit"
            )
        return operand

    @staticmethod
    def _resolve(
        operand: Value, fu_table: FunctionalUnitTable
    ) -> Tuple[Optional[Value], Optional[StationId]]:
        """Split an operand into a ready value or the tag of its producer."""
        if not (isinstance(operand, UnitReference) and isinstance(operand.unit, FuId)):
            return operand, None
        slot = fu_table.slot(operand.unit)
        if slot.value is not None:
            return slot.value, None
        if slot.owner is None:
            raise InvariantViolation(f"{slot.fu_id} has neither a value nor a producer")
        return None, slot.owner

    def tick(self, fu_table: FunctionalUnitTable, cycle: int) -> List[ReservationStation]:
        """Advance every station by one cycle.

        Returns the stations whose result is due on the bus this cycle, which
        are the ones that finished calculating in an earlier cycle.
        """
        due = [station for station in self.stations if station.state is StationState.READY]
        self.started = []
        self.finished = []
        for station in self.stations:
            if station.state is StationState.BUSY:
                if station.operands_ready():
                    station.state = StationState.CALCULATING
                    self.started.append(station.id)
                    logger.debug("Cycle %d: %s starts calculating", cycle, station.id)
                else:
                    station.poll(fu_table)
            if station.state is StationState.CALCULATING:
                if station.instruction.advance(cycle):
                    station.state = StationState.READY
                    self.finished.append(station.id)
                    logger.debug("Cycle %d: %s finished", cycle, station.id)
        return due

    def broadcast(self, producer: ReservationStation, value: Value) -> int:
        """Hand ``value`` to every station waiting on ``producer``. Returns the number of operands filled."""
        delivered = 0
        for station in self.stations:
            if station is producer:
                continue
            if station.state not in (StationState.BUSY, StationState.CALCULATING):
                continue
            if station.qj == producer.id:
                station.vj, station.qj = value, None
                delivered += 1
            if station.qk == producer.id:
                station.vk, station.qk = value, None
                delivered += 1
        if delivered:
            logger.debug("%s broadcast %s to %d operand(s)", producer.id, value.brief(), delivered)
        return delivered

    def release(self, station: ReservationStation) -> None:
        if station.state is not StationState.READY:
            raise InvariantViolation(f"{station.id} released while {station.state.value}")
        station.reset()
