"""
The cycle driver.

Each call to ``Executer.step`` runs one clock cycle in a fixed order:

1. Issue      - the backlog head goes to a free station of its kind, if any.
2. Execute    - the station pool ticks.
3. Write-back - stations that finished earlier put their result in the
                functional-unit table and their instruction is completed.
4. Broadcast  - the same results reach every station waiting on them.
5. Report     - a ``CycleSnapshot`` is recorded and handed to the reporter.
6. Release    - written-back stations become free for the next cycle.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Iterable, List, Optional, Tuple

from .config import SimulatorConfig
from .errors import InvariantViolation, SimulationDivergence
from .fu_table import FunctionalUnitTable
from .instruction import Instruction
from .isa import Opcode
from .snapshot import (
    CycleSnapshot,
    InstructionTiming,
    snapshot_station,
    snapshot_unit,
    timings_of,
)
from .stations import ReservationStation, StationPool
from .units import FuId
from .values import Value

__all__ = ["Executer", "Reporter"]

logger = logging.getLogger(__name__)

Reporter = Callable[[CycleSnapshot], None]


class Executer:
    def __init__(
        self,
        config: Optional[SimulatorConfig] = None,
        reporter: Optional[Reporter] = None,
    ) -> None:
        self.config = config or SimulatorConfig()
        self.reporter = reporter
        self.pool = StationPool(self.config)
        self.fu_table = FunctionalUnitTable()
        self.backlog: Deque[Instruction] = deque()
        self.completed: List[Instruction] = []
        self.history: List[CycleSnapshot] = []
        self.inst_count: int = 0
        self.cycle: int = 0
        self.finished: bool = False

    def add_instructions(self, instructions: Iterable[Instruction]) -> None:
        """Queue copies of ``instructions`` behind anything already in the backlog."""
        added = [inst.clone() for inst in instructions]
        self.backlog.extend(added)
        self.inst_count += len(added)
        self.finished = self.is_finished()

    def reset(self) -> None:
        """Drop every instruction and return the machine to its power-on state."""
        self.pool.clear()
        self.fu_table.clear()
        self.backlog.clear()
        self.completed = []
        self.history = []
        self.inst_count = 0
        self.cycle = 0
        self.finished = False

    def is_finished(self) -> bool:
        return len(self.completed) == self.inst_count

    def run(self) -> List[InstructionTiming]:
        logger.info("Running %d instruction(s)", self.inst_count)
        while not self.is_finished():
            self.step()
        logger.info("Finished after %d cycle(s)", self.cycle)
        return self.timing_table()

    def step(self) -> Optional[CycleSnapshot]:
        """Simulate one cycle. Returns None once everything has written back."""
        if self.is_finished():
            return None
        if self.cycle >= self.config.max_cycles:
            pending = len(self.backlog) + sum(1 for st in self.pool if not st.is_free)
            raise SimulationDivergence(
                f"No completion after {self.cycle} cycles "
                f"({len(self.completed)}/{self.inst_count} done, {pending} still pending)",
                cycle=self.cycle,
                trace=self.history,
            )
        self.cycle += 1

        issued, stall = self._issue()
        due = self.pool.tick(self.fu_table, self.cycle)
        results = self._write_back(due)
        self._broadcast(results)
        self.finished = self.is_finished()
        snapshot = self._report(issued, stall, results)
        for station in due:
            self.pool.release(station)
        return snapshot

    def _issue(self) -> Tuple[Optional[Tuple[str, str]], Optional[Tuple[str, str]]]:
        if not self.backlog:
            return None, None
        inst = self.backlog[0]
        kind = inst.op.station_kind
        station = self.pool.find_free(kind)
        if station is None:
            reason = f"No free {kind.label} reservation station"
            logger.debug("Cycle %d: '%s' stalled, %s", self.cycle, inst, reason)
            return None, (str(inst), reason)
        if not isinstance(inst.dest, FuId):
            raise InvariantViolation(f"'{inst}': destination is not a floating-point unit")

        self.backlog.popleft()
        self.pool.apply(station, inst, self.fu_table, self.cycle)
        if inst.op is not Opcode.SD:
            self.fu_table.mark_busy(inst.dest, station.id)
        return (str(inst), station.name), None

    def _write_back(self, due: List[ReservationStation]) -> List[Tuple[ReservationStation, Value]]:
        results: List[Tuple[ReservationStation, Value]] = []
        for station in due:
            inst = station.instruction
            value = station.result(self.config.fold_constants)
            if value is not None:
                self.fu_table.mark_ready(inst.dest, station.id, value)
                results.append((station, value))
            inst.write(self.cycle)
            self.completed.append(inst)
            logger.debug("Cycle %d: %s wrote back '%s'", self.cycle, station.id, inst)
        return results

    def _broadcast(self, results: List[Tuple[ReservationStation, Value]]) -> None:
        for station, value in results:
            self.pool.broadcast(station, value)

    def _report(
        self,
        issued: Optional[Tuple[str, str]],
        stall: Optional[Tuple[str, str]],
        results: List[Tuple[ReservationStation, Value]],
    ) -> CycleSnapshot:
        snapshot = CycleSnapshot(
            cycle=self.cycle,
            finished=self.finished,
            stations=tuple(snapshot_station(st) for st in self.pool),
            units=tuple(snapshot_unit(slot) for slot in self.fu_table),
            issued=issued,
            issue_stall=stall,
            exec_started=tuple(str(sid) for sid in self.pool.started),
            exec_completed=tuple(str(sid) for sid in self.pool.finished),
            written=tuple((st.name, str(value)) for st, value in results),
            completed=tuple(self.timing_table()),
        )
        self.history.append(snapshot)
        if self.reporter is not None:
            self.reporter(snapshot)
        return snapshot

    def timing_table(self) -> List[InstructionTiming]:
        """Completed instructions ordered by the cycle they were issued in."""
        return timings_of(sorted(self.completed, key=lambda inst: inst.emit_cycle))
