"""
Tabular views of cycle snapshots and timing tables, built on pandas.

These are the only functions that know how the machine state is laid out for
humans. The console entry point and the streamlit app both go through them.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

import pandas as pd

from .snapshot import CycleSnapshot, InstructionTiming, StationSnapshot, UnitSnapshot

__all__ = [
    "TIMING_COLUMNS",
    "STATION_COLUMNS",
    "UNIT_COLUMNS",
    "timing_row",
    "station_row",
    "unit_row",
    "timing_frame",
    "station_frame",
    "unit_frame",
    "event_lines",
    "render_cycle",
    "render_timing",
]

TIMING_COLUMNS = ["#", "Instruction", "Issue", "Start", "Exec", "Write"]
STATION_COLUMNS = ["Name", "State", "Instruction", "Vj", "Vk", "Qj", "Qk", "Addr", "Remain"]
UNIT_COLUMNS = ["Name", "Qi", "Value"]


def _cell(value: Optional[object]) -> str:
    return "" if value is None else str(value)


# Serialization helpers
def timing_row(idx: int, timing: InstructionTiming) -> Dict[str, str]:
    return {
        "#": idx + 1,
        "Instruction": timing.instruction,
        "Issue": _cell(timing.emit_cycle),
        "Start": _cell(timing.start_cycle),
        "Exec": _cell(timing.exec_cycle),
        "Write": _cell(timing.write_cycle),
    }


def station_row(station: StationSnapshot) -> Dict[str, str]:
    return {
        "Name": station.name,
        "State": station.state,
        "Instruction": _cell(station.instruction),
        "Vj": _cell(station.vj),
        "Vk": _cell(station.vk),
        "Qj": _cell(station.qj),
        "Qk": _cell(station.qk),
        "Addr": _cell(station.address),
        "Remain": _cell(station.remaining),
    }


def unit_row(unit: UnitSnapshot) -> Dict[str, str]:
    return {"Name": unit.name, "Qi": _cell(unit.owner), "Value": _cell(unit.value)}


def timing_frame(timings: Iterable[InstructionTiming]) -> pd.DataFrame:
    rows = [timing_row(idx, timing) for idx, timing in enumerate(timings)]
    return pd.DataFrame(rows, columns=TIMING_COLUMNS)


def station_frame(snapshot: CycleSnapshot, busy_only: bool = False) -> pd.DataFrame:
    rows = [
        station_row(st)
        for st in snapshot.stations
        if not busy_only or st.state != "Free"
    ]
    return pd.DataFrame(rows, columns=STATION_COLUMNS)


def unit_frame(snapshot: CycleSnapshot, renamed_only: bool = False) -> pd.DataFrame:
    rows = [unit_row(u) for u in snapshot.units if not renamed_only or u.owner is not None]
    return pd.DataFrame(rows, columns=UNIT_COLUMNS)


def event_lines(snapshot: CycleSnapshot) -> List[str]:
    lines: List[str] = []
    if snapshot.issued:
        instr, station = snapshot.issued
        lines.append(f"Issued: {instr} -> {station}")
    if snapshot.issue_stall:
        instr, reason = snapshot.issue_stall
        lines.append(f"Stalled: {instr} - {reason}")
    for station in snapshot.exec_started:
        lines.append(f"Started execution: {station}")
    for station in snapshot.exec_completed:
        lines.append(f"Completed execution: {station}")
    for station, value in snapshot.written:
        lines.append(f"Wrote result: {station} = {value}")
    return lines


def render_cycle(snapshot: CycleSnapshot) -> str:
    status = "Finished" if snapshot.finished else "Running"
    parts = [f"Cycle: {snapshot.cycle} > {status}"]
    parts.extend(f"  {line}" for line in event_lines(snapshot))
    stations = station_frame(snapshot, busy_only=True)
    parts.append("Reservation Stations:")
    parts.append(stations.to_string(index=False) if not stations.empty else "  (all free)")
    units = unit_frame(snapshot, renamed_only=True)
    parts.append("Floating Units:")
    parts.append(units.to_string(index=False) if not units.empty else "  (none renamed)")
    return "\n".join(parts)


def render_timing(timings: Iterable[InstructionTiming]) -> str:
    frame = timing_frame(timings)
    if frame.empty:
        return "(no instructions)"
    return frame.to_string(index=False)
