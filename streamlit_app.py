#!/usr/bin/env python3
"""
Streamlit front-end for the Tomasulo Simulator.

Run with:
    streamlit run streamlit_app.py
"""
from __future__ import annotations

import time
from typing import Dict, List

import altair as alt
import pandas as pd
import streamlit as st

from tomasulo_sim import (
    Executer,
    InvariantViolation,
    Opcode,
    ParseError,
    SimulationDivergence,
    SimulatorConfig,
    parse_program,
)
from tomasulo_sim.config import DEFAULT_LATENCIES
from tomasulo_sim.programs import SAMPLE_PROGRAMS, SAMPLE_PROGRAM_TEXT
from tomasulo_sim.report import event_lines, station_frame, timing_frame, unit_frame
from tomasulo_sim.snapshot import CycleSnapshot, snapshot_station, snapshot_unit, timings_of

# ---------------------------------------------------------------------------
# Session helpers
# ---------------------------------------------------------------------------

def default_latencies() -> Dict[str, int]:
    return {op.value: latency for op, latency in DEFAULT_LATENCIES.items()}


def build_executer(program_text: str, latencies: Dict[str, int]) -> Executer:
    config = SimulatorConfig().with_latencies(**latencies)
    executer = Executer(config)
    executer.add_instructions(parse_program(program_text))
    return executer


def init_state() -> None:
    if "program_text" not in st.session_state:
        st.session_state["program_text"] = SAMPLE_PROGRAM_TEXT.strip()
    if "latencies" not in st.session_state:
        st.session_state["latencies"] = default_latencies()
    if "executer" not in st.session_state:
        st.session_state["executer"] = build_executer(
            st.session_state["program_text"], st.session_state["latencies"]
        )
    if "is_running" not in st.session_state:
        st.session_state["is_running"] = False
    if "auto_speed" not in st.session_state:
        st.session_state["auto_speed"] = 1.0
    if "abort_message" not in st.session_state:
        st.session_state["abort_message"] = None


def replace_executer(program_text: str) -> None:
    st.session_state["program_text"] = program_text
    st.session_state["executer"] = build_executer(program_text, st.session_state["latencies"])
    st.session_state["abort_message"] = None


def safe_step(executer: Executer) -> bool:
    """Step once; on a fatal simulator error stop the run and remember why."""
    try:
        return executer.step() is not None
    except (SimulationDivergence, InvariantViolation) as exc:
        st.session_state["abort_message"] = str(exc)
        st.session_state["is_running"] = False
        return False


def live_snapshot(executer: Executer) -> CycleSnapshot:
    """The last reported cycle, or the power-on state before the first step."""
    if executer.history:
        return executer.history[-1]
    return CycleSnapshot(
        cycle=0,
        finished=executer.is_finished(),
        stations=tuple(snapshot_station(rs) for rs in executer.pool),
        units=tuple(snapshot_unit(slot) for slot in executer.fu_table),
    )

# UI rendering
def render_header(executer: Executer) -> None:
    st.title("Tomasulo Algorithm Simulator")
    st.caption("Dynamic scheduling with reservation stations, renaming and a common data bus.")
    col1, col2, col3 = st.columns(3)
    col1.metric("Cycle", executer.cycle)
    col2.metric("Written back", f"{len(executer.completed)}/{executer.inst_count}")
    col3.metric("Finished", "Yes" if executer.is_finished() else "No")
    if st.session_state["abort_message"]:
        st.error(f"Simulation aborted: {st.session_state['abort_message']}")


def render_current_status(executer: Executer) -> None:
    if executer.cycle == 0:
        return

    st.subheader("Current Cycle Status")

    if executer.backlog:
        next_instr = executer.backlog[0]
        kind = next_instr.op.station_kind
        free_station = executer.pool.find_free(kind)

        col1, col2 = st.columns(2)
        with col1:
            st.info(f"**Next to issue:** {next_instr}")
        with col2:
            if free_station is None:
                st.error(f"**STRUCTURAL HAZARD**: No free {kind.label} reservation station available")
            else:
                st.success(f"{kind.label} station available ({free_station.name})")

    lines = event_lines(live_snapshot(executer))
    if lines:
        st.markdown("**Last Cycle Events:**")
        for line in lines:
            st.markdown(f"- {line}")


def render_instruction_editor() -> None:
    st.subheader("Instruction Input")
    st.caption("Syntax: `LD F6 34+ R2` | `MULTD F0 F2 F4` | `SD F6 0 R3`")

    editor_col, buttons_col = st.columns([4, 1])
    with editor_col:
        text = st.text_area(
            "Program",
            value=st.session_state["program_text"],
            height=160,
            label_visibility="collapsed",
        )
    with buttons_col:
        st.markdown("**Program Actions**")
        if st.button("Apply", use_container_width=True, type="primary"):
            try:
                parse_program(text)
            except ParseError as exc:
                st.error(f"Failed to parse instructions: {exc}")
            else:
                replace_executer(text.strip())
                st.rerun()
        for number, sample in SAMPLE_PROGRAMS.items():
            if st.button(f"Load Example {number}", use_container_width=True):
                replace_executer(sample.strip())
                st.rerun()


def render_latency_config() -> None:
    with st.expander("Latency Configuration", expanded=False):
        st.caption("Execution latencies (in cycles) per opcode")

        new_latencies = dict(st.session_state["latencies"])
        columns = st.columns(3)
        for idx, op in enumerate(Opcode):
            with columns[idx % 3]:
                new_latencies[op.value] = int(st.number_input(
                    op.value,
                    min_value=1,
                    max_value=50,
                    value=st.session_state["latencies"][op.value],
                    step=1,
                    key=f"latency_{op.value}",
                ))

        button_col1, button_col2, _ = st.columns([1, 1, 2])
        with button_col1:
            if st.button("Apply Latencies", use_container_width=True, type="primary"):
                st.session_state["latencies"] = new_latencies
                replace_executer(st.session_state["program_text"])
                st.success("Latencies updated and simulator reset!")
                st.rerun()
        with button_col2:
            if st.button("Reset to Defaults", use_container_width=True):
                st.session_state["latencies"] = default_latencies()
                replace_executer(st.session_state["program_text"])
                st.rerun()


def render_controls(executer: Executer) -> None:
    st.subheader("Execution Controls")

    col1, col2, col3, col4, col5 = st.columns([1, 1, 1.2, 1, 1])

    if st.session_state["is_running"]:
        if col1.button("Stop", use_container_width=True, type="primary"):
            st.session_state["is_running"] = False
            st.rerun()
    else:
        if col1.button("Start", use_container_width=True, type="primary"):
            if not executer.is_finished():
                st.session_state["is_running"] = True
                st.rerun()

    if col2.button("Step", use_container_width=True, disabled=st.session_state["is_running"]):
        safe_step(executer)
        st.rerun()

    step_count = col3.number_input(
        "Run cycles", min_value=1, max_value=200, value=10, step=1,
        label_visibility="collapsed", disabled=st.session_state["is_running"],
    )
    col3.caption("Cycles / burst")
    if col4.button(f"Run x{int(step_count)}", use_container_width=True, disabled=st.session_state["is_running"]):
        for _ in range(int(step_count)):
            if not safe_step(executer):
                break
        st.rerun()

    if col5.button("Reset", type="secondary", use_container_width=True, disabled=st.session_state["is_running"]):
        replace_executer(st.session_state["program_text"])
        st.session_state["is_running"] = False
        st.rerun()

    if st.session_state["is_running"]:
        st.session_state["auto_speed"] = st.slider(
            "Simulation Speed",
            min_value=0.1,
            max_value=2.0,
            value=st.session_state["auto_speed"],
            step=0.1,
            format="%.1fx",
        )


def render_tables(executer: Executer) -> None:
    snapshot = live_snapshot(executer)
    in_flight = [rs.instruction for rs in executer.pool if rs.instruction is not None]
    timings = timings_of(
        sorted(executer.completed + in_flight, key=lambda inst: inst.emit_cycle)
        + list(executer.backlog)
    )

    st.subheader("Machine State")
    top_left, top_right = st.columns((3, 2))
    with top_left:
        st.markdown("#### Instructions")
        st.dataframe(timing_frame(timings), use_container_width=True, hide_index=True, height=300)
    with top_right:
        st.markdown("#### Floating Units")
        st.dataframe(unit_frame(snapshot), use_container_width=True, hide_index=True, height=300)

    st.markdown("#### Reservation Stations")
    st.dataframe(station_frame(snapshot), use_container_width=True, hide_index=True)


def timeline_rows(executer: Executer) -> List[Dict[str, object]]:
    data: List[Dict[str, object]] = []
    for i, timing in enumerate(executer.timing_table()):
        label = f"#{i + 1} {timing.instruction}"
        if timing.emit_cycle is not None and timing.start_cycle is not None:
            data.append({"Instruction": label, "Stage": "Issue (Wait)", "Start": timing.emit_cycle, "End": timing.start_cycle})
        if timing.start_cycle is not None and timing.exec_cycle is not None:
            data.append({"Instruction": label, "Stage": "Execute", "Start": timing.start_cycle, "End": timing.exec_cycle + 1})
        if timing.exec_cycle is not None and timing.write_cycle is not None:
            data.append({"Instruction": label, "Stage": "Write (CDB)", "Start": timing.write_cycle, "End": timing.write_cycle + 1})
    return data


def render_gantt_chart(executer: Executer) -> None:
    st.subheader("Execution Timeline")

    data = timeline_rows(executer)
    if not data:
        st.info("Run the simulation to see the timeline.")
        return

    chart = alt.Chart(pd.DataFrame(data)).mark_bar().encode(
        x=alt.X("Start", title="Cycle"),
        x2="End",
        y=alt.Y("Instruction", sort=None),
        color=alt.Color(
            "Stage",
            scale=alt.Scale(
                domain=["Issue (Wait)", "Execute", "Write (CDB)"],
                range=["#f0ad4e", "#5bc0de", "#5cb85c"],
            ),
        ),
        tooltip=["Instruction", "Stage", "Start", "End"],
    ).properties(height=300)

    st.altair_chart(chart, use_container_width=True)


def main() -> None:
    st.set_page_config(page_title="Tomasulo Simulator", layout="wide")
    init_state()
    executer: Executer = st.session_state["executer"]

    render_header(executer)
    with st.container():
        render_instruction_editor()
    with st.container():
        render_latency_config()
    with st.container():
        render_controls(executer)
    with st.container():
        render_current_status(executer)
    with st.container():
        render_tables(executer)
    with st.container():
        render_gantt_chart(executer)

    if st.session_state["is_running"] and not executer.is_finished():
        delay_ms = int(1000 / st.session_state["auto_speed"])
        safe_step(executer)
        time.sleep(delay_ms / 1000.0)
        st.rerun()
    elif st.session_state["is_running"] and executer.is_finished():
        st.session_state["is_running"] = False
        st.rerun()


if __name__ == "__main__":
    main()
