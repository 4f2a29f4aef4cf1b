"""
Built-in sample programs.
"""
from __future__ import annotations

from typing import Dict, List

from .instruction import Instruction, parse_program

__all__ = ["SAMPLE_PROGRAMS", "SAMPLE_PROGRAM_TEXT", "build_sample_program"]

SAMPLE_PROGRAM_TEXT = """\
# Classic Tomasulo floating-point sequence
LD F6 34+ R2
LD F2 45+ R3
MULTD F0 F2 F4
SUBD F8 F6 F2
DIVD F10 F0 F6
ADDD F6 F8 F2
"""

LOOP_BODY_PROGRAM_TEXT = """\
# Two stores that depend on long-latency products
LD F2 0 R2
LD F4 0 R3
DIVD F0 F4 F2
MULTD F6 F0 F2
ADDD F0 F4 F2
SD F6 0 R3
MULTD F6 F0 F2
SD F6 0 R1
"""

SAMPLE_PROGRAMS: Dict[int, str] = {
    1: SAMPLE_PROGRAM_TEXT,
    2: LOOP_BODY_PROGRAM_TEXT,
}


def build_sample_program(number: int = 1) -> List[Instruction]:
    try:
        text = SAMPLE_PROGRAMS[number]
    except KeyError:
        raise ValueError(f"No sample program {number}; choose from {sorted(SAMPLE_PROGRAMS)}") from None
    return parse_program(text)
