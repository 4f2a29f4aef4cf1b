"""
Exceptions raised by the Tomasulo simulator.
"""
from __future__ import annotations

from typing import List, Optional

__all__ = [
    "TomasuloError",
    "ParseError",
    "InvariantViolation",
    "SimulationDivergence",
]


class TomasuloError(Exception):
    """Base class for every simulator failure."""


class ParseError(TomasuloError, ValueError):
    """Malformed instruction text. Raised before any cycle is simulated."""

    def __init__(self, message: str, line_no: Optional[int] = None, line: Optional[str] = None) -> None:
        self.line_no = line_no
        self.line = line
        if line_no is not None:
            message = f"Line {line_no}: {message}"
        super().__init__(message)


class InvariantViolation(TomasuloError):
    """The engine reached a state that a well-formed program can never produce."""


class SimulationDivergence(TomasuloError):
    """The cycle ceiling was hit before every instruction wrote back."""

    def __init__(self, message: str, cycle: int, trace: Optional[List] = None) -> None:
        super().__init__(message)
        self.cycle = cycle
        self.trace = list(trace or [])
