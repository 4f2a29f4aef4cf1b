"""
Machine parameters: latencies, station capacities and the cycle ceiling.

The defaults reproduce the classic textbook machine. Override them by building
a ``SimulatorConfig`` and handing it to the ``Executer``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional, Union

from .isa import Opcode, StationKind

__all__ = [
    "DEFAULT_LATENCIES",
    "DEFAULT_STATION_COUNTS",
    "DEFAULT_MAX_CYCLES",
    "FU_SIZE",
    "SimulatorConfig",
]

DEFAULT_LATENCIES: Dict[Opcode, int] = {
    Opcode.ADDD: 2,
    Opcode.SUBD: 2,
    Opcode.LD: 2,
    Opcode.SD: 2,
    Opcode.MULTD: 10,
    Opcode.DIVD: 20,
}

DEFAULT_STATION_COUNTS: Dict[StationKind, int] = {
    StationKind.ADD: 3,
    StationKind.MULT: 2,
    StationKind.LOAD: 3,
    StationKind.STORE: 3,
}

# Number of floating-point slots, addressed F0, F2, ..., F30.
FU_SIZE = 16

DEFAULT_MAX_CYCLES = 1000


@dataclass
class SimulatorConfig:
    latencies: Dict[Opcode, int] = field(default_factory=lambda: dict(DEFAULT_LATENCIES))
    station_counts: Dict[StationKind, int] = field(
        default_factory=lambda: dict(DEFAULT_STATION_COUNTS)
    )
    max_cycles: int = DEFAULT_MAX_CYCLES
    fold_constants: bool = False

    def __post_init__(self) -> None:
        self.latencies = {
            **DEFAULT_LATENCIES,
            **_normalise(self.latencies, _opcode_key, "latency"),
        }
        self.station_counts = {
            **DEFAULT_STATION_COUNTS,
            **_normalise(self.station_counts, _station_kind_key, "station count"),
        }
        for op, latency in self.latencies.items():
            if latency < 1:
                raise ValueError(f"Latency for {op.value} must be positive, got {latency}")
        for kind, count in self.station_counts.items():
            if count < 1:
                raise ValueError(f"{kind.label} needs at least one station, got {count}")
        if self.max_cycles < 1:
            raise ValueError(f"max_cycles must be positive, got {self.max_cycles}")

    def latency_for(self, op: Opcode) -> int:
        return self.latencies[op]

    def with_latencies(
        self, overrides: Optional[Mapping[Union[Opcode, str], int]] = None, **by_name: int
    ) -> "SimulatorConfig":
        """Return a copy with some latencies replaced. Names are opcode mnemonics."""
        latencies = dict(self.latencies)
        latencies.update(_normalise(overrides or {}, _opcode_key, "latency"))
        for name, latency in by_name.items():
            latencies[Opcode.parse(name)] = latency
        return replace(self, latencies=latencies)


def _opcode_key(key: Union[Opcode, str]) -> Opcode:
    if isinstance(key, Opcode):
        return key
    if isinstance(key, str):
        return Opcode.parse(key.strip())
    raise ValueError(f"latency key must be an opcode, got {key!r}")


def _station_kind_key(key: Union[StationKind, str]) -> StationKind:
    if isinstance(key, StationKind):
        return key
    if isinstance(key, str):
        # Accept the member name ("MULT") or its label ("Mult").
        text = key.strip()
        for kind in StationKind:
            if text.upper() in (kind.name, kind.value.upper()):
                return kind
    raise ValueError(f"unknown station kind {key!r}")


def _normalise(values: Mapping, to_key, what: str) -> dict:
    normalised = {}
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{what} for {key!r} must be an integer, got {value!r}")
        normalised[to_key(key)] = value
    return normalised
