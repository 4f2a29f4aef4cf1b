"""
Functional-unit table: the renaming layer.

Each floating-point slot remembers which reservation station will produce its
next value and, once available, the value itself.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .config import FU_SIZE
from .units import FuId, StationId
from .values import FloatConstant, Value

__all__ = ["FunctionalUnitSlot", "FunctionalUnitTable"]

logger = logging.getLogger(__name__)


@dataclass
class FunctionalUnitSlot:
    fu_id: FuId
    owner: Optional[StationId] = None
    value: Optional[Value] = None

    @property
    def available(self) -> bool:
        return self.value is not None


class FunctionalUnitTable:
    def __init__(self) -> None:
        self.slots: List[FunctionalUnitSlot] = []
        self.clear()

    def clear(self) -> None:
        # Slot Fn starts out holding the constant n.
        self.slots = [
            FunctionalUnitSlot(FuId.from_index(i), value=FloatConstant(float(2 * i)))
            for i in range(FU_SIZE)
        ]

    def slot(self, fu_id: FuId) -> FunctionalUnitSlot:
        return self.slots[fu_id.index]

    def __iter__(self) -> Iterator[FunctionalUnitSlot]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    def mark_busy(self, fu_id: FuId, owner: StationId) -> None:
        # A recycled station tag must not keep answering for its previous slot.
        for other in self.slots:
            if other.owner == owner:
                other.owner = None
        slot = self.slot(fu_id)
        slot.owner = owner
        slot.value = None
        logger.debug("%s renamed to %s", fu_id, owner)

    def try_get_value(self, owner: StationId) -> Optional[Value]:
        for slot in self.slots:
            if slot.owner == owner:
                return slot.value
        return None

    def mark_ready(self, fu_id: FuId, owner: StationId, value: Value) -> bool:
        """Install ``value`` unless ``fu_id`` has since been renamed to another station."""
        slot = self.slot(fu_id)
        if slot.owner != owner:
            logger.debug("%s dropped stale write from %s (owner is %s)", fu_id, owner, slot.owner)
            return False
        slot.value = value
        return True
