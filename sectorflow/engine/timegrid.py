"""
Time grid - aligned 15-minute slots over the prediction horizon.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

SLOT_MINUTES = 15
SLOT = timedelta(minutes=SLOT_MINUTES)


@dataclass(frozen=True)
class TimeSlot:
    """Half-open interval [start, end)."""
    start: datetime

    @property
    def end(self) -> datetime:
        return self.start + SLOT

    @property
    def label(self) -> str:
        """Zulu label, e.g. '14:45'."""
        return self.start.strftime('%H:%M')


def round_up_to_slot(instant: datetime) -> datetime:
    """Next :00/:15/:30/:45 boundary, or the instant itself if already on one."""
    floor = instant.replace(
        minute=(instant.minute // SLOT_MINUTES) * SLOT_MINUTES,
        second=0,
        microsecond=0,
    )
    if floor == instant:
        return instant
    return floor + SLOT


def generate_slots(start: datetime, horizon_hours: int) -> List[TimeSlot]:
    """Exactly horizon_hours * 4 contiguous slots beginning at the rounded start."""
    first = round_up_to_slot(start)
    count = int(horizon_hours * 60 // SLOT_MINUTES)
    return [TimeSlot(first + i * SLOT) for i in range(count)]


def bucket_index(instant: datetime, slots: Sequence[TimeSlot]) -> Optional[int]:
    """Index of the slot containing instant, or None if outside the grid."""
    if not slots or instant < slots[0].start:
        return None
    index = int((instant - slots[0].start) // SLOT)
    if index >= len(slots):
        return None
    return index
