"""
Slot conflict classification.

Works on the appointments already booked for one (date, service_type) and
decides whether a candidate [start, end) can be written:

    FREE            nothing in the way
    RECLAIMABLE     a cancelled row sits on the exact start; delete it, then insert
    REJECT_EXACT    an active row sits on the exact start
    REJECT_OVERLAP  an active row's interval intersects the candidate

All comparisons are on canonical HH:MM:SS strings, which order lexically the
same way they order on the clock.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Optional

from ...models import CANCELLED
from .time_normalizer import normalize_time


class SlotStatus(str, enum.Enum):
    FREE = "free"
    RECLAIMABLE = "reclaimable"
    REJECT_EXACT = "reject_exact"
    REJECT_OVERLAP = "reject_overlap"


@dataclass(frozen=True)
class SlotOccupant:
    """An existing appointment as seen by the classifier"""

    id: int
    start_time: str
    end_time: str
    status: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip() or "Unknown"

    @property
    def is_active(self) -> bool:
        return self.status != CANCELLED


@dataclass(frozen=True)
class SlotClassification:
    kind: SlotStatus
    existing_id: Optional[int] = None
    occupant_name: Optional[str] = None
    occupant_start: Optional[str] = None
    occupant_end: Optional[str] = None

    @property
    def is_rejected(self) -> bool:
        return self.kind in (SlotStatus.REJECT_EXACT, SlotStatus.REJECT_OVERLAP)

    @property
    def message(self) -> Optional[str]:
        if self.kind == SlotStatus.REJECT_EXACT:
            return (
                f"This time slot is already booked by {self.occupant_name}. "
                "Please choose another time."
            )
        if self.kind == SlotStatus.REJECT_OVERLAP:
            return (
                f"Time slot overlaps with an appointment for {self.occupant_name} "
                f"({self.occupant_start} - {self.occupant_end}). Please choose another time."
            )
        return None


FREE = SlotClassification(SlotStatus.FREE)


def intervals_overlap(start: str, end: str, existing_start: str, existing_end: str) -> bool:
    """
    True when candidate [start, end) intersects existing [existing_start, existing_end).

    The third clause catches a candidate that swallows the existing interval
    whole, which neither endpoint test sees.
    """
    return (
        (existing_start <= start < existing_end)
        or (existing_start < end <= existing_end)
        or (start <= existing_start and existing_end <= end)
    )


def _others(occupants: Iterable[SlotOccupant], exclude_id: Optional[int]) -> list[SlotOccupant]:
    return [o for o in occupants if exclude_id is None or o.id != exclude_id]


def find_exact(
    start: str, occupants: Iterable[SlotOccupant], exclude_id: Optional[int] = None
) -> Optional[SlotOccupant]:
    """Row (any status) starting exactly at start"""
    for occupant in _others(occupants, exclude_id):
        if normalize_time(occupant.start_time) == start:
            return occupant
    return None


def find_overlap(
    start: str, end: str, occupants: Iterable[SlotOccupant], exclude_id: Optional[int] = None
) -> Optional[SlotClassification]:
    """First active row whose interval intersects [start, end), as a rejection"""
    for occupant in _others(occupants, exclude_id):
        if not occupant.is_active:
            continue
        occupant_start = normalize_time(occupant.start_time)
        occupant_end = normalize_time(occupant.end_time)
        if intervals_overlap(start, end, occupant_start, occupant_end):
            return SlotClassification(
                SlotStatus.REJECT_OVERLAP,
                existing_id=occupant.id,
                occupant_name=occupant.display_name,
                occupant_start=occupant_start,
                occupant_end=occupant_end,
            )
    return None


def classify(
    start: str, end: str, occupants: Iterable[SlotOccupant], exclude_id: Optional[int] = None
) -> SlotClassification:
    """
    Classify a candidate slot against the rows booked on its date and service type.

    start/end must already be canonical. occupants must be limited to the
    candidate's (date, service_type) and include cancelled rows.
    """
    occupants = list(occupants)

    exact = find_exact(start, occupants, exclude_id)
    if exact is not None:
        if exact.is_active:
            return SlotClassification(
                SlotStatus.REJECT_EXACT,
                existing_id=exact.id,
                occupant_name=exact.display_name,
                occupant_start=normalize_time(exact.start_time),
                occupant_end=normalize_time(exact.end_time),
            )
        reclaim = SlotClassification(SlotStatus.RECLAIMABLE, existing_id=exact.id)
    else:
        reclaim = None

    # The cancelled row being reclaimed is inactive, so it never shows up here
    overlap = find_overlap(start, end, occupants, exclude_id)
    if overlap is not None:
        return overlap

    return reclaim or FREE
