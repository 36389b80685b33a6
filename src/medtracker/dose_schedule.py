"""Day schedule of dose entries and the Pending -> Taken transition.

A schedule is an ordered tuple of frozen ``DoseEntry`` values. Nothing here
mutates an entry in place: a transition that changes the schedule returns
a new tuple, so callers holding an older snapshot never observe the change.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, field_validator

from .adherence import daily_percentage

logger = logging.getLogger(__name__)

_TWELVE_HOUR_RE = re.compile(
    r"^\s*(\d{1,2})(?::(\d{2}))?\s*([ap])\.?\s*m\.?\s*$", re.IGNORECASE
)


class DoseStatus(str, Enum):
    PENDING = "pending"
    TAKEN = "taken"


class DuplicateDoseIdError(ValueError):
    """Raised when a schedule contains the same dose id more than once."""

    def __init__(self, duplicate_ids: list[Any]):
        self.duplicate_ids = duplicate_ids
        listed = ", ".join(repr(dose_id) for dose_id in duplicate_ids)
        super().__init__(f"dose ids must be unique within a schedule: {listed}")


def _parse_twelve_hour(value: str) -> time | None:
    match = _TWELVE_HOUR_RE.match(value)
    if match is None:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if not 1 <= hour <= 12 or minute > 59:
        raise ValueError(f"invalid 12-hour time: {value!r}")
    hour %= 12
    if match.group(3).lower() == "p":
        hour += 12
    return time(hour, minute)


class DoseEntry(BaseModel):
    """One scheduled administration of a medication on a given day."""

    model_config = ConfigDict(frozen=True)

    id: StrictInt | StrictStr
    medication_name: str
    dosage: str
    scheduled_time: time
    status: DoseStatus = DoseStatus.PENDING
    instructions: str | None = None

    @field_validator("medication_name")
    @classmethod
    def medication_name_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("medication_name must not be empty")
        return v

    @field_validator("instructions")
    @classmethod
    def normalize_instructions(cls, v: str | None) -> str | None:
        if v is None:
            return None
        cleaned = v.strip()
        return cleaned or None

    @field_validator("scheduled_time", mode="before")
    @classmethod
    def accept_twelve_hour_clock(cls, v: Any) -> Any:
        # "8:00 AM" style values; ISO strings and time objects fall through
        if isinstance(v, str):
            parsed = _parse_twelve_hour(v)
            if parsed is not None:
                return parsed
        return v

    @property
    def is_taken(self) -> bool:
        return self.status is DoseStatus.TAKEN


def build_schedule(entries: Iterable[DoseEntry]) -> tuple[DoseEntry, ...]:
    """Freeze a day's entries into a schedule, enforcing unique ids."""
    schedule = tuple(entries)
    counts = Counter(entry.id for entry in schedule)
    duplicates = [dose_id for dose_id, count in counts.items() if count > 1]
    if duplicates:
        raise DuplicateDoseIdError(duplicates)
    return schedule


def mark_taken(entries: Sequence[DoseEntry], dose_id: int | str) -> Sequence[DoseEntry]:
    """Return a copy of ``entries`` with the dose ``dose_id`` marked taken.

    Entries other than the matched one are passed through as the same
    objects and in the same order; the result is a new tuple. An unknown
    id is a no-op, not an error: ``entries`` comes back as given, since
    callers may be racing against their own view of the schedule. Booleans
    never match an id, even though ``True == 1``.
    """
    updated: list[DoseEntry] = []
    matched = False
    if not isinstance(dose_id, bool):
        for entry in entries:
            if entry.id == dose_id and not matched:
                matched = True
                if not entry.is_taken:
                    entry = entry.model_copy(update={"status": DoseStatus.TAKEN})
            updated.append(entry)

    if not matched:
        logger.debug(
            "mark_taken: no dose with id %r in schedule",
            dose_id,
            extra={"medtracker_dose_id": dose_id},
        )
        return entries
    return tuple(updated)


def count_taken(entries: Iterable[DoseEntry]) -> int:
    return sum(1 for entry in entries if entry.is_taken)


def count_total(entries: Sequence[DoseEntry]) -> int:
    return len(entries)


def count_pending(entries: Iterable[DoseEntry]) -> int:
    return sum(1 for entry in entries if not entry.is_taken)


def today_percentage(entries: Sequence[DoseEntry]) -> int:
    """Share of today's doses already taken, as a whole percentage.

    An empty schedule reports 0 rather than an undefined ratio.
    """
    return daily_percentage(count_taken(entries), count_total(entries))


def pending_entries(entries: Iterable[DoseEntry]) -> tuple[DoseEntry, ...]:
    return tuple(entry for entry in entries if not entry.is_taken)


def next_pending(
    entries: Iterable[DoseEntry],
    after: time | None = None,
) -> DoseEntry | None:
    """Earliest pending dose by scheduled time, optionally at or after ``after``.

    Doses sharing a scheduled time keep schedule order.
    """
    candidates = [
        entry
        for entry in pending_entries(entries)
        if after is None or entry.scheduled_time >= after
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda entry: entry.scheduled_time)
