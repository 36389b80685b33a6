"""Adherence aggregation: daily percentages and multi-day trends.

All percentages are whole numbers in [0, 100]. Ratios are carried as exact
fractions until a single final rounding step, which rounds half up
(12.5 -> 13, 83.5 -> 84). Nothing here keeps state; every function is a
pure reduction of the history it is given.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from fractions import Fraction
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from .dose_schedule import DoseEntry

logger = logging.getLogger(__name__)


class AdherenceInputError(ValueError):
    """Raised when counts violate 0 <= taken_count <= total_count."""


class AdherenceSample(BaseModel):
    """A single day's aggregate adherence result."""

    model_config = ConfigDict(frozen=True)

    label: str
    percentage: int = Field(ge=0, le=100)

    @field_validator("label")
    @classmethod
    def label_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("label must not be empty")
        return v


def round_half_up(value: Fraction | int | float) -> int:
    """Round to the nearest integer, ties away from zero.

    Floats are converted exactly, so pass a ``Fraction`` when the value is
    the result of a division.
    """
    exact = Fraction(value)
    magnitude = math.floor(abs(exact) + Fraction(1, 2))
    return magnitude if exact >= 0 else -magnitude


def daily_percentage(taken_count: int, total_count: int) -> int:
    if taken_count < 0 or total_count < 0:
        raise AdherenceInputError(
            f"counts must be non-negative (taken={taken_count}, total={total_count})"
        )
    if taken_count > total_count:
        raise AdherenceInputError(
            f"taken_count {taken_count} exceeds total_count {total_count}"
        )
    if total_count == 0:
        return 0
    return round_half_up(Fraction(100 * taken_count, total_count))


def rolling_average(samples: Iterable[AdherenceSample]) -> int:
    """Mean percentage across ``samples``; 0 for an empty history."""
    percentages = [sample.percentage for sample in samples]
    if not percentages:
        logger.debug("rolling_average: empty history, reporting 0")
        return 0
    return round_half_up(Fraction(sum(percentages), len(percentages)))


def sample_from_entries(label: str, entries: Sequence[DoseEntry]) -> AdherenceSample:
    """Reduce one day's dose entries to its adherence sample."""
    from .dose_schedule import today_percentage

    return AdherenceSample(label=label, percentage=today_percentage(entries))


def samples_from_days(days: Mapping[str, Sequence[DoseEntry]]) -> list[AdherenceSample]:
    return [sample_from_entries(label, entries) for label, entries in days.items()]


def trend_delta(samples: Sequence[AdherenceSample], window: int = 7) -> int | None:
    """Change in rolling average between the latest window and the one before.

    Returns ``None`` until the history holds two complete windows.
    """
    if window < 1:
        raise ValueError("window must be at least 1")
    if len(samples) < 2 * window:
        return None
    current = samples[-window:]
    previous = samples[-2 * window:-window]
    return rolling_average(current) - rolling_average(previous)
