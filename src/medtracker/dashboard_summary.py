"""Dashboard summary: the figures a home screen shows for one day.

Combines today's schedule, the adherence history and stock levels into one
frozen value. Rendering is left to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import time

from pydantic import BaseModel, ConfigDict

from .adherence import AdherenceSample, rolling_average, trend_delta
from .config import Config
from .dose_schedule import (
    DoseEntry,
    count_pending,
    count_taken,
    count_total,
    next_pending,
    today_percentage,
)
from .inventory import MedicationStock, refills_needed

logger = logging.getLogger(__name__)


class DashboardSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    taken_count: int
    total_count: int
    pending_count: int
    today_percentage: int
    rolling_average: int
    trend_delta: int | None
    next_dose_time: time | None
    next_medication_name: str | None
    refills_needed: int


def build_dashboard_summary(
    entries: Sequence[DoseEntry],
    history: Sequence[AdherenceSample],
    stocks: Iterable[MedicationStock] = (),
    *,
    config: Config | None = None,
    after: time | None = None,
) -> DashboardSummary:
    """Summarise today's schedule against recent history.

    ``history`` is ordered oldest first; the rolling average covers its last
    ``config.trend_window_days`` samples and the trend compares that window
    with the one before it. ``after`` restricts the next-dose lookup to doses
    scheduled at or after the given time of day.
    """
    if config is None:
        config = Config.from_env()

    window = config.trend_window_days
    upcoming = next_pending(entries, after=after)
    summary = DashboardSummary(
        taken_count=count_taken(entries),
        total_count=count_total(entries),
        pending_count=count_pending(entries),
        today_percentage=today_percentage(entries),
        rolling_average=rolling_average(history[-window:]),
        trend_delta=trend_delta(history, window=window),
        next_dose_time=upcoming.scheduled_time if upcoming is not None else None,
        next_medication_name=upcoming.medication_name if upcoming is not None else None,
        refills_needed=refills_needed(stocks, config.low_stock_threshold),
    )
    logger.debug(
        "Dashboard summary: %d/%d taken, %d%% over %d-day window",
        summary.taken_count,
        summary.total_count,
        summary.rolling_average,
        window,
        extra={"medtracker_window_days": window},
    )
    return summary
