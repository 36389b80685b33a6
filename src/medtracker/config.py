import os
from dataclasses import dataclass

from .logging import LOG_FORMATS


@dataclass(frozen=True)
class Config:
    low_stock_threshold: int = 7
    trend_window_days: int = 7
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> "Config":
        low_stock_threshold = int(os.environ.get("MEDTRACK_LOW_STOCK_THRESHOLD", "7"))
        if low_stock_threshold < 0:
            raise RuntimeError("MEDTRACK_LOW_STOCK_THRESHOLD must be non-negative")

        trend_window_days = int(os.environ.get("MEDTRACK_TREND_WINDOW_DAYS", "7"))
        if trend_window_days < 1:
            raise RuntimeError("MEDTRACK_TREND_WINDOW_DAYS must be at least 1")

        log_format = os.environ.get("MEDTRACK_LOG_FORMAT", "json")
        if log_format not in LOG_FORMATS:
            allowed = ", ".join(LOG_FORMATS)
            raise RuntimeError(f"MEDTRACK_LOG_FORMAT must be one of: {allowed}")

        return cls(
            low_stock_threshold=low_stock_threshold,
            trend_window_days=trend_window_days,
            log_format=log_format,
        )
