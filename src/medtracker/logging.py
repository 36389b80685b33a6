"""Structured logging for applications embedding medtracker.

The library itself only emits DEBUG records through module loggers; this
module is the opt-in setup for hosts. Format follows MEDTRACK_LOG_FORMAT:
"json" (default) or "text".
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from .config import Config

LOG_FORMATS = ("json", "text")
EXTRA_PREFIX = "medtracker_"


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects.

    ``medtracker_*`` extras are collected under ``context`` with the prefix
    stripped, e.g. ``extra={"medtracker_dose_id": 3}`` -> ``{"dose_id": 3}``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
        }

        context = {
            key[len(EXTRA_PREFIX):]: value
            for key, value in record.__dict__.items()
            if key.startswith(EXTRA_PREFIX)
        }
        if context:
            log_entry["context"] = context

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(log_entry, default=str)


def setup_logging(
    log_format: str,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Replace the root logger's handlers with one JSON or plaintext handler."""
    if log_format not in LOG_FORMATS:
        allowed = ", ".join(LOG_FORMATS)
        raise ValueError(f"log_format must be one of: {allowed}")

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root.addHandler(handler)
    return handler


def configure_logging(
    config: "Config | None" = None,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Set up logging with the format from ``config`` (or the environment)."""
    if config is None:
        from .config import Config

        config = Config.from_env()
    return setup_logging(config.log_format, level=level, stream=stream)
