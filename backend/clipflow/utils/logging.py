from __future__ import annotations

import logging
import sys

from clipflow.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord has; anything else arrived through ``extra=``
_RECORD_ATTRS = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class ExtraFormatter(logging.Formatter):
    """Standard format with ``extra=`` fields appended as ``key=value``."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if not extras:
            return line
        return line + " | " + " ".join(f"{k}={v}" for k, v in sorted(extras.items()))


def setup_logging() -> None:
    """Configure stdout logging for the API and the taxonomy engine."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ExtraFormatter(LOG_FORMAT))
    logging.basicConfig(level=level, handlers=[handler])

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    # supabase talks through httpx; its per-request lines drown workspace logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("clipflow").setLevel(level)

    logging.getLogger(__name__).info("Logging configured", extra={"level": settings.log_level})


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)
