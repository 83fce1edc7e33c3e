"""Logging for limiter decision events.

The facade emits ``rate_limit.*`` events carrying the caller identity as a
``limiter_key`` extra. LimiterKeyFilter swaps that raw identity for a short
hash before any handler sees the record, and RateLimitJsonFormatter renders
the decision fields as a nested ``rate_limit`` object.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ratekeeper.core.config import LogSettings, settings

LIBRARY_LOGGER = "ratekeeper"

# Structured fields attached to rate_limit.* events, in output order
RATE_LIMIT_FIELDS = ("key_hash", "strategy", "limit", "remaining", "retry_after_s")

_installed_handler: logging.Handler | None = None


def hash_key(key: str) -> str:
    """Hash a limiter key for logging without exposing the identity."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


class LimiterKeyFilter(logging.Filter):
    """Replace a raw ``limiter_key`` extra with its ``key_hash``.

    Installed on the facade's logger, so it runs for every record the
    limiter emits regardless of which handlers the host application uses.
    """

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        raw = record.__dict__.pop("limiter_key", None)
        if raw is not None and getattr(record, "key_hash", None) is None:
            record.key_hash = hash_key(str(raw))
        return True


class RateLimitJsonFormatter(logging.Formatter):
    """Format limiter records as one JSON object per line.

    Decision fields present on the record are grouped under ``rate_limit``;
    records without them (configuration events, third-party logs) carry only
    the envelope.
    """

    def format(self, record: LogRecord) -> str:  # noqa: D401
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }

        fields = {
            name: getattr(record, name) for name in RATE_LIMIT_FIELDS if hasattr(record, name)
        }
        if fields:
            payload["rate_limit"] = fields
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    """Return a stdout handler or a (rotating) file handler per settings."""

    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    file_path = Path(log_settings.file_path or "logs/ratekeeper.log")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if log_settings.max_bytes:
        return RotatingFileHandler(
            file_path,
            maxBytes=log_settings.max_bytes,
            backupCount=log_settings.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(file_path, encoding="utf-8")


def configure_logging(log_settings: LogSettings | None = None) -> logging.Logger:
    """Route the library's ``ratekeeper.*`` loggers to a dedicated handler.

    Only the library logger is touched; the host application's root logger
    is left alone. Calling this again replaces the previously installed
    handler instead of stacking a second one.

    Args:
        log_settings: Optional log settings; defaults to global settings if omitted.

    Returns:
        The configured ``ratekeeper`` logger.
    """

    global _installed_handler

    cfg = log_settings or settings.log
    library_logger = logging.getLogger(LIBRARY_LOGGER)

    if _installed_handler is not None:
        library_logger.removeHandler(_installed_handler)
        _installed_handler.close()

    handler = _build_handler(cfg)
    handler.addFilter(LimiterKeyFilter())
    if cfg.format.lower() == "plain":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(RateLimitJsonFormatter())

    library_logger.addHandler(handler)
    library_logger.setLevel(getattr(logging, cfg.level.upper(), logging.INFO))
    # Avoid double output when the host also logs to the console via root
    library_logger.propagate = False
    _installed_handler = handler
    return library_logger
