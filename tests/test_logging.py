"""Tests for limiter event logging: key hashing and JSON rendering."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from ratekeeper.adapters.clock import ManualClock
from ratekeeper.core import logging as limiter_logging
from ratekeeper.core.config import LogSettings
from ratekeeper.core.logging import (
    LIBRARY_LOGGER,
    LimiterKeyFilter,
    RateLimitJsonFormatter,
    configure_logging,
    hash_key,
)
from ratekeeper.services.rate_limiter import RateLimiter


@pytest.fixture
def restore_library_logger():
    """Undo configure_logging() so other tests keep propagating to caplog."""
    library_logger = logging.getLogger(LIBRARY_LOGGER)
    handlers = library_logger.handlers[:]
    level, propagate = library_logger.level, library_logger.propagate
    yield library_logger
    for handler in library_logger.handlers:
        if handler not in handlers:
            handler.close()
    library_logger.handlers[:] = handlers
    library_logger.setLevel(level)
    library_logger.propagate = propagate
    limiter_logging._installed_handler = None


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="ratekeeper.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="rate_limit.exceeded",
        args=None,
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_hash_key_is_stable_and_opaque():
    assert hash_key("user-1") == hash_key("user-1")
    assert hash_key("user-1") != hash_key("user-2")
    assert len(hash_key("user-1")) == 16
    assert "user-1" not in hash_key("user-1")


def test_key_filter_replaces_raw_key_with_hash():
    record = _record(limiter_key="alice@example.com")

    assert LimiterKeyFilter().filter(record) is True

    assert "limiter_key" not in record.__dict__
    assert record.key_hash == hash_key("alice@example.com")


def test_key_filter_leaves_records_without_keys_untouched():
    record = _record(strategy="fixed_window")

    LimiterKeyFilter().filter(record)

    assert not hasattr(record, "key_hash")
    assert record.strategy == "fixed_window"


def test_json_formatter_groups_decision_fields():
    record = _record(
        key_hash="abc123",
        strategy="token_bucket",
        limit=3,
        remaining=0,
        retry_after_s=2,
        unrelated="ignored",
    )

    payload = json.loads(RateLimitJsonFormatter().format(record))

    assert payload["event"] == "rate_limit.exceeded"
    assert payload["level"] == "warning"
    assert payload["logger"] == "ratekeeper.test"
    assert payload["rate_limit"] == {
        "key_hash": "abc123",
        "strategy": "token_bucket",
        "limit": 3,
        "remaining": 0,
        "retry_after_s": 2,
    }
    assert "unrelated" not in payload
    assert "timestamp" in payload


def test_json_formatter_omits_rate_limit_block_for_plain_events():
    payload = json.loads(RateLimitJsonFormatter().format(_record()))

    assert "rate_limit" not in payload


def test_facade_records_carry_hash_not_raw_key(caplog: pytest.LogCaptureFixture):
    limiter = RateLimiter.build(
        "token_bucket", clock=ManualClock(), capacity=0, refill_rate=1
    )

    with caplog.at_level(logging.WARNING, logger="ratekeeper.services.rate_limiter"):
        limiter.allow("sk-live-secret")

    record = next(r for r in caplog.records if r.getMessage() == "rate_limit.exceeded")
    assert record.key_hash == hash_key("sk-live-secret")
    assert not hasattr(record, "limiter_key")


def test_configured_json_output_for_a_denied_request(restore_library_logger, capsys):
    configure_logging(LogSettings(level="INFO", format="json", output="stdout"))
    limiter = RateLimiter.build(
        "fixed_window", clock=ManualClock(start=10.0), max_requests=1, window_seconds=60
    )

    limiter.allow("alice@example.com")
    limiter.allow("alice@example.com")

    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    assert "alice@example.com" not in "\n".join(lines)
    payload = json.loads(lines[-1])
    assert payload["event"] == "rate_limit.exceeded"
    assert payload["rate_limit"] == {
        "key_hash": hash_key("alice@example.com"),
        "strategy": "fixed_window",
        "limit": 1,
        "remaining": 0,
        "retry_after_s": 50,
    }


def test_configure_logging_replaces_previous_handler(restore_library_logger):
    before = len(restore_library_logger.handlers)

    configure_logging(LogSettings(output="stdout"))
    configure_logging(LogSettings(output="stdout"))

    assert len(restore_library_logger.handlers) == before + 1
    assert restore_library_logger.propagate is False


def test_configure_logging_plain_file_output(restore_library_logger, tmp_path: Path):
    log_file = tmp_path / "logs" / "limiter.log"
    configure_logging(
        LogSettings(level="INFO", format="plain", output="file", file_path=str(log_file))
    )
    limiter = RateLimiter.build(
        "sliding_window_log", clock=ManualClock(), max_requests=1, window_seconds=5
    )

    limiter.reset("bob")
    for handler in restore_library_logger.handlers:
        handler.flush()

    contents = log_file.read_text(encoding="utf-8")
    assert "rate_limit.reset" in contents
    assert "bob" not in contents
