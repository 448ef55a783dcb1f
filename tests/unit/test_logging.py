"""
Unit Tests for Structured Logging
=================================

Test Coverage
-------------
- LogContext binding and reset (sync and async)
- ContextFilter enrichment
- JSONFormatter output
"""

import json
import logging
import sys

import pytest

from starfall.core.logging.logger import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    clear_log_context,
    get_log_context,
    set_log_context,
)


def _record(msg="hello", **extra):
    record = logging.LogRecord("starfall.tests", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogContext:

    def test_context_bound_and_reset(self):
        clear_log_context()

        with LogContext(player_id="P1", handler="playerLogin", correlation_id="abc"):
            context = get_log_context()
            assert context["player_id"] == "P1"
            assert context["handler"] == "playerLogin"
            assert context["correlation_id"] == "abc"

        assert get_log_context() == {}

    @pytest.mark.asyncio
    async def test_async_context(self):
        clear_log_context()

        async with LogContext(player_id="P2"):
            assert get_log_context()["player_id"] == "P2"

        assert get_log_context() == {}

    def test_generated_correlation_id(self):
        with LogContext(player_id="P1"):
            assert len(get_log_context()["correlation_id"]) == 8

    def test_set_log_context_merges(self):
        clear_log_context()
        set_log_context(player_id="P1")
        set_log_context(operation="on_login")

        assert get_log_context() == {"player_id": "P1", "operation": "on_login"}
        clear_log_context()


class TestContextFilter:

    def test_enriches_record(self):
        record = _record()

        with LogContext(player_id="P1", handler="equipItem", correlation_id="c1"):
            ContextFilter().filter(record)

        assert record.player_id == "P1"
        assert record.handler == "equipItem"
        assert record.correlation_id == "c1"
        assert record.component == "starfall"

    def test_record_operation_kept_without_context_operation(self):
        record = _record(operation="grant_items")

        ContextFilter().filter(record)

        assert record.operation == "grant_items"


class TestJSONFormatter:

    def test_json_output(self):
        record = _record(kills=3)
        with LogContext(player_id="P1", handler="killedEnemyGroup"):
            ContextFilter().filter(record)

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "hello"
        assert payload["level"] == "INFO"
        assert payload["player_id"] == "P1"
        assert payload["handler"] == "killedEnemyGroup"
        assert payload["extra"] == {"kills": 3}

    def test_private_and_standard_attributes_not_in_extra(self):
        """Only caller-supplied extras appear under "extra"."""
        clear_log_context()
        record = _record(_internal=True, level_ups=1)
        ContextFilter().filter(record)

        payload = json.loads(JSONFormatter().format(record))

        assert payload["extra"] == {"level_ups": 1}
        assert "correlation_id" not in payload

    def test_exception_is_formatted(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                "starfall.tests", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        payload = json.loads(JSONFormatter().format(record))

        assert "ValueError: boom" in payload["exception"]
