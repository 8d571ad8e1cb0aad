"""Tests for speedracer.core.logging.

Tests verify:
- configure_logging renders JSON with service metadata and bound context
- DEBUG events are suppressed at INFO level
- LogContext binds and restores the outer context (sync and async)
"""

import json

import pytest
import structlog

from speedracer.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


def _json_lines(capsys) -> list[dict]:
    out = capsys.readouterr().out
    return [json.loads(line) for line in out.splitlines() if line.startswith("{")]


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_json_output_has_service_and_level(self, capsys):
        configure_logging(level="INFO", json_format=True, service="pit-wall")
        get_logger("tests").info("race.start", racers=3)

        [line] = _json_lines(capsys)
        assert line["event"] == "race.start"
        assert line["racers"] == 3
        assert line["level"] == "info"
        assert line["service.name"] == "pit-wall"
        assert line["logger_name"] == "tests"
        assert "timestamp" in line

    def test_logger_created_before_configure_uses_later_config(self, capsys):
        early = get_logger("tests.early")
        configure_logging(level="INFO", json_format=True, service="late-config")
        early.info("race.start")

        [line] = _json_lines(capsys)
        assert line["logger_name"] == "tests.early"
        assert line["service.name"] == "late-config"

    def test_debug_suppressed_at_info(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger("tests").debug("race.racer_settled")
        assert _json_lines(capsys) == []

    def test_debug_emitted_at_debug(self, capsys):
        configure_logging(level="DEBUG", json_format=True)
        get_logger("tests").debug("race.racer_settled", finish_order=0)
        [line] = _json_lines(capsys)
        assert line["finish_order"] == 0

    def test_no_timestamp(self, capsys):
        configure_logging(level="INFO", json_format=True, add_timestamp=False)
        get_logger("tests").info("race.complete")
        [line] = _json_lines(capsys)
        assert "timestamp" not in line


class TestContextBinding:
    def test_bound_context_is_rendered(self, capsys):
        configure_logging(level="INFO", json_format=True)
        bind_context(race_id="r-1")
        get_logger("tests").info("race.start")
        [line] = _json_lines(capsys)
        assert line["race_id"] == "r-1"

    def test_unbind_and_clear(self, capsys):
        configure_logging(level="INFO", json_format=True)
        bind_context(race_id="r-1", lap=2)
        unbind_context("lap")
        get_logger("tests").info("one")
        clear_context()
        get_logger("tests").info("two")
        first, second = _json_lines(capsys)
        assert first["race_id"] == "r-1"
        assert "lap" not in first
        assert "race_id" not in second

    def test_log_context_sync(self):
        with LogContext(race_id="r-2"):
            assert structlog.contextvars.get_contextvars()["race_id"] == "r-2"
        assert "race_id" not in structlog.contextvars.get_contextvars()

    @pytest.mark.asyncio
    async def test_log_context_async(self):
        async with LogContext(race_id="r-3"):
            assert structlog.contextvars.get_contextvars()["race_id"] == "r-3"
        assert "race_id" not in structlog.contextvars.get_contextvars()

    def test_nested_log_context_restores_outer_value(self):
        with LogContext(race_id="outer"):
            with LogContext(race_id="inner"):
                assert structlog.contextvars.get_contextvars()["race_id"] == "inner"
            assert structlog.contextvars.get_contextvars()["race_id"] == "outer"
        assert "race_id" not in structlog.contextvars.get_contextvars()

    @pytest.mark.asyncio
    async def test_nested_log_context_async_restores_outer_value(self):
        async with LogContext(race_id="outer"):
            async with LogContext(race_id="inner"):
                assert structlog.contextvars.get_contextvars()["race_id"] == "inner"
            assert structlog.contextvars.get_contextvars()["race_id"] == "outer"
        assert "race_id" not in structlog.contextvars.get_contextvars()
