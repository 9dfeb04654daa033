"""Unit tests for monitor event handlers."""

from __future__ import annotations

import asyncio
import io
import json

import pytest

from hwmonitor.core.errors import ProcessError, SpawnError
from hwmonitor.core.events import (
    CallbackEventHandler,
    ConsoleEventHandler,
    MonitorEvent,
    MonitorEventType,
    NullEventHandler,
    QueueEventHandler,
)
from hwmonitor.core.models import HardwareReport


@pytest.fixture
def report() -> HardwareReport:
    return HardwareReport.from_dict({"Timestamp": "2026-01-01T00:00:00Z", "CPU": []})


class TestMonitorEvent:
    """Tests for MonitorEvent.wrap."""

    def test_wrap_report(self, report: HardwareReport) -> None:
        event = MonitorEvent.wrap(report)

        assert event.type == MonitorEventType.REPORT
        assert event.report is report
        assert event.error is None

    def test_wrap_error(self) -> None:
        error = SpawnError("boom")

        event = MonitorEvent.wrap(error)

        assert event.type == MonitorEventType.ERROR
        assert event.error is error


class TestCallbackEventHandler:
    """Tests for CallbackEventHandler."""

    def test_dispatch_routes_by_type(self, report: HardwareReport) -> None:
        reports = []
        errors = []
        handler = CallbackEventHandler(on_report=reports.append, on_error=errors.append)
        error = ProcessError("bad exit")

        handler.dispatch(MonitorEvent.wrap(report))
        handler.dispatch(MonitorEvent.wrap(error))

        assert reports == [report]
        assert errors == [error]

    def test_missing_callbacks_are_ignored(self, report: HardwareReport) -> None:
        handler = CallbackEventHandler()

        handler.dispatch(MonitorEvent.wrap(report))
        handler.dispatch(MonitorEvent.wrap(ProcessError("x")))

    def test_null_handler_accepts_everything(self, report: HardwareReport) -> None:
        handler = NullEventHandler()

        handler.on_report(report)
        handler.on_error(ProcessError("x"))


class TestQueueEventHandler:
    """Tests for QueueEventHandler."""

    @pytest.mark.asyncio
    async def test_events_are_queued_in_order(self, report: HardwareReport) -> None:
        queue: "asyncio.Queue[MonitorEvent]" = asyncio.Queue()
        handler = QueueEventHandler(queue)

        handler.on_report(report)
        handler.on_error(ProcessError("late"))

        first = await queue.get()
        second = await queue.get()
        assert first.report is report
        assert second.type == MonitorEventType.ERROR
        assert second.error.message == "late"


class TestConsoleEventHandler:
    """Tests for ConsoleEventHandler."""

    def test_report_is_one_json_line(self, report: HardwareReport) -> None:
        output = io.StringIO()
        handler = ConsoleEventHandler(output=output)

        handler.on_report(report)

        lines = output.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0]) == {"Timestamp": "2026-01-01T00:00:00Z", "CPU": []}

    def test_error_shows_kind_and_stderr(self) -> None:
        errors = io.StringIO()
        handler = ConsoleEventHandler(errors=errors)

        handler.on_error(ProcessError("tool failed", stderr="no sensors"))

        assert errors.getvalue() == "[process_error] tool failed\n  stderr: no sensors\n"
