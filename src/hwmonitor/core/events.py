"""Event handler abstraction for continuous monitoring.

Continuous sessions publish reports and errors to subscribed handlers:
- Console: print reports as JSON lines for the CLI
- Callback: forward to caller-supplied functions
- Queue: push onto an asyncio.Queue for ``async for``-style consumers
- Null: no-op
"""

from __future__ import annotations

import asyncio
import json
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TextIO, Union

from hwmonitor.core.errors import MonitorError
from hwmonitor.core.models import HardwareReport


class MonitorEventType(str, Enum):
    """Type of monitor event."""

    REPORT = "report"
    ERROR = "error"


@dataclass
class MonitorEvent:
    """A report or an error published by a monitoring session."""

    type: MonitorEventType
    report: Optional[HardwareReport] = None
    error: Optional[MonitorError] = None

    @classmethod
    def wrap(cls, item: Union[HardwareReport, MonitorError]) -> "MonitorEvent":
        if isinstance(item, MonitorError):
            return cls(type=MonitorEventType.ERROR, error=item)
        return cls(type=MonitorEventType.REPORT, report=item)


class MonitorEventHandler(ABC):
    """Abstract base class for monitor event handlers.

    Handlers are called on the event loop thread, in the order events
    were framed.
    """

    @abstractmethod
    def on_report(self, report: HardwareReport) -> None:
        """Handle a framed report.

        Args:
            report: The report that was received.
        """

    @abstractmethod
    def on_error(self, error: MonitorError) -> None:
        """Handle a monitoring error.

        Args:
            error: The error that occurred.
        """

    def dispatch(self, event: MonitorEvent) -> None:
        if event.type == MonitorEventType.REPORT and event.report is not None:
            self.on_report(event.report)
        elif event.error is not None:
            self.on_error(event.error)


class NullEventHandler(MonitorEventHandler):
    """No-op handler."""

    def on_report(self, report: HardwareReport) -> None:
        pass

    def on_error(self, error: MonitorError) -> None:
        pass


class CallbackEventHandler(MonitorEventHandler):
    """Handler that invokes callbacks for monitor events."""

    def __init__(
        self,
        on_report: Optional[Callable[[HardwareReport], None]] = None,
        on_error: Optional[Callable[[MonitorError], None]] = None,
    ):
        """Initialize CallbackEventHandler.

        Args:
            on_report: Callback for reports.
            on_error: Callback for errors.
        """
        self._on_report = on_report
        self._on_error = on_error

    def on_report(self, report: HardwareReport) -> None:
        if self._on_report:
            self._on_report(report)

    def on_error(self, error: MonitorError) -> None:
        if self._on_error:
            self._on_error(error)


class QueueEventHandler(MonitorEventHandler):
    """Publishes events onto an asyncio queue."""

    def __init__(self, queue: Optional["asyncio.Queue[MonitorEvent]"] = None):
        self.queue: "asyncio.Queue[MonitorEvent]" = queue if queue is not None else asyncio.Queue()

    def on_report(self, report: HardwareReport) -> None:
        self.queue.put_nowait(MonitorEvent(type=MonitorEventType.REPORT, report=report))

    def on_error(self, error: MonitorError) -> None:
        self.queue.put_nowait(MonitorEvent(type=MonitorEventType.ERROR, error=error))


class ConsoleEventHandler(MonitorEventHandler):
    """Prints reports as JSON lines and errors as status messages."""

    def __init__(
        self,
        output: Optional[TextIO] = None,
        errors: Optional[TextIO] = None,
        indent: Optional[int] = None,
    ):
        """Initialize ConsoleEventHandler.

        Args:
            output: Stream for report JSON (default: stdout).
            errors: Stream for error messages (default: stderr).
            indent: JSON indentation; None prints one report per line.
        """
        self._output = output
        self._errors = errors
        self._indent = indent

    def on_report(self, report: HardwareReport) -> None:
        output = self._output or sys.stdout
        print(json.dumps(report.to_dict(), indent=self._indent), file=output, flush=True)

    def on_error(self, error: MonitorError) -> None:
        errors = self._errors or sys.stderr
        print(f"[{error.kind}] {error.message}", file=errors, flush=True)
        if error.stderr:
            print(f"  stderr: {error.stderr}", file=errors, flush=True)
