"""Turn parsed tool output into HardwareReport objects.

Category handling: when the caller asked for all categories, the report is
rebuilt from the six known categories with missing ones defaulted to empty
lists. When specific categories were requested, the tool's arrays are passed
through unmodified. Uptime fields are attached when the selector is empty or
names ``uptime``.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from hwmonitor.core.models import ComponentSelector, HardwareReport
from hwmonitor.core.uptime import system_uptime, uptime_info


class ReportBuilder:
    """Builds reports for one selector and one monitoring session."""

    def __init__(
        self,
        selector: ComponentSelector,
        started_at: Optional[float] = None,
        uptime_source: Callable[[], float] = system_uptime,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize ReportBuilder.

        Args:
            selector: Categories requested by the caller.
            started_at: Epoch seconds the session began; elapsed time is
                measured from here. Defaults to now.
            uptime_source: Returns system uptime in seconds.
            clock: Returns the current epoch time in seconds.
        """
        self.selector = selector
        self._clock = clock
        self._uptime_source = uptime_source
        self.started_at = clock() if started_at is None else started_at

    def build(self, data: Dict[str, Any], *, require_timestamp: bool = True) -> HardwareReport:
        """Build a report from one parsed JSON object.

        Args:
            data: Parsed JSON object from the tool.
            require_timestamp: If False, a missing timestamp is replaced
                with the current UTC time instead of failing.

        Raises:
            ValueError: If the object is not a report.
            TypeError: If a category or item has the wrong shape.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        if not require_timestamp and not isinstance(data.get("Timestamp"), str):
            data = dict(data)
            data["Timestamp"] = datetime.now(timezone.utc).isoformat()

        report = HardwareReport.from_dict(data, complete=self.selector.wants_all_categories)
        self.augment(report)
        return report

    def augment(self, report: HardwareReport) -> None:
        """Attach uptime and elapsed-time fields if the selector wants them."""
        if not self.selector.wants_uptime:
            return
        report.uptime = uptime_info(self._uptime_source())
        report.elapsed_time = uptime_info(max(self._clock() - self.started_at, 0.0))
