"""hwmonitor - provisioning and streaming bridge for the LynxHardwareCLI hardware tool."""

from hwmonitor.core.errors import (
    HwMonitorError,
    MonitorError,
    ProvisioningError,
)
from hwmonitor.core.events import (
    CallbackEventHandler,
    MonitorEvent,
    MonitorEventHandler,
    MonitorEventType,
    QueueEventHandler,
)
from hwmonitor.core.logging import LogLevel
from hwmonitor.core.models import (
    Category,
    HardwareItem,
    HardwareReport,
    Sensor,
    ToolHandle,
    UptimeInfo,
)
from hwmonitor.monitor import HardwareMonitor

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CallbackEventHandler",
    "Category",
    "HardwareItem",
    "HardwareMonitor",
    "HardwareReport",
    "HwMonitorError",
    "LogLevel",
    "MonitorError",
    "MonitorEvent",
    "MonitorEventHandler",
    "MonitorEventType",
    "ProvisioningError",
    "QueueEventHandler",
    "Sensor",
    "ToolHandle",
    "UptimeInfo",
]
