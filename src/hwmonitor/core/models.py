from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple


class Category(str, Enum):
    """Hardware categories understood by the monitor tool.

    ``UPTIME`` is synthesized client-side and never forwarded to the tool.
    """

    CPU = "cpu"
    GPU = "gpu"
    MEMORY = "memory"
    MOTHERBOARD = "motherboard"
    STORAGE = "storage"
    NETWORK = "network"
    UPTIME = "uptime"


# (attribute name, wire key) in report order
REPORT_CATEGORIES: Tuple[Tuple[str, str], ...] = (
    ("cpu", "CPU"),
    ("gpu", "GPU"),
    ("memory", "Memory"),
    ("motherboard", "Motherboard"),
    ("storage", "Storage"),
    ("network", "Network"),
)

_RESERVED_KEYS = {"Timestamp", "Uptime", "ElapsedTime"} | {
    wire for _, wire in REPORT_CATEGORIES
}


def _coerce_value(value: Any) -> Optional[float]:
    """Return a finite float or None; sentinels such as NaN become None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    if not math.isfinite(number):
        return None
    return number


def _require_list(value: Any, key: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"'{key}' must be a list, got {type(value).__name__}")
    return value


@dataclass
class Sensor:
    """A single sensor reading."""

    name: str
    value: Optional[float]
    type: str
    unit: str
    identifier: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sensor":
        if not isinstance(data, dict):
            raise TypeError(f"Sensor must be an object, got {type(data).__name__}")
        return cls(
            name=str(data.get("Name", "")),
            value=_coerce_value(data.get("Value")),
            type=str(data.get("Type", "")),
            unit=str(data.get("Unit") or ""),
            identifier=str(data.get("Identifier", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "Value": self.value,
            "Type": self.type,
            "Unit": self.unit,
            "Identifier": self.identifier,
        }


@dataclass
class HardwareItem:
    """A piece of hardware with its sensors and nested sub-hardware."""

    name: str
    hardware_type: str
    sensors: List[Sensor] = field(default_factory=list)
    sub_hardware: List["HardwareItem"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HardwareItem":
        if not isinstance(data, dict):
            raise TypeError(f"Hardware item must be an object, got {type(data).__name__}")
        return cls(
            name=str(data.get("Name", "")),
            hardware_type=str(data.get("HardwareType", "")),
            sensors=[Sensor.from_dict(s) for s in _require_list(data.get("Sensors"), "Sensors")],
            sub_hardware=[
                cls.from_dict(h) for h in _require_list(data.get("SubHardware"), "SubHardware")
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "HardwareType": self.hardware_type,
            "Sensors": [s.to_dict() for s in self.sensors],
            "SubHardware": [h.to_dict() for h in self.sub_hardware],
        }

    def find_sensor(self, name: str, sensor_type: Optional[str] = None) -> Optional[Sensor]:
        """Return the first sensor matching name (and type, if given)."""
        for sensor in self.sensors:
            if sensor.name == name and (sensor_type is None or sensor.type == sensor_type):
                return sensor
        return None


@dataclass
class UptimeInfo:
    """A duration as raw seconds plus a "1d, 2h, 3m, 4s" rendering."""

    raw_seconds: float
    formatted: str

    def to_dict(self) -> Dict[str, Any]:
        return {"rawSeconds": self.raw_seconds, "formatted": self.formatted}


@dataclass
class HardwareReport:
    """One hardware snapshot.

    A category attribute is ``None`` when the tool did not report it and a
    (possibly empty) list otherwise.
    """

    timestamp: str
    cpu: Optional[List[HardwareItem]] = None
    gpu: Optional[List[HardwareItem]] = None
    memory: Optional[List[HardwareItem]] = None
    motherboard: Optional[List[HardwareItem]] = None
    storage: Optional[List[HardwareItem]] = None
    network: Optional[List[HardwareItem]] = None
    uptime: Optional[UptimeInfo] = None
    elapsed_time: Optional[UptimeInfo] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], *, complete: bool = False) -> "HardwareReport":
        """Build a report from the tool's JSON object.

        Args:
            data: Parsed JSON object. Must contain a string ``Timestamp``.
            complete: If True, keep only the known categories and default
                missing ones to empty lists. Otherwise pass the object
                through as delivered, keeping unknown keys in ``extra``.

        Raises:
            ValueError: If the timestamp is missing or not a string.
            TypeError: If a category or item has the wrong shape.
        """
        timestamp = data.get("Timestamp")
        if not isinstance(timestamp, str):
            raise ValueError("Report is missing a string 'Timestamp' field")

        report = cls(timestamp=timestamp)
        for attr, wire in REPORT_CATEGORIES:
            raw = data.get(wire)
            if raw is None and not complete:
                continue
            items = [HardwareItem.from_dict(item) for item in _require_list(raw, wire)]
            setattr(report, attr, items)

        if not complete:
            report.extra = {k: v for k, v in data.items() if k not in _RESERVED_KEYS}
        return report

    def category(self, category: Category | str) -> Optional[List[HardwareItem]]:
        """Return the items reported for a category, or None if absent."""
        name = Category(category).value
        if name == Category.UPTIME.value:
            raise ValueError("uptime is not a hardware category")
        return getattr(self, name)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the tool's wire names; absent categories are omitted."""
        result: Dict[str, Any] = {"Timestamp": self.timestamp}
        for attr, wire in REPORT_CATEGORIES:
            items = getattr(self, attr)
            if items is not None:
                result[wire] = [item.to_dict() for item in items]
        result.update(self.extra)
        if self.uptime is not None:
            result["Uptime"] = self.uptime.to_dict()
        if self.elapsed_time is not None:
            result["ElapsedTime"] = self.elapsed_time.to_dict()
        return result


@dataclass(frozen=True)
class ComponentSelector:
    """Requested categories for a read.

    An empty selector means every category plus uptime.
    """

    components: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, components: Optional[Iterable[str]] = None) -> "ComponentSelector":
        if components is None:
            return cls()
        if isinstance(components, str):
            components = components.split(",")
        normalized = []
        for component in components:
            value = str(getattr(component, "value", component)).strip().lower()
            if value and value not in normalized:
                normalized.append(value)
        return cls(tuple(normalized))

    @property
    def tool_components(self) -> Tuple[str, ...]:
        """Categories forwarded to the tool (uptime stripped)."""
        return tuple(c for c in self.components if c != Category.UPTIME.value)

    @property
    def wants_all_categories(self) -> bool:
        return not self.tool_components

    @property
    def wants_uptime(self) -> bool:
        return not self.components or Category.UPTIME.value in self.components


@dataclass(frozen=True)
class ToolHandle:
    """A provisioned, runnable copy of the external tool."""

    version: str
    version_dir: Path
    executable: Path
    from_fallback: bool = False
