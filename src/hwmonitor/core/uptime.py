"""Uptime and elapsed-time helpers."""

from __future__ import annotations

import time

import psutil

from hwmonitor.core.models import UptimeInfo


def format_seconds(total_seconds: float) -> str:
    """Format seconds as e.g. "1d, 2h, 3m, 4s".

    Zero-valued units are omitted; seconds are always shown when every
    larger unit is zero.
    """
    remaining = max(int(total_seconds), 0)
    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or not parts:
        parts.append(f"{seconds}s")
    return ", ".join(parts)


def uptime_info(total_seconds: float) -> UptimeInfo:
    return UptimeInfo(raw_seconds=total_seconds, formatted=format_seconds(total_seconds))


def system_uptime() -> float:
    """Seconds since the machine booted."""
    return max(time.time() - psutil.boot_time(), 0.0)
