"""Shared fixtures: a stand-in for the external monitor tool."""

from __future__ import annotations

import asyncio
import functools
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Iterator

import pytest

from hwmonitor.core.logging import ROOT_LOGGER_NAME

FAKE_TOOL_SOURCE = '''
import json
import os
import sys
import time

WIRE = {
    "cpu": "CPU",
    "gpu": "GPU",
    "memory": "Memory",
    "motherboard": "Motherboard",
    "storage": "Storage",
    "network": "Network",
}

args = sys.argv[1:]


def option(name, default=None):
    if name in args:
        return args[args.index(name) + 1]
    return default


def report(n):
    components = option("--components")
    categories = components.split(",") if components else list(WIRE)
    data = {"Timestamp": "2026-01-01T00:00:%02dZ" % n}
    for category in categories:
        data[WIRE[category]] = [{
            "Name": "%s-%d" % (category, n),
            "HardwareType": category,
            "Sensors": [{
                "Name": "Load",
                "Value": 12.5,
                "Type": "Load",
                "Unit": "%",
                "Identifier": "/%s/0/load" % category,
            }],
            "SubHardware": [],
        }]
    return data


behavior = os.environ.get("FAKE_TOOL_BEHAVIOR", "ok")
if behavior == "sleep":
    time.sleep(30)
if behavior == "fail":
    sys.stderr.write("sensor driver unavailable\\n")
    sys.exit(3)
if behavior == "garbage":
    print("this is not json")
    sys.exit(0)
if behavior == "deep":
    print('{"Timestamp": "t0", "CPU": ' + "[" * 100000 + "]" * 100000 + "}")
    sys.exit(0)

if option("--mode") == "once":
    print(json.dumps(report(0)))
    sys.exit(0)

interval = int(option("--interval", "10")) / 1000.0
count = int(os.environ.get("FAKE_TOOL_COUNT", "3"))
sys.stdout.write("Starting timed monitoring...\\n")
sys.stdout.flush()
if behavior == "stderr":
    sys.stderr.write("fan sensor not found\\n")
    sys.stderr.flush()

n = 0
while behavior == "forever" or n < count:
    sys.stdout.write(json.dumps(report(n)) + "\\n")
    sys.stdout.write("--- next update in %dms ---\\n" % int(interval * 1000))
    sys.stdout.flush()
    n += 1
    time.sleep(interval)

sys.exit(int(os.environ.get("FAKE_TOOL_EXIT", "0")))
'''


@pytest.fixture
def fake_tool(tmp_path: Path) -> Path:
    """Write the stand-in tool script and return its path."""
    script = tmp_path / "fake_tool.py"
    script.write_text(f"#!{sys.executable}\n{FAKE_TOOL_SOURCE}", encoding="utf-8")
    script.chmod(0o755)
    return script


@pytest.fixture
def python_spawner() -> Callable[..., Any]:
    """Spawner that runs the executable path with the current interpreter."""
    return functools.partial(asyncio.create_subprocess_exec, sys.executable)


@pytest.fixture(autouse=True)
def restore_package_logger() -> Iterator[None]:
    """Undo handler and level changes made through configure_logging()."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
