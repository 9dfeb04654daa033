"""Incremental framing of the monitor tool's timed-mode stdout.

In timed mode the tool writes a banner line, then JSON objects, each
optionally followed by separator text such as "next update" notices. Chunks
from the pipe can split an object anywhere, or carry several objects at once.

``ReportFramer.feed()`` appends a chunk and returns, in arrival order, every
report or error that the chunk completed. Between calls the buffer holds
either nothing or the beginning of exactly one unfinished object; the scan
position inside that object is remembered so a chunk is only scanned once.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import List, Optional, Union

from hwmonitor.core.errors import MalformedStreamError
from hwmonitor.core.logging import get_logger
from hwmonitor.core.models import HardwareReport
from hwmonitor.core.report import ReportBuilder

LOGGER = get_logger(__name__)

OPEN_BRACE = "{"
CLOSE_BRACE = "}"

# Give up looking for a banner line once this much text arrived without
# any object start.
DEFAULT_NOISE_LIMIT = 1024

SNIPPET_LENGTH = 100

FrameItem = Union[HardwareReport, MalformedStreamError]


class _UnbalancedBraces(Exception):
    pass


@dataclass
class _ScanState:
    """Progress through the object at the head of the buffer."""

    position: int = 0
    depth: int = 0
    in_string: bool = False
    escaped: bool = False


def _terminator_length(text: str, index: int) -> int:
    if text.startswith("\r\n", index):
        return 2
    if text.startswith("\n", index):
        return 1
    return 0


class ReportFramer:
    """Carves JSON report objects out of a chunked text stream.

    One framer belongs to one session; it is not shared.
    """

    def __init__(self, builder: ReportBuilder, noise_limit: int = DEFAULT_NOISE_LIMIT):
        """Initialize ReportFramer.

        Args:
            builder: Turns each parsed object into a HardwareReport.
            noise_limit: Buffer size after which a missing banner line is
                no longer waited for.
        """
        self._builder = builder
        self._noise_limit = noise_limit
        self._buffer = ""
        self._noise_skipped = False
        self._scan = _ScanState()

    @property
    def buffer(self) -> str:
        """Text received but not yet framed."""
        return self._buffer

    @property
    def noise_skipped(self) -> bool:
        return self._noise_skipped

    def reset(self) -> None:
        """Drop buffered text and expect a banner line again."""
        self._buffer = ""
        self._noise_skipped = False
        self._scan = _ScanState()

    def feed(self, chunk: str) -> List[FrameItem]:
        """Consume one chunk and return the reports and errors it completed."""
        items: List[FrameItem] = []
        if not chunk:
            return items

        self._buffer += chunk

        if not self._noise_skipped and not self._skip_leading_noise():
            return items

        while self._buffer:
            if not self._buffer.startswith(OPEN_BRACE):
                try:
                    found = self._discard_separator()
                except _UnbalancedBraces:
                    items.append(self._corrupted())
                    return items
                if not found:
                    break

            try:
                end = self._find_object_end()
            except _UnbalancedBraces:
                items.append(self._corrupted())
                return items
            if end is None:
                break

            candidate = self._buffer[: end + 1]
            consumed = end + 1 + _terminator_length(self._buffer, end + 1)
            self._consume(consumed)
            items.append(self._decode(candidate))

        return items

    def _skip_leading_noise(self) -> bool:
        """Drop the banner line the tool prints before its first object.

        Returns True once the stream is known to be past any banner.
        """
        stripped = self._buffer.lstrip()
        if stripped.startswith(OPEN_BRACE):
            self._noise_skipped = True
            return True

        newline = self._buffer.find("\n")
        if newline != -1:
            first_line = self._buffer[:newline].rstrip("\r").lstrip()
            if not first_line.startswith(OPEN_BRACE):
                LOGGER.debug(f"Skipping banner line: {first_line[:SNIPPET_LENGTH]!r}")
                self._buffer = self._buffer[newline + 1 :]
            self._noise_skipped = True
            return True

        if len(self._buffer) > self._noise_limit and OPEN_BRACE not in self._buffer:
            LOGGER.debug("No banner line terminator found, treating stream as payload")
            self._noise_skipped = True
            return True

        return False

    def _discard_separator(self) -> bool:
        """Drop text before the next object start.

        Returns False if the buffer holds no object start yet (the
        separator text is discarded). Raises _UnbalancedBraces when a
        closing brace appears outside of any object.
        """
        start = self._buffer.find(OPEN_BRACE)
        separator = self._buffer if start == -1 else self._buffer[:start]
        if CLOSE_BRACE in separator:
            raise _UnbalancedBraces()

        if separator.strip():
            LOGGER.debug(f"Discarding separator text: {separator.strip()[:SNIPPET_LENGTH]!r}")
        if start == -1:
            self._consume(len(self._buffer))
            return False
        self._consume(start)
        return True

    def _find_object_end(self) -> Optional[int]:
        """Index of the brace closing the head object, or None if incomplete."""
        scan = self._scan
        buffer = self._buffer
        index = scan.position
        length = len(buffer)

        while index < length:
            char = buffer[index]
            if scan.in_string:
                if scan.escaped:
                    scan.escaped = False
                elif char == "\\":
                    scan.escaped = True
                elif char == '"':
                    scan.in_string = False
            elif char == '"':
                scan.in_string = True
            elif char == OPEN_BRACE:
                scan.depth += 1
            elif char == CLOSE_BRACE:
                scan.depth -= 1
                if scan.depth == 0:
                    return index
                if scan.depth < 0:
                    raise _UnbalancedBraces()
            index += 1

        scan.position = index
        return None

    def _consume(self, count: int) -> None:
        self._buffer = self._buffer[count:]
        self._scan = _ScanState()

    def _corrupted(self) -> MalformedStreamError:
        snippet = self._buffer[:SNIPPET_LENGTH]
        LOGGER.warning("Unbalanced braces in monitor output, resetting buffer")
        self.reset()
        return MalformedStreamError(
            "JSON braces unbalanced (too many closing). Resetting buffer.",
            raw_output=snippet,
        )

    def _decode(self, candidate: str) -> FrameItem:
        snippet = candidate[:SNIPPET_LENGTH]
        try:
            data = json.loads(candidate)
        except (ValueError, RecursionError) as e:
            return MalformedStreamError(
                f"Failed to parse JSON (timed). Snippet: {snippet}",
                raw_output=candidate,
                cause=e,
            )

        if not isinstance(data, dict) or not isinstance(data.get("Timestamp"), str):
            return MalformedStreamError(
                f"Parsed JSON is not a valid HardwareReport. Snippet: {snippet}",
                raw_output=candidate,
            )

        try:
            return self._builder.build(data)
        except (TypeError, ValueError, OverflowError, RecursionError) as e:
            return MalformedStreamError(
                f"Report has an unexpected structure: {e}. Snippet: {snippet}",
                raw_output=candidate,
                cause=e,
            )
