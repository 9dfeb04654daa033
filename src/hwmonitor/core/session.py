"""Subprocess lifecycle for one run of the monitor tool.

A session moves through ``idle -> spawning -> running`` and ends in one of
``completed``, ``failed``, ``timed_out`` or ``killed``. One-shot sessions
collect the whole stdout and parse it once; continuous sessions push stdout
through a ReportFramer and publish every framed item as it completes.
"""

from __future__ import annotations

import asyncio
import codecs
import json
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

from hwmonitor.core.errors import (
    MalformedStreamError,
    MonitorError,
    MonitorTimeoutError,
    PayloadParseError,
    ProcessError,
    SpawnError,
)
from hwmonitor.core.framer import SNIPPET_LENGTH, FrameItem, ReportFramer
from hwmonitor.core.logging import get_logger
from hwmonitor.core.models import HardwareReport
from hwmonitor.core.report import ReportBuilder

LOGGER = get_logger(__name__)

DEFAULT_READ_SIZE = 4096

# How long to wait for a terminated process to exit before giving up on it.
TERMINATE_GRACE_SECONDS = 5.0

Spawner = Callable[..., Awaitable[Any]]
Emit = Callable[[Union[HardwareReport, MonitorError]], None]


class SessionState(str, Enum):
    """Lifecycle state of a ProcessSession."""

    IDLE = "idle"
    SPAWNING = "spawning"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    KILLED = "killed"


class ProcessSession:
    """Owns a single subprocess of the monitor tool."""

    def __init__(
        self,
        executable: Path,
        *,
        spawner: Optional[Spawner] = None,
        read_size: int = DEFAULT_READ_SIZE,
    ):
        """Initialize ProcessSession.

        Args:
            executable: Path to the tool executable.
            spawner: Coroutine function with the signature of
                ``asyncio.create_subprocess_exec``.
            read_size: Maximum bytes read from stdout per chunk.
        """
        self._executable = executable
        self._spawn = spawner or asyncio.create_subprocess_exec
        self._read_size = read_size
        self._state = SessionState.IDLE
        self._process: Optional[Any] = None
        self._stop_requested = False
        self._exit_task: Optional["asyncio.Task[None]"] = None
        self._spawned: Optional[asyncio.Event] = None
        self.returncode: Optional[int] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state in (SessionState.SPAWNING, SessionState.RUNNING)

    @property
    def pid(self) -> Optional[int]:
        return getattr(self._process, "pid", None)

    async def run_once(
        self,
        args: Sequence[str],
        timeout_ms: int,
        builder: ReportBuilder,
    ) -> HardwareReport:
        """Run the tool to completion and parse its single report.

        Raises:
            SpawnError: If the executable could not be started.
            MonitorTimeoutError: If the tool did not exit within timeout_ms.
            ProcessError: If the tool exited with a non-zero code.
            PayloadParseError: If stdout was not a report.
        """
        process = await self._start_process(args)

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            self._state = SessionState.TIMED_OUT
            await self._terminate_and_reap(process)
            raise MonitorTimeoutError(
                f"Hardware monitor 'get_data_once' timed out after {timeout_ms}ms."
            ) from None
        except asyncio.CancelledError:
            self._state = SessionState.KILLED
            await self._terminate_and_reap(process)
            raise

        self.returncode = process.returncode
        output = stdout.decode("utf-8", errors="replace") if stdout else ""
        error_output = stderr.decode("utf-8", errors="replace") if stderr else ""

        if process.returncode != 0:
            self._state = SessionState.FAILED
            raise ProcessError(
                f"Hardware monitor executable exited with code {process.returncode}. "
                f"Stderr: {error_output.strip()}",
                stderr=error_output,
            )

        try:
            report = builder.build(json.loads(output), require_timestamp=False)
        except (TypeError, ValueError, OverflowError, RecursionError) as e:
            self._state = SessionState.FAILED
            raise PayloadParseError(
                "Failed to parse JSON output from hardware monitor.",
                raw_output=output,
                stderr=error_output or None,
                cause=e,
            ) from e

        self._state = SessionState.COMPLETED
        return report

    async def start_continuous(
        self,
        args: Sequence[str],
        framer: ReportFramer,
        emit: Emit,
        on_exit: Optional[Callable[["ProcessSession"], None]] = None,
    ) -> None:
        """Spawn the tool and publish framed output until it exits.

        Returns once the process is running. Reports, malformed payloads,
        stderr lines and an unexpected exit are passed to ``emit`` in the
        order they occur.

        Raises:
            SpawnError: If the executable could not be started.
        """
        process = await self._start_process(args)
        self._exit_task = asyncio.create_task(
            self._supervise(process, framer, emit, on_exit)
        )

    async def stop(self) -> None:
        """Ask the running tool to terminate and wait for it to exit.

        Safe to call repeatedly or when nothing is running. A stop during
        spawning terminates the process as soon as it exists.
        """
        if self._state == SessionState.SPAWNING:
            self._stop_requested = True
            LOGGER.debug("Stop requested while the monitor process is starting.")
            if self._spawned is None:
                self._spawned = asyncio.Event()
            await self._spawned.wait()

        if not self.is_active or self._process is None:
            LOGGER.debug("No active monitoring process to stop.")
            return

        if not self._stop_requested:
            self._stop_requested = True
            self._terminate(self._process)
            LOGGER.debug("Timed monitoring stop signal sent.")

        if self._exit_task is not None:
            await asyncio.shield(self._exit_task)

    async def wait(self) -> Optional[int]:
        """Wait for a continuous session to end and return its exit code."""
        if self._exit_task is not None:
            await asyncio.shield(self._exit_task)
        return self.returncode

    async def _start_process(self, args: Sequence[str]) -> Any:
        if self._state != SessionState.IDLE:
            raise RuntimeError(f"Session already used (state: {self._state.value})")

        self._state = SessionState.SPAWNING
        cmd: List[str] = [str(self._executable), *args]
        LOGGER.debug(f"Running: {' '.join(cmd)}")

        try:
            process = await self._spawn(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            self._state = SessionState.FAILED
            raise SpawnError(
                f"Failed to start hardware monitor executable: {e}", cause=e
            ) from e
        finally:
            if self._spawned is not None:
                self._spawned.set()

        self._process = process
        self._state = SessionState.RUNNING
        if self._stop_requested:
            LOGGER.debug("Stop was requested during spawn, terminating monitor process")
            self._terminate(process)
        return process

    async def _supervise(
        self,
        process: Any,
        framer: ReportFramer,
        emit: Emit,
        on_exit: Optional[Callable[["ProcessSession"], None]],
    ) -> None:
        failure: Optional[Exception] = None
        try:
            pumps = [
                asyncio.ensure_future(self._pump_stdout(process, framer, emit)),
                asyncio.ensure_future(self._pump_stderr(process, emit)),
            ]
            try:
                await asyncio.gather(*pumps)
            except Exception as e:
                failure = e
                LOGGER.warning(f"Reading monitor output failed: {e}")
                self._terminate(process)
                await asyncio.gather(*pumps, return_exceptions=True)
            self.returncode = await process.wait()
        finally:
            self._finish(failure, emit, on_exit)

    def _finish(
        self,
        failure: Optional[Exception],
        emit: Emit,
        on_exit: Optional[Callable[["ProcessSession"], None]],
    ) -> None:
        returncode = self.returncode
        error: Optional[ProcessError] = None
        if self._stop_requested or returncode is None:
            self._state = SessionState.KILLED
        elif failure is not None:
            self._state = SessionState.FAILED
            error = ProcessError(
                f"Hardware monitor output could not be processed: {failure}",
                cause=failure,
            )
        elif returncode != 0:
            self._state = SessionState.FAILED
            error = ProcessError(
                f"Hardware monitor executable (timed) exited unexpectedly with code {returncode}."
            )
        else:
            self._state = SessionState.COMPLETED

        LOGGER.debug(f"Monitor process exited with code {returncode} ({self._state.value})")
        try:
            if error is not None:
                emit(error)
        finally:
            if on_exit is not None:
                on_exit(self)

    async def _pump_stdout(self, process: Any, framer: ReportFramer, emit: Emit) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await process.stdout.read(self._read_size)
            if not chunk:
                break
            for item in self._frame(framer, decoder.decode(chunk)):
                emit(item)

        for item in self._frame(framer, decoder.decode(b"", final=True)):
            emit(item)

    def _frame(self, framer: ReportFramer, text: str) -> List[FrameItem]:
        if not text:
            return []
        try:
            return framer.feed(text)
        except Exception as e:
            LOGGER.warning(f"Framing monitor output failed, resetting buffer: {e}")
            snippet = framer.buffer[:SNIPPET_LENGTH]
            framer.reset()
            return [
                MalformedStreamError(
                    f"Failed to frame monitor output: {e}",
                    raw_output=snippet,
                    cause=e,
                )
            ]

    async def _pump_stderr(self, process: Any, emit: Emit) -> None:
        async for raw_line in process.stderr:
            message = raw_line.decode("utf-8", errors="replace").strip()
            if message:
                emit(
                    ProcessError(
                        f"Error from hardware monitor process: {message}",
                        stderr=message,
                    )
                )

    def _terminate(self, process: Any) -> None:
        if process.returncode is not None:
            return
        try:
            process.terminate()
        except ProcessLookupError:
            LOGGER.debug("Monitor process already exited")

    async def _terminate_and_reap(self, process: Any) -> None:
        self._terminate(process)
        try:
            await asyncio.wait_for(process.wait(), timeout=TERMINATE_GRACE_SECONDS)
        except asyncio.TimeoutError:
            LOGGER.warning(
                f"Monitor process {getattr(process, 'pid', '?')} did not exit after terminate"
            )
