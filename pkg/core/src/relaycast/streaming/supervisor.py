"""
FFmpeg process supervision for Relaycast.

Spawns one encoder process at a time, drains stdout and stderr concurrently
with the exit wait (a full pipe must never stall ffmpeg), and reduces the
exit to a success/failure outcome the retry watchdog can act on.
"""

from __future__ import annotations

import asyncio
import codecs
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import structlog

from ..config import defaults
from .output import log_output_line

_log = structlog.get_logger(__name__)

# 255 is what ffmpeg reports when it exits on a termination signal
CLEAN_EXIT_CODES = frozenset({0, 255})

# ffmpeg ends progress lines with a bare carriage return
LINE_BREAK = re.compile(r"\r\n|\r|\n")
READ_CHUNK_SIZE = 4096
MAX_LINE_LENGTH = 64 * 1024


class OutcomeStatus(Enum):
    """How a supervised process ended."""

    SUCCESS = "success"
    TERMINATED = "terminated"
    FAILURE = "failure"


@dataclass(frozen=True)
class ProcessOutcome:
    """Result of one supervised run."""

    status: OutcomeStatus
    exit_code: int | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is not OutcomeStatus.FAILURE

    @classmethod
    def failure(cls, exit_code: int | None = None, error: str | None = None) -> ProcessOutcome:
        return cls(OutcomeStatus.FAILURE, exit_code, error)


def classify_exit(returncode: int, stop_requested: bool = False) -> ProcessOutcome:
    """
    Map an exit code to an outcome.

    Any exit that follows our own termination request counts as success,
    whatever number the platform reports for it (e.g. -15 on POSIX).
    """
    if stop_requested:
        return ProcessOutcome(OutcomeStatus.TERMINATED, returncode)
    if returncode in CLEAN_EXIT_CODES:
        return ProcessOutcome(OutcomeStatus.SUCCESS, returncode)
    return ProcessOutcome.failure(returncode)


class FFmpegSupervisor:
    """
    Runs ffmpeg commands one at a time.

    run() owns the process for its whole lifetime; terminate() and stop()
    may be called from other tasks to end it early.
    """

    def __init__(self, terminate_timeout: float = defaults.TERMINATE_TIMEOUT_SECONDS):
        """
        Initialize the supervisor.

        Args:
            terminate_timeout: Seconds stop() waits after SIGTERM before SIGKILL
        """
        self.terminate_timeout = terminate_timeout
        self.proc: asyncio.subprocess.Process | None = None
        self._stop_requested = False

    @property
    def pid(self) -> int | None:
        return self.proc.pid if self.proc else None

    @property
    def running(self) -> bool:
        return self.proc is not None and self.proc.returncode is None

    async def run(self, cmd: Sequence[str]) -> ProcessOutcome:
        """
        Spawn ``cmd`` and wait for it to exit.

        Args:
            cmd: Full command, executable first

        Returns:
            ProcessOutcome: spawn errors and unexpected exit codes are failures
        """
        if self.running:
            raise RuntimeError("ffmpeg process already running")

        self._stop_requested = False
        try:
            self.proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            _log.error("ffmpeg_spawn_failed", error=str(e), executable=cmd[0] if cmd else None)
            return ProcessOutcome.failure(error=str(e))

        proc = self.proc
        _log.info("ffmpeg_started", pid=proc.pid)

        # stop() may have been requested while the spawn was in flight
        if self._stop_requested:
            self._signal(proc, kill=False)

        readers = [
            asyncio.create_task(self._drain(proc.stdout, "stdout")),
            asyncio.create_task(self._drain(proc.stderr, "stderr")),
        ]
        try:
            returncode = await proc.wait()
            await asyncio.gather(*readers, return_exceptions=True)
        except asyncio.CancelledError:
            # The process must not outlive its supervision
            if proc.returncode is None:
                _log.warning("ffmpeg_kill", pid=proc.pid, reason="supervision cancelled")
                self._signal(proc, kill=True)
                await asyncio.shield(proc.wait())
            raise
        finally:
            for reader in readers:
                if not reader.done():
                    reader.cancel()
            if self.proc is proc:
                self.proc = None

        outcome = classify_exit(returncode, self._stop_requested)
        _log.info("ffmpeg_exited", pid=proc.pid, exit_code=returncode, outcome=outcome.status.value)
        return outcome

    async def _drain(self, stream: asyncio.StreamReader | None, channel: str) -> None:
        """
        Read ``stream`` in chunks until EOF and classify each line.

        Lines may end in CR, LF or CRLF. A partial line is carried over to
        the next chunk; one that grows past MAX_LINE_LENGTH is flushed as is.
        """
        if stream is None:
            return

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""
        try:
            while True:
                chunk = await stream.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                *lines, pending = LINE_BREAK.split(pending + decoder.decode(chunk))
                if len(pending) > MAX_LINE_LENGTH:
                    lines.append(pending)
                    pending = ""
                for text in lines:
                    if text.strip():
                        log_output_line(_log, text, channel)

            pending += decoder.decode(b"", final=True)
            if pending.strip():
                log_output_line(_log, pending, channel)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            _log.error("ffmpeg_output_read_failed", channel=channel, error=str(e))

    def terminate(self) -> None:
        """Request termination of the current process (or of the one being spawned)."""
        self._stop_requested = True
        if self.proc is not None:
            self._signal(self.proc, kill=False)

    async def stop(self, timeout: float | None = None) -> None:
        """Terminate the current process, escalating to SIGKILL after ``timeout``."""
        self.terminate()
        proc = self.proc
        if proc is None or proc.returncode is not None:
            return

        try:
            grace = self.terminate_timeout if timeout is None else timeout
            await asyncio.wait_for(proc.wait(), timeout=grace)
        except TimeoutError:
            _log.warning("ffmpeg_kill", pid=proc.pid, reason="did not terminate gracefully")
            self._signal(proc, kill=True)
            await proc.wait()

    @staticmethod
    def _signal(proc: asyncio.subprocess.Process, kill: bool) -> None:
        if proc.returncode is not None:
            return
        try:
            if kill:
                proc.kill()
            else:
                proc.terminate()
        except ProcessLookupError:
            pass
