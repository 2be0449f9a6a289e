"""
Relay engine (orchestrator).

Pattern: Supervisor loop

StreamEngine keeps one destination fed from a SourceQueue. It plays one
source at a time through FFmpegSupervisor, lets RetryWatchdog decide what
happens after a failure, and falls back to the placeholder whenever the
queue has nothing to offer.

Key Responsibilities:
- Lifecycle: start, stop, restart
- Queue mutation on behalf of control surfaces (add/remove/clear)
- Configuration updates that apply from the next spawn on
- Status and health reporting

Boundaries:
- Destination specifics come only from the injected SinkAdapter
- Never runs more than one ffmpeg process at a time
- Process failures never escape; only configuration and startup errors do
"""

from __future__ import annotations

import asyncio
import pathlib
import time
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from ..catalog.source_catalog import SourceCatalog
from ..config import defaults
from ..infra.exceptions import CatalogError, PlaceholderMissingError
from ..infra.logging import get_logger
from ..platforms.base import SinkAdapter
from ..streaming.ffmpeg_cmd import build_cmd, redact_cmd
from ..streaming.source_queue import SourceQueue
from ..streaming.sources import Source
from ..streaming.supervisor import FFmpegSupervisor, ProcessOutcome
from ..streaming.watchdog import RetryWatchdog, derive_health
from .config import EngineConfig, resolve_config
from .status import EngineState, EngineStatus, format_uptime

Sleep = Callable[[float], Awaitable[None]]


class StreamEngine:
    """
    Feeds a queue of sources into ffmpeg, one at a time, until stopped.

    start() returns once playback has been scheduled; wait() blocks until
    the engine stops (explicitly or after the retry budget is spent).
    """

    def __init__(
        self,
        sink: SinkAdapter,
        config: Mapping[str, Any] | EngineConfig | None = None,
        *,
        placeholder_path: str = defaults.PLACEHOLDER_PATH,
        loop: bool = False,
        ffmpeg_bin: str = defaults.FFMPEG_BIN,
        max_retries: int = defaults.MAX_RETRY_ATTEMPTS,
        retry_base_delay: float = defaults.RETRY_BASE_DELAY,
        advance_delay: float = defaults.ADVANCE_DELAY,
        stop_grace: float = defaults.STOP_GRACE_SECONDS,
        restart_pause: float = defaults.RESTART_PAUSE_SECONDS,
        supervisor: FFmpegSupervisor | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialize the engine.

        Args:
            sink: Destination adapter supplying sink arguments and display name
            config: Partial encode settings; missing keys use defaults
            placeholder_path: Media played when the queue yields nothing
            loop: Refill from the persistent queue when a cycle is exhausted
            ffmpeg_bin: ffmpeg executable
            max_retries: Consecutive failures tolerated before a forced stop
            retry_base_delay: Backoff seconds per consecutive failure
            advance_delay: Pause between sources (0 disables it)
            stop_grace: Seconds stop() waits for ffmpeg and the playback task
            restart_pause: Pause between stop and start in restart()
            supervisor: Process supervisor (a fresh FFmpegSupervisor by default)
            sleep: Awaitable sleep used for all timed waits

        Raises:
            ConfigurationError: If ``config`` is invalid
        """
        self._config = resolve_config(config)
        self._sink = sink
        self._queue = SourceQueue(placeholder_path, loop=loop)
        self._watchdog = RetryWatchdog(max_retries=max_retries, base_delay=retry_base_delay)
        self._supervisor = supervisor or FFmpegSupervisor()
        self._ffmpeg_bin = ffmpeg_bin
        self._advance_delay = advance_delay
        self._stop_grace = stop_grace
        self._restart_pause = restart_pause
        self._sleep = sleep

        self._active = False
        self._state = EngineState.IDLE
        self._current_source: str | None = None
        self._started_at: datetime | None = None
        self._started_monotonic = 0.0
        self._task: asyncio.Task[None] | None = None
        self._log = get_logger(__name__, platform=sink.display_name())

    # Properties ----------------------------------------------------------------
    @property
    def platform(self) -> str:
        return self._sink.display_name()

    @property
    def active(self) -> bool:
        return self._active

    @property
    def loop(self) -> bool:
        return self._queue.loop

    @property
    def placeholder_path(self) -> str:
        return self._queue.placeholder

    # Queue ---------------------------------------------------------------------
    def set_loop(self, loop: bool) -> None:
        self._queue.loop = loop
        self._log.info("loop_mode", enabled=loop)

    def add_to_queue(self, *locators: str) -> int:
        """Add sources; duplicates and missing files are skipped. Returns how many were added."""
        return len(self._queue.add(*locators))

    def remove_from_queue(self, index: int) -> bool:
        return self._queue.remove(index)

    def clear_queue(self) -> None:
        self._queue.clear()

    def queue_snapshot(self) -> tuple[Source, ...]:
        return self._queue.items()

    def load_catalog(self, catalog: SourceCatalog) -> int:
        """
        Queue every source from a catalog, in the catalog's shuffled order.

        Returns:
            Number of sources added; 0 when the catalog could not be read
        """
        try:
            entries = catalog.shuffled()
        except CatalogError as e:
            self._log.error("catalog_load_failed", error=str(e))
            return 0

        locators = [entry["source"] for entry in entries.values()]
        if not locators:
            self._log.warning("catalog_empty")
            return 0

        added = self.add_to_queue(*locators)
        self._log.info("catalog_loaded", entries=len(locators), added=added)
        return added

    # Configuration -------------------------------------------------------------
    def get_config(self) -> EngineConfig:
        return self._config

    def update_config(self, **changes: Any) -> EngineConfig:
        """
        Merge ``changes`` into the configuration.

        The running ffmpeg process keeps its settings; the next spawn uses
        the new ones.

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        self._config = self._config.merged(**changes)
        self._log.info("config_updated", config=self._config.summary(), applies="next source")
        return self._config

    # Status --------------------------------------------------------------------
    def get_status(self) -> EngineStatus:
        uptime = time.monotonic() - self._started_monotonic if self._active else 0.0
        return EngineStatus(
            platform=self.platform,
            active=self._active,
            state=self._state,
            current_source=self._current_source,
            queue_depth=len(self._queue),
            total_played=self._queue.total_played,
            retry_count=self._watchdog.retry_count,
            uptime_seconds=uptime,
            started_at=self._started_at if self._active else None,
            health=derive_health(self._active, self._watchdog.retry_count),
        )

    def print_queue_status(self) -> None:
        """Log a diagnostic dump of the engine and its queue."""
        status = self.get_status()
        sources = self._queue.items()

        self._log.info(
            "queue_status",
            active=status.active,
            state=status.state.value,
            health=status.health.value,
            current_source=status.current_source,
            queue_depth=status.queue_depth,
            breakdown=self._queue.breakdown(),
            total_played=status.total_played,
            uptime=format_uptime(status.uptime_seconds),
        )
        for position, source in enumerate(sources[: defaults.STATUS_PREVIEW_LIMIT], start=1):
            self._log.info("queue_entry", position=position, kind=source.kind.value, locator=source.locator)
        if len(sources) > defaults.STATUS_PREVIEW_LIMIT:
            self._log.info("queue_more", remaining=len(sources) - defaults.STATUS_PREVIEW_LIMIT)

    # Lifecycle -----------------------------------------------------------------
    async def start(self) -> None:
        """
        Start relaying.

        No-op when already active. Playback runs in a background task.

        Raises:
            PlaceholderMissingError: If the placeholder file does not exist
        """
        if self._active:
            self._log.warning("stream_already_running")
            return

        try:
            self._validate_placeholder()
            self._log.info("stream_starting", config=self._config.summary(), loop=self.loop)
            self._log.info(
                "stream_configuration",
                resolution=self._config.resolution,
                framerate=self._config.framerate,
                video_bitrate=self._config.video_bitrate,
                audio_bitrate=self._config.audio_bitrate,
                video_codec=self._config.video_codec,
                audio_codec=self._config.audio_codec,
            )

            self._queue.begin_cycle()
            self._active = True
            self._state = EngineState.STREAMING
            self._started_at = datetime.now(timezone.utc)
            self._started_monotonic = time.monotonic()
            self._watchdog.reset()

            first = self._queue.next()
            self._task = asyncio.create_task(self._run(first), name=f"relay-{self.platform}")
        except Exception as e:
            self._log.error("stream_start_failed", error=str(e))
            self._active = False
            self._state = EngineState.STOPPED
            raise

    async def stop(self) -> None:
        """Stop relaying. No-op when not active."""
        if not self._active:
            self._log.warning("stream_not_running")
            return

        self._log.info("stream_stopping")
        # Flip first so in-flight continuations bail out before scheduling more work
        self._active = False
        self._state = EngineState.STOPPED

        await self._supervisor.stop(timeout=self._stop_grace)

        task = self._task
        if task is not None and task is not asyncio.current_task():
            done, _ = await asyncio.wait({task}, timeout=self._stop_grace)
            if not done:
                task.cancel()
                await asyncio.wait({task})

        self._current_source = None
        self._watchdog.reset()
        self._log.info("stream_stopped")

    async def restart(self) -> None:
        self._log.info("stream_restarting")
        await self.stop()
        await self._sleep(self._restart_pause)
        await self.start()

    async def wait(self) -> None:
        """Block until the current playback task finishes."""
        task = self._task
        if task is None:
            return
        await asyncio.wait({task})

    # Playback ------------------------------------------------------------------
    def _validate_placeholder(self) -> None:
        if not pathlib.Path(self.placeholder_path).is_file():
            raise PlaceholderMissingError(f"Placeholder file not found: {self.placeholder_path}")

    async def _run(self, locator: str) -> None:
        while self._active:
            outcome = await self._play(locator)
            if not self._active:
                return

            if outcome.succeeded:
                if locator != self.placeholder_path:
                    self._log.info("finished_streaming", source=locator)
                self._watchdog.record_success()
            else:
                delay = self._watchdog.record_failure()
                if delay is None:
                    self._log.error(
                        "max_retries_reached",
                        retries=self._watchdog.max_retries,
                        exit_code=outcome.exit_code,
                    )
                    await self.stop()
                    return

                self._state = EngineState.RETRYING
                self._log.warning(
                    "retrying",
                    attempt=self._watchdog.retry_count,
                    max_retries=self._watchdog.max_retries,
                    delay=delay,
                )
                await self._sleep(delay)
                if not self._active:
                    return

            if self._advance_delay > 0:
                await self._sleep(self._advance_delay)
                if not self._active:
                    return

            locator = self._queue.next()

    async def _play(self, locator: str) -> ProcessOutcome:
        self._current_source = locator
        self._state = EngineState.STREAMING

        if locator == self.placeholder_path:
            self._log.info("streaming_placeholder", reason="queue empty")
        else:
            self._log.info("now_streaming", source=locator)

        try:
            sink_args = self._sink.build_sink_args()
            cmd = build_cmd(locator, self._config, sink_args, ffmpeg_bin=self._ffmpeg_bin)
            self._log.debug("ffmpeg_command", cmd=redact_cmd(cmd, len(sink_args)))
            outcome = await self._supervisor.run(cmd)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._log.error("ffmpeg_launch_failed", source=locator, error=str(e))
            return ProcessOutcome.failure(error=str(e))

        if not outcome.succeeded:
            self._log.error("ffmpeg_failed", source=locator, exit_code=outcome.exit_code, error=outcome.error)
        return outcome
