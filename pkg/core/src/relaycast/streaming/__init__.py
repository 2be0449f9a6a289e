"""
Streaming module for Relaycast.

Source classification, the playback queue, ffmpeg command construction and
process supervision.
"""

from .ffmpeg_cmd import build_cmd
from .source_queue import SourceQueue
from .sources import Source, SourceKind, classify
from .supervisor import FFmpegSupervisor, OutcomeStatus, ProcessOutcome
from .watchdog import Health, RetryWatchdog, derive_health

__all__ = [
    "FFmpegSupervisor",
    "Health",
    "OutcomeStatus",
    "ProcessOutcome",
    "RetryWatchdog",
    "Source",
    "SourceKind",
    "SourceQueue",
    "build_cmd",
    "classify",
    "derive_health",
]
