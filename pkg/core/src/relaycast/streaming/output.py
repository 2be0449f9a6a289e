"""
FFmpeg output classification.

Files each line printed by the encoder into a severity bucket and logs it.
This is observability only: nothing here may influence playback.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

ERROR_TOKENS = ("error", "failed", "invalid", "corrupt")
WARNING_TOKENS = ("warning", "deprecated")
PROGRESS_TOKENS = ("frame=", "fps=", "bitrate=", "speed=")

DIAGNOSTIC_CHANNEL = "stderr"


class OutputSeverity(Enum):
    """Severity bucket for a line of ffmpeg output."""

    ERROR = "error"
    WARNING = "warning"
    PROGRESS = "progress"
    INFO = "info"
    IGNORED = "ignored"


def classify_line(line: str, channel: str = DIAGNOSTIC_CHANNEL) -> OutputSeverity:
    """
    Classify one line of process output.

    Error tokens win over warning tokens, which win over progress counters.
    Remaining diagnostic-channel lines are informational; remaining stdout
    lines are ignored.
    """
    text = line.strip()
    if not text:
        return OutputSeverity.IGNORED

    lowered = text.lower()
    if any(token in lowered for token in ERROR_TOKENS):
        return OutputSeverity.ERROR
    if any(token in lowered for token in WARNING_TOKENS):
        return OutputSeverity.WARNING
    if any(token in lowered for token in PROGRESS_TOKENS):
        return OutputSeverity.PROGRESS
    if channel == DIAGNOSTIC_CHANNEL:
        return OutputSeverity.INFO
    return OutputSeverity.IGNORED


def log_output_line(log: Any, line: str, channel: str = DIAGNOSTIC_CHANNEL) -> OutputSeverity:
    """Log ``line`` on ``log`` at the level matching its severity."""
    severity = classify_line(line, channel)
    text = line.strip()
    if severity is OutputSeverity.ERROR:
        log.error("ffmpeg_output", line=text, channel=channel)
    elif severity is OutputSeverity.WARNING:
        log.warning("ffmpeg_output", line=text, channel=channel)
    elif severity is OutputSeverity.PROGRESS:
        log.debug("ffmpeg_output", line=text, channel=channel)
    elif severity is OutputSeverity.INFO:
        log.info("ffmpeg_output", line=text, channel=channel)
    return severity
