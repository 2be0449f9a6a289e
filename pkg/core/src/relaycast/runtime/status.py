"""
Engine state and read-only status snapshots.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from ..streaming.watchdog import Health


class EngineState(str, Enum):
    """Lifecycle state of a relay engine."""

    IDLE = "idle"
    STREAMING = "streaming"
    RETRYING = "retrying"
    STOPPED = "stopped"


@dataclass(frozen=True)
class EngineStatus:
    """Point-in-time view of an engine; building one never mutates the engine."""

    platform: str
    active: bool
    state: EngineState
    current_source: str | None
    queue_depth: int
    total_played: int
    retry_count: int
    uptime_seconds: float
    started_at: datetime | None
    health: Health

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["state"] = self.state.value
        data["health"] = self.health.value
        data["started_at"] = self.started_at.isoformat() if self.started_at else None
        return data


def format_uptime(seconds: float) -> str:
    """Render a duration as ``1h 2m 3s``, ``2m 3s`` or ``3s``."""
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
