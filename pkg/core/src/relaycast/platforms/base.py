"""
Sink adapter protocol.

The engine depends only on this capability; it never inspects which
destination it is feeding.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SinkAdapter(Protocol):
    """Supplies the output side of the ffmpeg command."""

    def build_sink_args(self) -> list[str]:
        """Return the arguments appended after the encode settings."""
        ...

    def display_name(self) -> str:
        """Return the name used in logs and status."""
        ...
