"""
Destination adapters.

An adapter supplies the sink arguments appended to each ffmpeg command and a
display name for logs. It is the only part of the relay that varies by
destination.
"""

from .base import SinkAdapter
from .rtmp import RtmpDestination

__all__ = ["RtmpDestination", "SinkAdapter"]
