"""
Source classification.

Decides whether a locator is a local file, a plain HTTP(S) URL or a
streaming-protocol URL (HLS/DASH manifest or RTMP), and whether it is
usable. URLs are never probed over the network; ffmpeg reports bad URLs
when it tries to open them.
"""

from __future__ import annotations

import pathlib
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

import structlog

_log = structlog.get_logger(__name__)

URL_SCHEMES = frozenset({"http", "https", "rtmp", "rtmps"})
STREAM_SCHEMES = frozenset({"rtmp", "rtmps"})
MANIFEST_SUFFIXES = (".m3u8", ".mpd")


class SourceKind(str, Enum):
    """Kind of input handed to ffmpeg."""

    FILE = "file"
    URL = "url"
    STREAM = "stream"


@dataclass(frozen=True)
class Source:
    """A classified queue entry."""

    locator: str
    kind: SourceKind
    valid: bool

    @property
    def is_remote(self) -> bool:
        return self.kind is not SourceKind.FILE


def is_url(locator: str) -> bool:
    """Return True when the locator is a well-formed URL with an allowed scheme."""
    try:
        parts = urlsplit(locator)
    except ValueError:
        return False
    return parts.scheme.lower() in URL_SCHEMES and bool(parts.netloc)


def _is_stream_url(locator: str) -> bool:
    parts = urlsplit(locator)
    if parts.scheme.lower() in STREAM_SCHEMES:
        return True
    return parts.path.lower().endswith(MANIFEST_SUFFIXES)


def _path_exists(locator: str) -> bool:
    # Over-long names and embedded NULs raise instead of returning False
    try:
        return pathlib.Path(locator).exists()
    except (OSError, ValueError):
        return False


def classify(locator: str) -> Source:
    """
    Classify a locator and validate it.

    Args:
        locator: Local path or URL

    Returns:
        Source: kind is STREAM for manifests and RTMP, URL for other
        allowed URLs, FILE otherwise. Files are valid only if they exist now.
    """
    if is_url(locator):
        kind = SourceKind.STREAM if _is_stream_url(locator) else SourceKind.URL
        return Source(locator=locator, kind=kind, valid=True)

    exists = bool(locator.strip()) and _path_exists(locator)
    if not exists:
        _log.warning("source_file_missing", locator=locator)
    return Source(locator=locator, kind=SourceKind.FILE, valid=exists)
