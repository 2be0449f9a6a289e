"""
Generic RTMP(S) destination with an optional backup ingest server.
"""

from __future__ import annotations

from typing import Any

import structlog

from ..config import defaults
from ..infra.exceptions import DestinationError

_log = structlog.get_logger(__name__)


def mask_key(key: str) -> str:
    """Show just enough of a stream key to recognise it."""
    if len(key) <= 12:
        return f"{key[:2]}..."
    return f"{key[:8]}...{key[-4:]}"


def _validate_ingest_url(url: str) -> str:
    url = url.strip().rstrip("/")
    if not url.lower().startswith(defaults.INGEST_SCHEMES):
        raise DestinationError(f"Invalid RTMP URL format: {url}. Must start with rtmp:// or rtmps://")
    return url


def _validate_stream_key(key: str) -> str:
    key = key.strip()
    if not key:
        raise DestinationError("Stream key is required")
    if "://" in key:
        raise DestinationError("Stream key should not contain URLs. Provide only the key.")
    return key


class RtmpDestination:
    """
    Pushes to ``<ingest_url>/<stream_key>``.

    Switching between primary and backup ingest only affects the next
    ffmpeg spawn; a running process keeps its destination.
    """

    def __init__(
        self,
        ingest_url: str,
        stream_key: str,
        name: str = defaults.PLATFORM_NAME,
        backup_url: str | None = None,
    ) -> None:
        self.ingest_url = _validate_ingest_url(ingest_url)
        self.stream_key = _validate_stream_key(stream_key)
        self.backup_url = _validate_ingest_url(backup_url) if backup_url else None
        self.name = name or defaults.PLATFORM_NAME
        self.using_backup = False

    # SinkAdapter -----------------------------------------------------------
    def build_sink_args(self) -> list[str]:
        return [f"{self.current_url}/{self.stream_key}"]

    def display_name(self) -> str:
        return self.name

    # Ingest selection ------------------------------------------------------
    @property
    def current_url(self) -> str:
        if self.using_backup and self.backup_url:
            return self.backup_url
        return self.ingest_url

    def use_backup(self) -> bool:
        """Switch to the backup ingest; returns False when unavailable or already in use."""
        if not self.backup_url or self.using_backup:
            _log.warning("backup_ingest_unavailable", platform=self.name, using_backup=self.using_backup)
            return False
        self.using_backup = True
        _log.info("ingest_switched", platform=self.name, ingest=self.backup_url, backup=True)
        return True

    def use_primary(self) -> bool:
        """Switch back to the primary ingest; returns False when already on it."""
        if not self.using_backup:
            _log.warning("already_on_primary_ingest", platform=self.name)
            return False
        self.using_backup = False
        _log.info("ingest_switched", platform=self.name, ingest=self.ingest_url, backup=False)
        return True

    # Updates ---------------------------------------------------------------
    def update_stream_key(self, new_key: str) -> None:
        self.stream_key = _validate_stream_key(new_key)
        _log.info("stream_key_updated", platform=self.name, key=mask_key(self.stream_key))

    def update_ingest_url(self, new_url: str, backup: bool = False) -> None:
        url = _validate_ingest_url(new_url)
        if backup:
            self.backup_url = url
        else:
            self.ingest_url = url
        _log.info("ingest_url_updated", platform=self.name, ingest=url, backup=backup)

    def info(self) -> dict[str, Any]:
        return {
            "platform": self.name,
            "ingest_url": self.ingest_url,
            "backup_url": self.backup_url,
            "key_masked": mask_key(self.stream_key),
            "using_backup": self.using_backup,
        }
