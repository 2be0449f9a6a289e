"""
Global test configuration for Relaycast.

This module provides global pytest configuration and fixtures.
"""

import sys
from pathlib import Path

import pytest

# Ensure the project src directory is importable without relying on external environment.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from relaycast.platforms.rtmp import RtmpDestination  # noqa: E402


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    """A small stand-in media file that exists on disk."""
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00" * 16)
    return path


@pytest.fixture
def placeholder(tmp_path: Path) -> Path:
    path = tmp_path / "placeholder.mp4"
    path.write_bytes(b"\x00" * 16)
    return path


@pytest.fixture
def destination() -> RtmpDestination:
    return RtmpDestination("rtmp://ingest.example.com/live", "abcd1234efgh5678", name="Test RTMP")
