"""
Tests for EngineStatus snapshots and uptime formatting.
"""

from datetime import datetime, timezone

import pytest

from relaycast.runtime.status import EngineState, EngineStatus, format_uptime
from relaycast.streaming.watchdog import Health


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "0s"),
        (59.9, "59s"),
        (123, "2m 3s"),
        (3723, "1h 2m 3s"),
        (-4, "0s"),
    ],
)
def test_format_uptime(seconds, expected):
    assert format_uptime(seconds) == expected


def test_to_dict_renders_enums_and_timestamps():
    started = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    status = EngineStatus(
        platform="Test RTMP",
        active=True,
        state=EngineState.RETRYING,
        current_source="/media/a.mp4",
        queue_depth=3,
        total_played=1,
        retry_count=2,
        uptime_seconds=12.5,
        started_at=started,
        health=Health.WARNING,
    )

    assert status.to_dict() == {
        "platform": "Test RTMP",
        "active": True,
        "state": "retrying",
        "current_source": "/media/a.mp4",
        "queue_depth": 3,
        "total_played": 1,
        "retry_count": 2,
        "uptime_seconds": 12.5,
        "started_at": "2024-05-01T12:00:00+00:00",
        "health": "warning",
    }


def test_to_dict_without_start_time():
    status = EngineStatus(
        platform="Test RTMP",
        active=False,
        state=EngineState.IDLE,
        current_source=None,
        queue_depth=0,
        total_played=0,
        retry_count=0,
        uptime_seconds=0.0,
        started_at=None,
        health=Health.ERROR,
    )

    assert status.to_dict()["started_at"] is None
