"""
Tests for RtmpDestination validation, ingest switching and key masking.
"""

import pytest

from relaycast.infra.exceptions import DestinationError
from relaycast.platforms import RtmpDestination, SinkAdapter
from relaycast.platforms.rtmp import mask_key


class TestValidation:
    def test_trailing_slash_is_stripped(self):
        destination = RtmpDestination("rtmp://live.example.com/app/", "key123")
        assert destination.build_sink_args() == ["rtmp://live.example.com/app/key123"]

    def test_rtmps_is_accepted(self):
        destination = RtmpDestination("rtmps://live.example.com:443/app", "key123")
        assert destination.current_url == "rtmps://live.example.com:443/app"

    @pytest.mark.parametrize("url", ["http://live.example.com/app", "live.example.com/app", ""])
    def test_non_rtmp_url_rejected(self, url):
        with pytest.raises(DestinationError):
            RtmpDestination(url, "key123")

    @pytest.mark.parametrize("key", ["", "   ", "rtmp://live.example.com/app/key"])
    def test_bad_key_rejected(self, key):
        with pytest.raises(DestinationError):
            RtmpDestination("rtmp://live.example.com/app", key)

    def test_default_name(self):
        destination = RtmpDestination("rtmp://live.example.com/app", "key123", name="")
        assert destination.display_name() == "Custom RTMP"


class TestSinkAdapter:
    def test_satisfies_protocol(self, destination):
        assert isinstance(destination, SinkAdapter)

    def test_sink_args_and_name(self, destination):
        assert destination.build_sink_args() == ["rtmp://ingest.example.com/live/abcd1234efgh5678"]
        assert destination.display_name() == "Test RTMP"


class TestIngestSwitching:
    def test_backup_round_trip(self):
        destination = RtmpDestination(
            "rtmp://primary.example.com/live", "key123", backup_url="rtmp://backup.example.com/live"
        )

        assert destination.use_backup() is True
        assert destination.build_sink_args() == ["rtmp://backup.example.com/live/key123"]
        assert destination.use_backup() is False

        assert destination.use_primary() is True
        assert destination.build_sink_args() == ["rtmp://primary.example.com/live/key123"]
        assert destination.use_primary() is False

    def test_no_backup_configured(self, destination):
        assert destination.use_backup() is False
        assert destination.current_url == "rtmp://ingest.example.com/live"

    def test_update_backup_url_enables_switch(self, destination):
        destination.update_ingest_url("rtmp://backup.example.com/live/", backup=True)

        assert destination.backup_url == "rtmp://backup.example.com/live"
        assert destination.use_backup() is True

    def test_update_primary_url(self, destination):
        destination.update_ingest_url("rtmps://other.example.com/live")
        assert destination.build_sink_args()[0].startswith("rtmps://other.example.com/live/")

    def test_update_rejects_bad_url(self, destination):
        with pytest.raises(DestinationError):
            destination.update_ingest_url("ftp://nope")
        assert destination.ingest_url == "rtmp://ingest.example.com/live"


class TestStreamKey:
    def test_update_stream_key(self, destination):
        destination.update_stream_key("  newkey  ")
        assert destination.build_sink_args() == ["rtmp://ingest.example.com/live/newkey"]

    def test_update_rejects_empty_key(self, destination):
        with pytest.raises(DestinationError):
            destination.update_stream_key("")
        assert destination.stream_key == "abcd1234efgh5678"

    def test_mask_key(self):
        assert mask_key("short") == "sh..."
        assert mask_key("abcd1234efgh5678") == "abcd1234...5678"

    def test_info_masks_key(self, destination):
        assert destination.info() == {
            "platform": "Test RTMP",
            "ingest_url": "rtmp://ingest.example.com/live",
            "backup_url": None,
            "key_masked": "abcd1234...5678",
            "using_backup": False,
        }
