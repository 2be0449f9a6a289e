"""
Tests for ffmpeg output classification.
"""

import pytest
from structlog.testing import capture_logs

from relaycast.streaming.output import OutputSeverity, classify_line, log_output_line


@pytest.mark.parametrize(
    "line, expected",
    [
        ("[rtmp @ 0x55] Connection refused: Error number -111", OutputSeverity.ERROR),
        ("Failed to open output", OutputSeverity.ERROR),
        ("Invalid data found when processing input", OutputSeverity.ERROR),
        ("corrupt decoded frame in stream 0", OutputSeverity.ERROR),
        ("Warning: something odd", OutputSeverity.WARNING),
        ("option -foo is deprecated", OutputSeverity.WARNING),
        ("frame=  120 fps= 30 q=28.0 size=512kB time=00:00:04.00 bitrate=1048.6kbits/s speed=1x", OutputSeverity.PROGRESS),
        ("Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'a.mp4':", OutputSeverity.INFO),
    ],
)
def test_classify_stderr(line, expected):
    assert classify_line(line) is expected


def test_error_wins_over_warning_and_progress():
    assert classify_line("warning: frame= 10 error while decoding") is OutputSeverity.ERROR


def test_warning_wins_over_progress():
    assert classify_line("deprecated pixel format, frame=10") is OutputSeverity.WARNING


def test_blank_lines_are_ignored():
    assert classify_line("") is OutputSeverity.IGNORED
    assert classify_line("   \n") is OutputSeverity.IGNORED


def test_plain_stdout_is_ignored_but_errors_are_not():
    assert classify_line("hello", channel="stdout") is OutputSeverity.IGNORED
    assert classify_line("fatal error", channel="stdout") is OutputSeverity.ERROR


def test_log_output_line_uses_matching_level():
    import structlog

    log = structlog.get_logger("ffmpeg-test")
    with capture_logs() as logs:
        log_output_line(log, "Conversion failed!\n")
        log_output_line(log, "Warning: low bitrate")
        log_output_line(log, "Stream mapping:")
        log_output_line(log, "ignored", channel="stdout")

    assert [entry["log_level"] for entry in logs] == ["error", "warning", "info"]
    assert logs[0]["event"] == "ffmpeg_output"
    assert logs[0]["line"] == "Conversion failed!"
    assert logs[0]["channel"] == "stderr"
