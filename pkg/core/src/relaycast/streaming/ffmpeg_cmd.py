"""
FFmpeg Command Builder for RTMP relaying.

This module builds the ffmpeg argument list used to push one source to a
live destination: global flags, optional request headers for content
platforms that reject hotlinked requests, the input, the encode settings
derived from the engine configuration, and finally the sink address
supplied by the destination adapter.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from ..config import defaults
from .sources import is_url

if TYPE_CHECKING:
    from ..runtime.config import EngineConfig


def request_headers_for(locator: str) -> str | None:
    """
    Return the ffmpeg ``-headers`` value for a URL, if its host needs one.

    Args:
        locator: Source locator

    Returns:
        CRLF-separated Referer/User-Agent headers, or None for locators that
        are not URLs or whose host is not a known content platform
    """
    if not is_url(locator):
        return None

    host = urlsplit(locator).netloc.lower()
    for fragment, referer in defaults.REFERER_BY_HOST.items():
        if fragment in host:
            return f"Referer: {referer}\r\nUser-Agent: {defaults.BROWSER_USER_AGENT}\r\n"
    return None


def build_cmd(
    locator: str,
    config: EngineConfig,
    sink_args: Sequence[str],
    ffmpeg_bin: str = defaults.FFMPEG_BIN,
    preset: str = defaults.X264_PRESET,
    loglevel: str = defaults.FFMPEG_LOGLEVEL,
) -> list[str]:
    """
    Build the ffmpeg command that relays one source to the destination.

    Args:
        locator: Input file path or URL
        config: Resolved engine configuration
        sink_args: Destination arguments from the platform adapter (usually the
            full ingest URL including the stream key)
        ffmpeg_bin: ffmpeg executable
        preset: x264 preset
        loglevel: ffmpeg log level

    Returns:
        List of command arguments, executable first

    Example:
        >>> cmd = build_cmd("/media/a.mp4", EngineConfig(), ["rtmp://host/app/key"])
        >>> # Returns: ["ffmpeg", "-nostdin", "-hide_banner", ...]
    """
    cmd = [ffmpeg_bin]

    # Global flags
    cmd.extend(["-nostdin", "-hide_banner", "-loglevel", loglevel, "-re"])

    headers = request_headers_for(locator)
    if headers:
        cmd.extend(["-headers", headers])

    cmd.extend(["-i", locator])

    # Video / audio encoding
    gop = config.framerate * defaults.KEYFRAME_INTERVAL_SECONDS
    cmd.extend(
        [
            "-c:v",
            config.video_codec,
            "-c:a",
            config.audio_codec,
            "-b:v",
            config.video_bitrate,
            "-b:a",
            config.audio_bitrate,
            "-s",
            config.resolution,
            "-r",
            str(config.framerate),
            "-g",
            str(gop),
            "-keyint_min",
            str(config.framerate),
            "-sc_threshold",
            "0",
            "-pix_fmt",
            defaults.PIXEL_FORMAT,
            "-preset",
            preset,
            "-tune",
            defaults.X264_TUNE,
            "-threads",
            "0",
        ]
    )

    # FLV muxing
    cmd.extend(["-flvflags", "no_duration_filesize", "-f", defaults.OUTPUT_FORMAT])
    cmd.extend(sink_args)

    return cmd


def redact_sink(address: str) -> str:
    """Mask the stream key (last path segment) of an ingest address."""
    if not address.lower().startswith(defaults.INGEST_SCHEMES):
        return address
    base, sep, key = address.rpartition("/")
    if not sep or not key or base.endswith("/"):
        return address
    return f"{base}/{key[:4]}***"


def redact_cmd(cmd: Sequence[str], sink_count: int = 1) -> list[str]:
    """
    Return a copy of ``cmd`` safe for logs.

    The trailing ``sink_count`` arguments are treated as sink addresses.
    """
    if sink_count <= 0:
        return list(cmd)
    head = list(cmd[:-sink_count])
    return head + [redact_sink(arg) for arg in cmd[-sink_count:]]


def get_cmd_summary(cmd: Sequence[str]) -> str:
    """
    Get a human-readable summary of the FFmpeg command.

    Args:
        cmd: List of FFmpeg command arguments

    Returns:
        Formatted string summary of the command
    """
    if not cmd:
        return "Invalid FFmpeg command"

    input_file = None
    video_codec = "unknown"
    audio_codec = "unknown"
    size = "unknown"

    for i, arg in enumerate(cmd[:-1]):
        if arg == "-i":
            input_file = cmd[i + 1]
        elif arg == "-c:v":
            video_codec = cmd[i + 1]
        elif arg == "-c:a":
            audio_codec = cmd[i + 1]
        elif arg == "-s":
            size = cmd[i + 1]

    return f"FFmpeg relay: {video_codec} video at {size}, {audio_codec} audio, input: {input_file}"
