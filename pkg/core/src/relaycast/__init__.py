"""
Relaycast: keeps a live broadcast destination continuously fed.

An ordered queue of video sources (local files, HTTP/HLS/DASH URLs, RTMP
sources) is relayed one at a time into a supervised ffmpeg process.
"""

__version__ = "0.1.0"
