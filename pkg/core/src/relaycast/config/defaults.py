"""Default configuration values for Relaycast streaming."""

# Encoder process
FFMPEG_BIN = "ffmpeg"
FFMPEG_LOGLEVEL = "warning"
X264_PRESET = "medium"
X264_TUNE = "zerolatency"
PIXEL_FORMAT = "yuv420p"
OUTPUT_FORMAT = "flv"

# Encode settings applied when a caller leaves them unset
DEFAULT_RESOLUTION = "1080x1920"
DEFAULT_FRAMERATE = 30
DEFAULT_VIDEO_BITRATE = "2500k"
DEFAULT_AUDIO_BITRATE = "128k"
DEFAULT_VIDEO_CODEC = "libx264"
DEFAULT_AUDIO_CODEC = "aac"

MIN_FRAMERATE = 1
MAX_FRAMERATE = 120

# Keyframe interval is pinned to this many seconds of frames
KEYFRAME_INTERVAL_SECONDS = 2

# Played whenever the queue has nothing to offer; must exist at start()
PLACEHOLDER_PATH = "tmp/placeholder.mp4"

# Retry policy
MAX_RETRY_ATTEMPTS = 3
RETRY_BASE_DELAY = 2.0  # seconds, multiplied by the retry count

# Lifecycle timing (seconds)
ADVANCE_DELAY = 1.0
STOP_GRACE_SECONDS = 1.0
RESTART_PAUSE_SECONDS = 2.0
TERMINATE_TIMEOUT_SECONDS = 5.0

# Destination
PLATFORM_NAME = "Custom RTMP"
INGEST_SCHEMES = ("rtmp://", "rtmps://")

# Queue status dump
STATUS_PREVIEW_LIMIT = 5

# Browser identity sent to content platforms that reject hotlinked requests
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Host fragment -> Referer header value
REFERER_BY_HOST = {
    "tiktok": "https://www.tiktok.com/",
}
