"""
Engine configuration.

Encode settings are resolved against defaults at construction and
revalidated on every update. A failed validation raises ConfigurationError
and leaves the previous configuration untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config import defaults
from ..infra.exceptions import ConfigurationError

RESOLUTION_PATTERN = r"^\d+x\d+$"
BITRATE_PATTERN = r"^\d+k$"


class EngineConfig(BaseModel):
    """Encode settings applied to every spawned ffmpeg process."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    resolution: str = Field(defaults.DEFAULT_RESOLUTION, pattern=RESOLUTION_PATTERN)
    framerate: int = Field(
        defaults.DEFAULT_FRAMERATE, ge=defaults.MIN_FRAMERATE, le=defaults.MAX_FRAMERATE
    )
    video_bitrate: str = Field(defaults.DEFAULT_VIDEO_BITRATE, pattern=BITRATE_PATTERN)
    audio_bitrate: str = Field(defaults.DEFAULT_AUDIO_BITRATE, pattern=BITRATE_PATTERN)
    video_codec: str = Field(defaults.DEFAULT_VIDEO_CODEC, min_length=1)
    audio_codec: str = Field(defaults.DEFAULT_AUDIO_CODEC, min_length=1)

    @property
    def width(self) -> int:
        return int(self.resolution.split("x")[0])

    @property
    def height(self) -> int:
        return int(self.resolution.split("x")[1])

    def merged(self, **changes: Any) -> EngineConfig:
        """Return a revalidated copy with ``changes`` applied."""
        updates = {key: value for key, value in changes.items() if value is not None}
        return resolve_config({**self.model_dump(), **updates})

    def summary(self) -> str:
        return (
            f"{self.resolution}@{self.framerate}fps, "
            f"video {self.video_codec} {self.video_bitrate}, "
            f"audio {self.audio_codec} {self.audio_bitrate}"
        )


def resolve_config(overrides: Mapping[str, Any] | EngineConfig | None = None) -> EngineConfig:
    """
    Build a validated EngineConfig from partial overrides.

    Keys left out (or set to None) fall back to the defaults.

    Raises:
        ConfigurationError: If any value is malformed or a key is unknown
    """
    if isinstance(overrides, EngineConfig):
        return overrides

    values = {key: value for key, value in (overrides or {}).items() if value is not None}
    try:
        return EngineConfig.model_validate(values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid engine configuration: {problems}") from e
