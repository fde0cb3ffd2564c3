"""Media adapters backed by the ffmpeg command-line tools."""

from summary_player.infrastructure.media.ffplay_engine import FfplayMediaEngine
from summary_player.infrastructure.media.ffprobe_resolver import FfprobeDurationResolver

__all__ = [
    "FfplayMediaEngine",
    "FfprobeDurationResolver",
]
