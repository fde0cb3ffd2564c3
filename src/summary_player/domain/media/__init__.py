"""
Media Bounded Context

Playable resources, duration cache entries, and the playback phase machine.
"""

from summary_player.domain.media.entities import DurationCacheEntry, PlaybackState
from summary_player.domain.media.events import MediaEnded, MetadataLoaded, PositionTick
from summary_player.domain.media.services import (
    clamp_position,
    format_duration,
    fraction_to_seconds,
    progress_fraction,
)
from summary_player.domain.media.value_objects import DurationStatus, MediaResource, PlaybackPhase

__all__ = [
    # Entities
    "DurationCacheEntry",
    "PlaybackState",
    # Value Objects
    "MediaResource",
    "DurationStatus",
    "PlaybackPhase",
    # Engine events
    "MetadataLoaded",
    "PositionTick",
    "MediaEnded",
    # Arithmetic
    "clamp_position",
    "progress_fraction",
    "fraction_to_seconds",
    "format_duration",
]
