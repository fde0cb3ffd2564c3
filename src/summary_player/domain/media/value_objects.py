"""Immutable value objects for the media bounded context."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from summary_player.domain.shared.messages import ErrorMessages
from summary_player.domain.shared.types import NonEmptyStr


class MediaResource(BaseModel):
    """A playable item: a stable resource id plus where to fetch it from.

    Identity is the id alone; two resources with the same id are the same
    resource even if their source URIs differ.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    id: NonEmptyStr
    source_uri: NonEmptyStr

    @field_validator("id", "source_uri", mode="before")
    @classmethod
    def _strip(cls, v: str, info: ValidationInfo) -> str:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError(
                    ErrorMessages.EMPTY_RESOURCE_ID
                    if info.field_name == "id"
                    else ErrorMessages.EMPTY_SOURCE_URI
                )
        return v

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MediaResource):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.id


class DurationStatus(Enum):
    """Resolution status of a duration cache entry.

    PENDING moves to exactly one of the terminal states and never back.
    """

    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not DurationStatus.PENDING


class PlaybackPhase(Enum):
    """Playback phase with enforced transitions.

    State transitions:
    - any -> LOADING (a resource is selected)
    - LOADING -> READY (metadata arrived)
    - READY/PAUSED -> PLAYING (play)
    - PLAYING -> PAUSED (pause)
    - PLAYING -> ENDED (natural end of media)
    - ENDED -> PLAYING (replay)
    - any -> IDLE (controller closed)
    """

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"

    def can_transition_to(self, target: PlaybackPhase) -> bool:
        """Check if transition to target phase is valid."""
        if target in (PlaybackPhase.LOADING, PlaybackPhase.IDLE):
            return True
        valid_transitions = {
            PlaybackPhase.IDLE: set(),
            PlaybackPhase.LOADING: {PlaybackPhase.READY},
            PlaybackPhase.READY: {PlaybackPhase.PLAYING},
            PlaybackPhase.PLAYING: {PlaybackPhase.PAUSED, PlaybackPhase.ENDED},
            PlaybackPhase.PAUSED: {PlaybackPhase.PLAYING},
            PlaybackPhase.ENDED: {PlaybackPhase.PLAYING},
        }
        return target in valid_transitions[self]

    @property
    def is_playing(self) -> bool:
        return self is PlaybackPhase.PLAYING

    @property
    def accepts_seek(self) -> bool:
        return self in {PlaybackPhase.READY, PlaybackPhase.PLAYING, PlaybackPhase.PAUSED}
