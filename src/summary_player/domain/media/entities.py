"""Core domain entities for the media bounded context."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator

from summary_player.domain.media.services import clamp_position, progress_fraction
from summary_player.domain.media.value_objects import DurationStatus, PlaybackPhase
from summary_player.domain.shared.datetime_utils import utcnow
from summary_player.domain.shared.exceptions import InvalidOperationError
from summary_player.domain.shared.messages import ErrorMessages
from summary_player.domain.shared.types import (
    NonEmptyStr,
    NonNegativeInt,
    PositiveSeconds,
    Seconds,
    UtcDatetimeField,
)


class DurationCacheEntry(BaseModel):
    """Immutable snapshot of one resource's duration resolution."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: NonEmptyStr
    status: DurationStatus = DurationStatus.PENDING
    seconds: PositiveSeconds | None = None

    @model_validator(mode="after")
    def _seconds_match_status(self) -> DurationCacheEntry:
        if self.status is DurationStatus.RESOLVED and self.seconds is None:
            raise ValueError(ErrorMessages.RESOLVED_WITHOUT_SECONDS)
        if self.status is not DurationStatus.RESOLVED and self.seconds is not None:
            raise ValueError(ErrorMessages.UNRESOLVED_WITH_SECONDS)
        return self

    @classmethod
    def pending(cls, resource_id: str) -> DurationCacheEntry:
        return cls(id=resource_id)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def settle(self, seconds: float | None) -> DurationCacheEntry:
        """Return the terminal entry for a resolution outcome (``None`` means failed).

        Anything but a finite positive number settles as FAILED; players report
        NaN or infinity for unknown and live-stream durations.
        """
        if self.is_terminal:
            raise InvalidOperationError(
                operation="settle",
                current_state=self.status.value,
                message=ErrorMessages.TERMINAL_ENTRY_DOWNGRADE.format(
                    resource_id=self.id, status=self.status.value
                ),
            )
        if seconds is None or not math.isfinite(seconds) or seconds <= 0:
            return DurationCacheEntry(id=self.id, status=DurationStatus.FAILED)
        return DurationCacheEntry(id=self.id, status=DurationStatus.RESOLVED, seconds=float(seconds))


class PlaybackState(BaseModel):
    """Transport state of the single active resource.

    ``duration`` is ``None`` until metadata for the current resource arrives.
    ``generation`` increments on every load so late engine events can be
    matched to the load that produced them.
    """

    model_config = ConfigDict(strict=True)

    resource_id: NonEmptyStr | None = None
    position: Seconds = 0.0
    duration: Seconds | None = None
    phase: PlaybackPhase = PlaybackPhase.IDLE
    generation: NonNegativeInt = 0
    loading_since: UtcDatetimeField | None = None

    @property
    def is_playing(self) -> bool:
        return self.phase.is_playing

    @property
    def progress(self) -> float:
        return progress_fraction(self.position, self.duration)

    def transition_to(self, new_phase: PlaybackPhase) -> None:
        """Transition to a new playback phase."""
        if not self.phase.can_transition_to(new_phase):
            raise InvalidOperationError(
                operation=f"transition to {new_phase.value}",
                current_state=self.phase.value,
                message=f"Cannot transition from {self.phase.value} to {new_phase.value}",
            )
        self.phase = new_phase

    def begin_loading(self, resource_id: str) -> int:
        """Select a resource, discarding all transport state of the previous one."""
        self.transition_to(PlaybackPhase.LOADING)
        self.resource_id = resource_id
        self.position = 0.0
        self.duration = None
        self.generation += 1
        self.loading_since = utcnow()
        return self.generation

    def mark_ready(self, duration: float) -> None:
        self.transition_to(PlaybackPhase.READY)
        self.duration = max(0.0, float(duration))
        self.position = clamp_position(self.position, self.duration)
        self.loading_since = None

    def move_to(self, target: float) -> float:
        """Set the position, clamped to the known duration, and return it."""
        self.position = clamp_position(target, self.duration)
        return self.position

    def finish(self) -> None:
        self.transition_to(PlaybackPhase.ENDED)
        if self.duration is not None:
            self.position = self.duration

    def reset(self) -> None:
        self.phase = PlaybackPhase.IDLE
        self.resource_id = None
        self.position = 0.0
        self.duration = None
        self.loading_since = None
