"""Playback controller - reconciles transport commands with media engine events."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ...config.settings import MediaSettings
from ...domain.library.services import AccessDomainService
from ...domain.media.entities import PlaybackState
from ...domain.media.events import EngineEvent, MediaEnded, MetadataLoaded, PositionTick
from ...domain.media.services import format_duration, fraction_to_seconds
from ...domain.media.value_objects import PlaybackPhase
from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.events import (
    EventBus,
    PlaybackCompleted,
    PlaybackPhaseChanged,
    get_event_bus,
)
from ...domain.shared.exceptions import BusinessRuleViolationError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.library.entities import Book
    from ...domain.media.value_objects import MediaResource
    from ..interfaces.media_engine import MediaEngine

logger = logging.getLogger(__name__)

CompletionListener = Callable[[str], Any]


class PlaybackController:
    """Owns the single active resource and its transport state.

    Commands (``load``, ``play``, ``pause``, ``seek``...) come from the user;
    ``handle_event`` receives what the engine reports. Engine events for any
    resource other than the current one are dropped. Every transition into
    ENDED notifies the completion listeners once.
    """

    def __init__(
        self,
        *,
        engine: MediaEngine,
        settings: MediaSettings | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._engine = engine
        self._settings = settings or MediaSettings()
        self._bus = event_bus or get_event_bus()
        self._state = PlaybackState()
        self._resource: MediaResource | None = None
        self._book: Book | None = None
        self._completion_listeners: list[CompletionListener] = []

        self._engine.set_event_handler(self.handle_event)

    # === Read-only view ===

    @property
    def state(self) -> PlaybackState:
        return self._state.model_copy()

    @property
    def phase(self) -> PlaybackPhase:
        return self._state.phase

    @property
    def resource(self) -> MediaResource | None:
        return self._resource

    @property
    def current_book(self) -> Book | None:
        return self._book

    @property
    def position(self) -> float:
        return self._state.position

    @property
    def duration(self) -> float | None:
        return self._state.duration

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def progress(self) -> float:
        return self._state.progress

    @property
    def position_label(self) -> str:
        return format_duration(self._state.position)

    @property
    def duration_label(self) -> str:
        return format_duration(self._state.duration)

    def is_stalled(self, now: datetime | None = None) -> bool:
        """Whether the current load has waited longer than the stall threshold for metadata."""
        since = self._state.loading_since
        if self._state.phase is not PlaybackPhase.LOADING or since is None:
            return False
        waited = ((now or utcnow()) - since).total_seconds()
        if waited < self._settings.load_stall_s:
            return False
        logger.warning(LogTemplates.PLAYBACK_STALLED, self._state.resource_id, waited)
        return True

    # === Completion listeners ===

    def on_completed(self, callback: CompletionListener) -> None:
        self._completion_listeners.append(callback)

    def remove_completed_listener(self, callback: CompletionListener) -> None:
        if callback in self._completion_listeners:
            self._completion_listeners.remove(callback)

    # === Commands ===

    async def load(self, resource: MediaResource) -> None:
        """Make ``resource`` the active one; the previous resource is abandoned."""
        old_phase = self._state.phase
        generation = self._state.begin_loading(resource.id)
        self._resource = resource
        if self._book is not None and self._book.id != resource.id:
            self._book = None
        logger.info(LogTemplates.PLAYBACK_LOADING, resource.id, generation)
        await self._phase_changed(old_phase)

        try:
            await self._engine.open(resource)
        except Exception:
            # The controller stays LOADING; a broken source is a stall, not a crash.
            logger.exception(LogTemplates.ENGINE_METADATA_FAILED, resource.id)

    async def load_book(self, book: Book, is_subscribed: bool) -> MediaResource:
        """Load a catalog book's audio, enforcing the subscription rule."""
        try:
            resource = AccessDomainService.playable_resource(book, is_subscribed)
        except BusinessRuleViolationError as e:
            logger.info(LogTemplates.PLAYBACK_DENIED, book.id, e.rule)
            raise
        self._book = book
        await self.load(resource)
        return resource

    async def play(self) -> bool:
        phase = self._state.phase
        if phase is PlaybackPhase.PLAYING:
            return True
        if phase not in (PlaybackPhase.READY, PlaybackPhase.PAUSED, PlaybackPhase.ENDED):
            logger.debug(LogTemplates.PLAYBACK_COMMAND_IGNORED, "play", self._state.resource_id, phase.value)
            return False

        try:
            if phase is PlaybackPhase.ENDED:
                logger.info(LogTemplates.PLAYBACK_REPLAY, self._state.resource_id)
                self._state.move_to(0.0)
                await self._engine.seek(0.0)
            await self._engine.play()
        except Exception:
            logger.exception("Error starting playback")
            return False

        self._state.transition_to(PlaybackPhase.PLAYING)
        logger.info(LogTemplates.PLAYBACK_STARTED, self._state.resource_id, self._state.position)
        await self._phase_changed(phase)
        return True

    async def pause(self) -> bool:
        if self._state.phase is not PlaybackPhase.PLAYING:
            return False

        try:
            await self._engine.pause()
        except Exception:
            logger.exception("Error pausing playback")
            return False

        self._state.transition_to(PlaybackPhase.PAUSED)
        logger.debug(LogTemplates.PLAYBACK_PAUSED, self._state.resource_id, self._state.position)
        await self._phase_changed(PlaybackPhase.PLAYING)
        return True

    async def toggle(self) -> bool:
        """Single play/pause button: pause while playing, otherwise play."""
        if self._state.is_playing:
            return await self.pause()
        return await self.play()

    async def seek(self, target_seconds: float) -> float:
        """Move to ``target_seconds`` clamped to ``[0, duration]`` and return the new position."""
        phase = self._state.phase
        if not phase.accepts_seek:
            logger.debug(LogTemplates.PLAYBACK_COMMAND_IGNORED, "seek", self._state.resource_id, phase.value)
            return self._state.position

        position = self._state.move_to(target_seconds)
        logger.debug(LogTemplates.PLAYBACK_SEEK, self._state.resource_id, position, target_seconds)
        try:
            await self._engine.seek(position)
        except Exception:
            logger.exception("Error seeking")
        return position

    async def seek_fraction(self, fraction: float) -> float:
        """Seek to a click on the progress track, ``fraction`` of its width."""
        return await self.seek(fraction_to_seconds(fraction, self._state.duration))

    async def skip_forward(self, delta: float | None = None) -> float:
        step = self._settings.skip_seconds if delta is None else delta
        return await self.seek(self._state.position + step)

    async def skip_backward(self, delta: float | None = None) -> float:
        step = self._settings.skip_seconds if delta is None else delta
        return await self.seek(self._state.position - step)

    async def close(self) -> None:
        old_phase = self._state.phase
        try:
            await self._engine.stop()
        except Exception:
            logger.exception("Error stopping engine")
        self._state.reset()
        self._resource = None
        self._book = None
        logger.info(LogTemplates.PLAYBACK_CLOSED)
        await self._phase_changed(old_phase)

    # === Engine events ===

    async def handle_event(self, event: EngineEvent) -> None:
        """Apply one engine event; stale or out-of-phase events are ignored."""
        current = self._state.resource_id
        if event.resource_id != current:
            logger.debug(
                LogTemplates.PLAYBACK_STALE_EVENT, type(event).__name__, event.resource_id, current
            )
            return

        if isinstance(event, MetadataLoaded):
            await self._on_metadata(event)
        elif isinstance(event, PositionTick):
            self._on_tick(event)
        elif isinstance(event, MediaEnded):
            await self._on_ended(event)

    async def _on_metadata(self, event: MetadataLoaded) -> None:
        if self._state.phase is not PlaybackPhase.LOADING:
            self._ignore(event)
            return
        self._state.mark_ready(event.duration)
        logger.info(LogTemplates.PLAYBACK_READY, event.resource_id, event.duration)
        await self._phase_changed(PlaybackPhase.LOADING)

    def _on_tick(self, event: PositionTick) -> None:
        if not self._state.phase.accepts_seek:
            self._ignore(event)
            return
        self._state.move_to(event.position)

    async def _on_ended(self, event: MediaEnded) -> None:
        if self._state.phase is not PlaybackPhase.PLAYING:
            self._ignore(event)
            return

        self._state.finish()
        logger.info(LogTemplates.PLAYBACK_ENDED, event.resource_id)
        await self._phase_changed(PlaybackPhase.PLAYING)
        await self._notify_completed(event.resource_id)

    def _ignore(self, event: EngineEvent) -> None:
        logger.debug(
            LogTemplates.PLAYBACK_IGNORED_EVENT,
            type(event).__name__,
            event.resource_id,
            self._state.phase.value,
        )

    async def _notify_completed(self, resource_id: str) -> None:
        for callback in list(self._completion_listeners):
            try:
                result = callback(resource_id)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception(LogTemplates.COMPLETION_LISTENER_FAILED, resource_id)

        await self._bus.publish(
            PlaybackCompleted(resource_id=resource_id, duration=self._state.duration or 0.0)
        )

    async def _phase_changed(self, old_phase: PlaybackPhase) -> None:
        new_phase = self._state.phase
        if new_phase is old_phase and new_phase is not PlaybackPhase.LOADING:
            return
        await self._bus.publish(
            PlaybackPhaseChanged(
                resource_id=self._state.resource_id,
                old_phase=old_phase.value,
                new_phase=new_phase.value,
            )
        )
