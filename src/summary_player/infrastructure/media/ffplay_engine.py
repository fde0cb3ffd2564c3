"""Media engine that renders audio with an ffplay subprocess."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from summary_player.application.interfaces.media_engine import MediaEngine
from summary_player.domain.media.events import EngineEvent, MediaEnded, MetadataLoaded, PositionTick
from summary_player.domain.media.services import clamp_position
from summary_player.domain.shared.constants import MediaConstants
from summary_player.domain.shared.messages import LogTemplates
from summary_player.infrastructure.media.ffprobe_resolver import FfprobeDurationResolver

if TYPE_CHECKING:
    from ...application.interfaces.duration_resolver import DurationResolver
    from ...config.settings import MediaSettings
    from ...domain.media.value_objects import MediaResource

logger = logging.getLogger(__name__)

EventHandler = Callable[[EngineEvent], Awaitable[None]]


class FfplayMediaEngine(MediaEngine):
    """Plays one resource at a time through ``ffplay -nodisp``.

    ffplay has no control channel, so pause and seek restart the process at
    the wanted offset. The position is tracked with a monotonic clock from
    the moment the process was started.
    """

    def __init__(
        self,
        settings: MediaSettings | None = None,
        resolver: DurationResolver | None = None,
    ) -> None:
        self._ffplay = settings.ffplay_path if settings else "ffplay"
        self._tick_interval = settings.tick_interval_s if settings else 0.25
        self._resolver = resolver or FfprobeDurationResolver(settings)

        self._handler: EventHandler | None = None
        self._resource: MediaResource | None = None
        self._duration: float | None = None
        self._offset = 0.0
        self._started_at: float | None = None

        self._proc: asyncio.subprocess.Process | None = None
        self._metadata_task: asyncio.Task[None] | None = None
        self._tick_task: asyncio.Task[None] | None = None
        self._watch_task: asyncio.Task[None] | None = None

    def set_event_handler(self, handler: EventHandler) -> None:
        self._handler = handler

    @property
    def current_time(self) -> float:
        if self._started_at is None:
            return self._offset
        elapsed = time.monotonic() - self._started_at
        return clamp_position(self._offset + elapsed, self._duration)

    @property
    def duration(self) -> float | None:
        return self._duration

    @property
    def is_running(self) -> bool:
        return self._proc is not None and self._proc.returncode is None

    async def open(self, resource: MediaResource) -> None:
        await self.stop()
        self._resource = resource
        self._metadata_task = asyncio.create_task(self._load_metadata(resource))
        logger.debug(LogTemplates.ENGINE_OPENED, resource.id)

    async def play(self) -> None:
        if self._resource is None or self.is_running:
            return
        await self._spawn(self._resource)

    async def pause(self) -> None:
        await self._terminate()

    async def seek(self, seconds: float) -> None:
        was_running = self.is_running
        if was_running:
            await self._terminate()
        self._offset = clamp_position(seconds, self._duration)
        if was_running and self._resource is not None:
            await self._spawn(self._resource)

    async def stop(self) -> None:
        if self._metadata_task is not None and not self._metadata_task.done():
            self._metadata_task.cancel()
        self._metadata_task = None
        await self._terminate()
        self._resource = None
        self._duration = None
        self._offset = 0.0

    async def _load_metadata(self, resource: MediaResource) -> None:
        seconds = await self._resolver.resolve(resource)
        if self._resource is not resource:
            return
        if seconds is None:
            logger.warning(LogTemplates.ENGINE_METADATA_FAILED, resource.id)
            return
        self._duration = seconds
        await self._post(MetadataLoaded(resource_id=resource.id, duration=seconds))

    async def _spawn(self, resource: MediaResource) -> None:
        proc = await asyncio.create_subprocess_exec(
            self._ffplay,
            *MediaConstants.FFPLAY_ARGS,
            "-ss",
            f"{self._offset:.3f}",
            "-i",
            resource.source_uri,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        self._proc = proc
        self._started_at = time.monotonic()
        self._tick_task = asyncio.create_task(self._tick_loop(resource.id))
        self._watch_task = asyncio.create_task(self._watch(proc, resource.id))

    async def _terminate(self) -> None:
        proc = self._proc
        # Clearing first tells the watcher this exit was requested.
        self._proc = None
        if self._started_at is not None:
            self._offset = self.current_time
            self._started_at = None
        self._cancel_ticks()

        if proc is None or proc.returncode is not None:
            return
        try:
            proc.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(proc.wait(), timeout=MediaConstants.PROCESS_STOP_GRACE_S)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()

    def _cancel_ticks(self) -> None:
        if self._tick_task is not None and not self._tick_task.done():
            self._tick_task.cancel()
        self._tick_task = None

    async def _tick_loop(self, resource_id: str) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            await self._post(PositionTick(resource_id=resource_id, position=self.current_time))

    async def _watch(self, proc: asyncio.subprocess.Process, resource_id: str) -> None:
        returncode = await proc.wait()
        if self._proc is not proc:
            return

        logger.debug(LogTemplates.ENGINE_PROCESS_EXITED, resource_id, returncode)
        self._proc = None
        self._cancel_ticks()
        self._offset = self._duration if self._duration is not None else self.current_time
        self._started_at = None
        if returncode == 0:
            await self._post(MediaEnded(resource_id=resource_id))

    async def _post(self, event: EngineEvent) -> None:
        if self._handler is None:
            return
        try:
            await self._handler(event)
        except Exception:
            logger.exception(LogTemplates.ENGINE_HANDLER_FAILED, type(event).__name__)
