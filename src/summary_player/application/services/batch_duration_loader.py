"""Fan-out duration loading for a page's list of resources."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from ...domain.media.services import format_duration
from ...domain.shared.events import DurationsUpdated, EventBus, get_event_bus
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.media.value_objects import MediaResource
    from .duration_cache import DurationCache

logger = logging.getLogger(__name__)

DurationMap = dict[str, float | None]
DurationSubscriber = Callable[[DurationMap], Any]


class BatchDurationLoader:
    """Resolves durations for the resources currently shown and publishes them.

    Every settlement republishes the whole mapping for the current resource
    list, so subscribers always see every finished entry and ``None`` for the
    rest. One failing resource only shows up as ``None``.
    """

    def __init__(self, *, duration_cache: DurationCache, event_bus: EventBus | None = None) -> None:
        self._cache = duration_cache
        self._bus = event_bus or get_event_bus()
        self._subscribers: list[DurationSubscriber] = []
        self._resource_ids: list[str] = []

    def subscribe(self, callback: DurationSubscriber) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: DurationSubscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @property
    def durations(self) -> DurationMap:
        return {rid: self._cache.duration_of(rid) for rid in self._resource_ids}

    def label_for(self, resource_id: str) -> str:
        return format_duration(self._cache.duration_of(resource_id))

    async def load(self, resources: Sequence[MediaResource]) -> DurationMap:
        """Resolve every resource not yet cached and return the final mapping."""
        by_id: dict[str, MediaResource] = {}
        for resource in resources:
            by_id.setdefault(resource.id, resource)
        unique = list(by_id.values())
        self._resource_ids = list(by_id)

        outstanding = [r for r in unique if not self._is_settled(r.id)]
        fresh = sum(1 for r in outstanding if r.id not in self._cache)
        logger.info(LogTemplates.BATCH_STARTED, len(unique), fresh)

        await self._publish()

        if outstanding:
            async with asyncio.TaskGroup() as tg:
                for resource in outstanding:
                    tg.create_task(self._settle(resource))

        mapping = self.durations
        resolved = sum(1 for v in mapping.values() if v is not None)
        logger.info(LogTemplates.BATCH_FINISHED, resolved, len(mapping) - resolved)
        return mapping

    def _is_settled(self, resource_id: str) -> bool:
        entry = self._cache.get(resource_id)
        return entry is not None and entry.is_terminal

    async def _settle(self, resource: MediaResource) -> None:
        # One resource must never cancel its siblings in the task group.
        try:
            await self._cache.ensure(resource)
        except Exception:
            logger.exception(LogTemplates.BATCH_ITEM_FAILED, resource.id)
        await self._publish()

    async def _publish(self) -> None:
        mapping = self.durations
        for callback in list(self._subscribers):
            try:
                result = callback(dict(mapping))
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception(LogTemplates.SUBSCRIBER_FAILED)

        await self._bus.publish(DurationsUpdated(durations=mapping))
