"""Process-wide, append-only cache of resolved media durations."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ...domain.media.entities import DurationCacheEntry
from ...domain.media.value_objects import DurationStatus
from ...domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.media.value_objects import MediaResource
    from ..interfaces.duration_resolver import DurationResolver

logger = logging.getLogger(__name__)


class DurationCache:
    """Owns every duration entry ever requested.

    Entries are created PENDING, settle once to RESOLVED or FAILED, and are
    never removed or downgraded. At most one resolution per resource id is
    in flight; later callers for the same id join it.
    """

    def __init__(self, resolver: DurationResolver) -> None:
        self._resolver = resolver
        self._entries: dict[str, DurationCacheEntry] = {}
        self._inflight: dict[str, asyncio.Task[DurationCacheEntry]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._entries

    def get(self, resource_id: str) -> DurationCacheEntry | None:
        return self._entries.get(resource_id)

    def duration_of(self, resource_id: str) -> float | None:
        """Resolved duration in seconds, or None while pending, failed or unknown."""
        entry = self._entries.get(resource_id)
        if entry is None or entry.status is not DurationStatus.RESOLVED:
            return None
        return entry.seconds

    def is_inflight(self, resource_id: str) -> bool:
        return resource_id in self._inflight

    def snapshot(self) -> dict[str, float | None]:
        return {rid: self.duration_of(rid) for rid in self._entries}

    async def ensure(self, resource: MediaResource) -> DurationCacheEntry:
        """Return the terminal entry for a resource, resolving it at most once."""
        entry = self._entries.get(resource.id)
        if entry is not None and entry.is_terminal:
            logger.debug(LogTemplates.CACHE_HIT, resource.id, entry.status.value)
            return entry

        task = self._inflight.get(resource.id)
        if task is None:
            self._entries[resource.id] = DurationCacheEntry.pending(resource.id)
            task = asyncio.create_task(self._resolve(resource))
            self._inflight[resource.id] = task
        else:
            logger.debug(LogTemplates.CACHE_JOIN_INFLIGHT, resource.id)

        # A cancelled waiter must not cancel the shared resolution.
        return await asyncio.shield(task)

    async def _resolve(self, resource: MediaResource) -> DurationCacheEntry:
        logger.debug(LogTemplates.DURATION_RESOLVING, resource.id)
        try:
            seconds = await self._resolver.resolve(resource)
        except Exception:
            logger.exception(LogTemplates.DURATION_RESOLVER_CRASHED, resource.id)
            seconds = None

        try:
            pending = self._entries[resource.id]
            try:
                settled = pending.settle(seconds)
            except (TypeError, ValueError):
                logger.exception(LogTemplates.DURATION_UNUSABLE, resource.id, seconds)
                settled = pending.settle(None)
            self._entries[resource.id] = settled
        finally:
            self._inflight.pop(resource.id, None)

        if settled.status is DurationStatus.RESOLVED:
            logger.debug(LogTemplates.DURATION_RESOLVED, resource.id, settled.seconds)
        else:
            logger.warning(LogTemplates.DURATION_FAILED, resource.id)
        return settled


_duration_cache: DurationCache | None = None


def get_duration_cache(resolver: DurationResolver | None = None) -> DurationCache:
    """Get or create the process-wide duration cache.

    The first call must supply the resolver; later calls return the same cache.
    """
    global _duration_cache
    if _duration_cache is None:
        if resolver is None:
            raise RuntimeError(ErrorMessages.DURATION_CACHE_NOT_CONFIGURED)
        _duration_cache = DurationCache(resolver)
    return _duration_cache


def reset_duration_cache() -> None:
    """Drop the process-wide cache (for testing)."""
    global _duration_cache
    _duration_cache = None
