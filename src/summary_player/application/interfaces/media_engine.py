"""Port interface for the audio engine that actually renders a resource."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.media.events import EngineEvent
    from ...domain.media.value_objects import MediaResource


class MediaEngine(ABC):
    """Interface for a single-resource audio element.

    The engine reports progress by posting ``MetadataLoaded``, ``PositionTick``
    and ``MediaEnded`` events to the handler set with ``set_event_handler``;
    each event is tagged with the id of the resource it belongs to.
    """

    @abstractmethod
    def set_event_handler(self, handler: Callable[["EngineEvent"], Awaitable[None]]) -> None:
        """Set the coroutine that receives engine events."""
        ...

    @abstractmethod
    async def open(self, resource: "MediaResource") -> None:
        """Start loading a resource, abandoning whatever was open before."""
        ...

    @abstractmethod
    async def play(self) -> None:
        """Start or resume rendering from the current time."""
        ...

    @abstractmethod
    async def pause(self) -> None:
        """Pause rendering, keeping the current time."""
        ...

    @abstractmethod
    async def seek(self, seconds: float) -> None:
        """Move the current time."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop rendering and release the resource."""
        ...

    @property
    @abstractmethod
    def current_time(self) -> float:
        ...

    @property
    @abstractmethod
    def duration(self) -> float | None:
        ...
