"""Port interface for probing the duration of a media resource."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.media.value_objects import MediaResource


class DurationResolver(ABC):
    """Interface for reading a resource's total duration from its metadata."""

    @abstractmethod
    async def resolve(self, resource: "MediaResource") -> float | None:
        """Return the duration in seconds, or None if it could not be determined.

        One attempt per call; implementations never retry and never raise for
        loading errors.
        """
        ...
