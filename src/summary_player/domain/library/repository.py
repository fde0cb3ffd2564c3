"""
Library Domain Repository Interfaces

The persistence gateway is a keyed document store: documents live under
slash-separated collection paths and are addressed by record id.
Implementations live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from summary_player.domain.shared.messages import ErrorMessages


class CollectionPaths:
    """Collection paths used by the library and completion records."""

    LIBRARY = "users/{uid}/library"
    FINISHED = "users/{uid}/finished"

    @classmethod
    def library(cls, user_id: str) -> str:
        return cls.LIBRARY.format(uid=user_id)

    @classmethod
    def finished(cls, user_id: str) -> str:
        return cls.FINISHED.format(uid=user_id)

    @staticmethod
    def validate(path: str) -> str:
        """A collection path alternates collection/document segments and ends on a collection."""
        segments = [s for s in path.split("/") if s]
        if not segments or len(segments) % 2 == 0:
            raise ValueError(ErrorMessages.INVALID_COLLECTION_PATH.format(path=path))
        return "/".join(segments)


class PersistenceGateway(ABC):
    """Abstract keyed document store.

    Every method may raise ``PersistenceError``; callers decide whether the
    failure is surfaced or swallowed.
    """

    @abstractmethod
    async def write(
        self,
        collection_path: str,
        record_id: str,
        fields: dict[str, Any],
        merge: bool = True,
    ) -> None:
        """Create or update a document.

        Args:
            collection_path: Collection the document belongs to.
            record_id: Document id within the collection.
            fields: Field values to store.
            merge: If True, combine with existing fields; otherwise replace them.
        """
        ...

    @abstractmethod
    async def delete(self, collection_path: str, record_id: str) -> bool:
        """Delete a document.

        Returns:
            True if a document was deleted, False if it did not exist.
        """
        ...

    @abstractmethod
    async def read(self, collection_path: str, record_id: str) -> dict[str, Any] | None:
        """Read one document, or None if it does not exist."""
        ...

    @abstractmethod
    async def read_all(self, collection_path: str) -> dict[str, dict[str, Any]]:
        """Read every document in a collection, keyed by record id."""
        ...
