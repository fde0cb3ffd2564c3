"""Read side of a user's saved and finished collections."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ...domain.library.entities import Book
from ...domain.library.repository import CollectionPaths
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.library.repository import PersistenceGateway
    from .batch_duration_loader import BatchDurationLoader

logger = logging.getLogger(__name__)


class LibraryView(BaseModel):
    """Everything the library page shows for one user."""

    model_config = ConfigDict(frozen=True)

    saved: list[Book] = Field(default_factory=list)
    finished: list[Book] = Field(default_factory=list)
    durations: dict[str, float | None] = Field(default_factory=dict)

    @property
    def saved_count(self) -> int:
        return len(self.saved)

    @property
    def finished_count(self) -> int:
        return len(self.finished)


class LibraryService:
    def __init__(self, *, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def is_saved(self, user_id: str | None, book_id: str) -> bool:
        """Whether the book is in the user's library; read errors count as not saved."""
        if not user_id:
            return False
        try:
            document = await self._gateway.read(CollectionPaths.library(user_id), book_id)
        except Exception:
            logger.exception(LogTemplates.LIBRARY_READ_FAILED, "library entry", user_id)
            return False
        return document is not None

    async def saved_books(self, user_id: str | None) -> list[Book]:
        if not user_id:
            return []
        return await self._read_books(CollectionPaths.library(user_id), user_id)

    async def finished_books(self, user_id: str | None) -> list[Book]:
        if not user_id:
            return []
        return await self._read_books(CollectionPaths.finished(user_id), user_id)

    async def library_with_durations(
        self, user_id: str | None, loader: BatchDurationLoader
    ) -> LibraryView:
        """Saved and finished books plus durations for every one that has audio."""
        saved = await self.saved_books(user_id)
        finished = await self.finished_books(user_id)

        resources = [
            book.media_resource for book in [*saved, *finished] if book.media_resource is not None
        ]
        durations = await loader.load(resources) if resources else {}
        return LibraryView(saved=saved, finished=finished, durations=durations)

    async def _read_books(self, collection_path: str, user_id: str) -> list[Book]:
        try:
            documents = await self._gateway.read_all(collection_path)
        except Exception:
            logger.exception(LogTemplates.LIBRARY_READ_FAILED, collection_path, user_id)
            return []

        books: list[Book] = []
        for record_id, fields in documents.items():
            book = self._to_book(record_id, fields)
            if book is not None:
                books.append(book)
        return books

    @staticmethod
    def _to_book(record_id: str, fields: dict[str, Any]) -> Book | None:
        try:
            return Book.model_validate({**fields, "id": record_id})
        except PydanticValidationError as e:
            logger.warning(LogTemplates.LIBRARY_SKIPPED_RECORD, record_id, e)
            return None
