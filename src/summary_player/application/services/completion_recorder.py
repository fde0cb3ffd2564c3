"""Best-effort persistence of "finished listening" facts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.library.entities import Book, CompletionRecord
from ...domain.library.repository import CollectionPaths
from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.events import BookFinished, EventBus, get_event_bus
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.library.repository import PersistenceGateway
    from ..interfaces.auth_provider import AuthProvider
    from ..interfaces.catalog_service import CatalogService
    from .playback_controller import PlaybackController

logger = logging.getLogger(__name__)


class CompletionRecorder:
    """Writes ``users/{uid}/finished/{bookId}`` whenever playback reaches the end.

    Writes overwrite: replaying a book moves ``finishedAt`` forward and leaves
    one record. Failures are logged and never reach playback.
    """

    def __init__(
        self,
        *,
        gateway: PersistenceGateway,
        catalog: CatalogService | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._gateway = gateway
        self._catalog = catalog
        self._bus = event_bus or get_event_bus()

    async def record_completion(self, user_id: str | None, book: Book) -> bool:
        """Record that ``user_id`` finished ``book``; returns whether a record was written."""
        if not user_id:
            logger.debug(LogTemplates.COMPLETION_SKIPPED_ANONYMOUS, book.id)
            return False

        record = CompletionRecord(user_id=user_id, book_id=book.id, finished_at=utcnow())
        try:
            await self._gateway.write(
                CollectionPaths.finished(user_id),
                book.id,
                record.to_fields(book),
                merge=True,
            )
        except Exception:
            logger.exception(LogTemplates.COMPLETION_FAILED, book.id, user_id)
            return False

        logger.info(LogTemplates.COMPLETION_RECORDED, book.id, user_id)
        await self._bus.publish(BookFinished(user_id=user_id, book_id=book.id))
        return True

    def bind(self, controller: PlaybackController, auth: AuthProvider) -> None:
        """Record a completion for the signed-in user every time ``controller`` reaches the end."""

        async def on_completed(resource_id: str) -> None:
            user_id = auth.current_user_id()
            if not user_id:
                logger.debug(LogTemplates.COMPLETION_SKIPPED_ANONYMOUS, resource_id)
                return
            book = await self._book_for(controller, resource_id)
            await self.record_completion(user_id, book)

        controller.on_completed(on_completed)

    async def _book_for(self, controller: PlaybackController, resource_id: str) -> Book:
        book = controller.current_book
        if book is not None and book.id == resource_id:
            return book

        if self._catalog is not None:
            try:
                fetched = await self._catalog.get_book(resource_id)
                if fetched is not None:
                    return fetched
            except Exception:
                logger.exception("Catalog lookup failed for '%s'", resource_id)

        logger.debug(LogTemplates.COMPLETION_BOOK_UNKNOWN, resource_id)
        return Book(id=resource_id)
