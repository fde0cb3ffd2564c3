"""Optimistic save/unsave of books in a user's library."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from ...domain.library.entities import LibraryMembership
from ...domain.library.repository import CollectionPaths
from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.events import EventBus, LibraryMembershipChanged, get_event_bus
from ...domain.shared.messages import LogTemplates, UserMessages

if TYPE_CHECKING:
    from ...domain.library.entities import Book
    from ...domain.library.repository import PersistenceGateway
    from ..interfaces.auth_provider import AuthProvider

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str, bool], Any]
ErrorCallback = Callable[[str, str], Any]
AuthRequiredCallback = Callable[[str], Any]


class ToggleStatus(Enum):
    """Outcome of one toggle request."""

    SAVED = "saved"
    UNSAVED = "unsaved"
    SUPERSEDED = "superseded"
    ROLLED_BACK = "rolled_back"
    AUTH_REQUIRED = "auth_required"


class ToggleResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: ToggleStatus
    book_id: str
    saved: bool
    message: str = ""

    @property
    def is_success(self) -> bool:
        return self.status in {ToggleStatus.SAVED, ToggleStatus.UNSAVED}


class LibraryToggle:
    """Flips the saved flag immediately, then persists the last intent.

    Each toggle bumps an intent counter for its (user, book) key. Writes for
    one key run one at a time; a write whose intent was overtaken before it
    started is skipped, and a failed write only rolls the flag back when no
    newer intent exists. Per-key bookkeeping is dropped once no toggle for
    that key is in flight.
    """

    def __init__(
        self,
        *,
        gateway: PersistenceGateway,
        auth: AuthProvider,
        event_bus: EventBus | None = None,
    ) -> None:
        self._gateway = gateway
        self._auth = auth
        self._bus = event_bus or get_event_bus()
        self._saved: dict[tuple[str, str], bool] = {}
        self._intents: dict[tuple[str, str], int] = defaultdict(int)
        self._locks: dict[tuple[str, str], asyncio.Lock] = defaultdict(asyncio.Lock)
        self._pending: dict[tuple[str, str], int] = defaultdict(int)

        self._on_change: ChangeCallback | None = None
        self._on_error: ErrorCallback | None = None
        self._on_auth_required: AuthRequiredCallback | None = None

    def set_on_change_callback(self, callback: ChangeCallback) -> None:
        self._on_change = callback

    def set_on_error_callback(self, callback: ErrorCallback) -> None:
        self._on_error = callback

    def set_on_auth_required_callback(self, callback: AuthRequiredCallback) -> None:
        self._on_auth_required = callback

    def is_saved(self, book_id: str, default: bool = False) -> bool:
        """The locally observed flag for the signed-in user."""
        user_id = self._auth.current_user_id()
        if not user_id:
            return False
        return self._saved.get((user_id, book_id), default)

    def remember(self, book_id: str, saved: bool) -> None:
        """Seed the local flag with a value read from persistence."""
        user_id = self._auth.current_user_id()
        if user_id:
            self._saved[(user_id, book_id)] = saved

    async def toggle(self, book: Book, current_saved: bool) -> ToggleResult:
        user_id = self._auth.current_user_id()
        if not user_id:
            logger.info(LogTemplates.TOGGLE_AUTH_REQUIRED, book.id)
            await self._call(self._on_auth_required, book.id)
            return ToggleResult(
                status=ToggleStatus.AUTH_REQUIRED,
                book_id=book.id,
                saved=current_saved,
                message=UserMessages.LOGIN_REQUIRED,
            )

        key = (user_id, book.id)
        self._intents[key] += 1
        self._pending[key] += 1
        try:
            return await self._apply(key, book, current_saved, self._intents[key])
        finally:
            self._release(key)

    async def _apply(
        self, key: tuple[str, str], book: Book, previous: bool, intent: int
    ) -> ToggleResult:
        user_id = key[0]
        target = not previous
        self._saved[key] = target
        action = "save" if target else "unsave"
        logger.debug(LogTemplates.TOGGLE_OPTIMISTIC, action, book.id, user_id, intent)
        await self._call(self._on_change, book.id, target)

        async with self._locks[key]:
            latest = self._intents[key]
            if latest != intent:
                logger.debug(LogTemplates.TOGGLE_SUPERSEDED, book.id, intent, latest)
                return ToggleResult(
                    status=ToggleStatus.SUPERSEDED, book_id=book.id, saved=self._saved[key]
                )

            try:
                await self._persist(user_id, book, target)
            except Exception:
                logger.exception(LogTemplates.TOGGLE_FAILED, action, book.id, user_id, intent)
                return await self._handle_failure(key, book, intent, previous, target)

        logger.info(LogTemplates.TOGGLE_WRITTEN, action, book.id, user_id, intent)
        await self._bus.publish(
            LibraryMembershipChanged(user_id=user_id, book_id=book.id, saved=target, confirmed=True)
        )
        return ToggleResult(
            status=ToggleStatus.SAVED if target else ToggleStatus.UNSAVED,
            book_id=book.id,
            saved=target,
        )

    def _release(self, key: tuple[str, str]) -> None:
        self._pending[key] -= 1
        if self._pending[key]:
            return
        # Nothing is queued for this key, so its counter may restart from zero.
        del self._pending[key]
        self._intents.pop(key, None)
        self._locks.pop(key, None)

    async def _persist(self, user_id: str, book: Book, saved: bool) -> None:
        collection = CollectionPaths.library(user_id)
        if saved:
            membership = LibraryMembership(
                user_id=user_id, book_id=book.id, saved=True, saved_at=utcnow()
            )
            await self._gateway.write(collection, book.id, membership.to_fields(book), merge=True)
        else:
            await self._gateway.delete(collection, book.id)

    async def _handle_failure(
        self,
        key: tuple[str, str],
        book: Book,
        intent: int,
        previous: bool,
        target: bool,
    ) -> ToggleResult:
        latest = self._intents[key]
        if latest != intent:
            logger.info(LogTemplates.TOGGLE_STALE_FAILURE, book.id, intent, latest)
            return ToggleResult(
                status=ToggleStatus.SUPERSEDED, book_id=book.id, saved=self._saved[key]
            )

        self._saved[key] = previous
        logger.info(LogTemplates.TOGGLE_ROLLED_BACK, book.id, previous)
        message = UserMessages.SAVE_FAILED if target else UserMessages.UNSAVE_FAILED
        await self._call(self._on_change, book.id, previous)
        await self._call(self._on_error, book.id, message)
        return ToggleResult(
            status=ToggleStatus.ROLLED_BACK, book_id=book.id, saved=previous, message=message
        )

    @staticmethod
    async def _call(callback: Callable[..., Any] | None, *args: Any) -> None:
        if callback is None:
            return
        try:
            result = callback(*args)
            if asyncio.iscoroutine(result):
                await result
        except Exception:
            logger.exception(LogTemplates.TOGGLE_CALLBACK_FAILED)
