"""
Unit Tests for LibraryToggle

Tests for:
- Optimistic flag flip before persistence completes
- Rollback and error notice when the latest write fails
- Last intent wins across rapid toggles
- Stale failures never roll back a newer intent
- Authentication required for anonymous visitors
"""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from summary_player.application.interfaces.auth_provider import StaticAuthProvider
from summary_player.application.services.library_toggle import LibraryToggle, ToggleStatus
from summary_player.domain.library.repository import PersistenceGateway
from summary_player.domain.shared.events import EventBus, LibraryMembershipChanged
from summary_player.domain.shared.exceptions import PersistenceError


class ScriptedGateway(PersistenceGateway):
    """Gateway whose writes and deletes can be held open or made to fail."""

    def __init__(self) -> None:
        self.documents: dict[tuple[str, str], dict[str, Any]] = {}
        self.operations: list[tuple[str, str]] = []
        self.hold: asyncio.Event | None = None
        self.fail_next = 0

    async def _step(self, op: str, record_id: str) -> None:
        self.operations.append((op, record_id))
        if self.hold is not None:
            await self.hold.wait()
        if self.fail_next:
            self.fail_next -= 1
            raise PersistenceError(op, record_id)

    async def write(self, collection_path, record_id, fields, merge=True) -> None:
        await self._step("write", record_id)
        self.documents[(collection_path, record_id)] = dict(fields)

    async def delete(self, collection_path, record_id) -> bool:
        await self._step("delete", record_id)
        return self.documents.pop((collection_path, record_id), None) is not None

    async def read(self, collection_path, record_id):
        return self.documents.get((collection_path, record_id))

    async def read_all(self, collection_path):
        return {rid: f for (path, rid), f in self.documents.items() if path == collection_path}


@pytest.fixture
def gateway():
    return ScriptedGateway()


@pytest.fixture
def auth():
    return StaticAuthProvider("u1")


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def toggle(gateway, auth, event_bus):
    return LibraryToggle(gateway=gateway, auth=auth, event_bus=event_bus)


def _saved(gateway: ScriptedGateway, book_id: str) -> bool:
    return ("users/u1/library", book_id) in gateway.documents


class TestLibraryToggleBasics:
    """Tests for single toggles."""

    @pytest.mark.asyncio
    async def test_save_persists_book_with_saved_at(self, toggle, gateway, sample_book):
        result = await toggle.toggle(sample_book, current_saved=False)

        assert result.status is ToggleStatus.SAVED
        assert result.is_success
        assert result.saved is True
        document = gateway.documents[("users/u1/library", sample_book.id)]
        assert document["title"] == sample_book.title
        assert document["savedAt"].endswith("Z")
        assert toggle.is_saved(sample_book.id) is True

    @pytest.mark.asyncio
    async def test_unsave_deletes(self, toggle, gateway, sample_book):
        await toggle.toggle(sample_book, current_saved=False)

        result = await toggle.toggle(sample_book, current_saved=True)

        assert result.status is ToggleStatus.UNSAVED
        assert not _saved(gateway, sample_book.id)
        assert toggle.is_saved(sample_book.id) is False

    @pytest.mark.asyncio
    async def test_flag_flips_before_write_completes(self, toggle, gateway, sample_book):
        """The UI sees the new flag immediately, before persistence answers."""
        gateway.hold = asyncio.Event()
        changes: list[tuple[str, bool]] = []
        toggle.set_on_change_callback(lambda book_id, saved: changes.append((book_id, saved)))

        task = asyncio.create_task(toggle.toggle(sample_book, current_saved=False))
        await asyncio.sleep(0)

        assert changes == [(sample_book.id, True)]
        assert toggle.is_saved(sample_book.id) is True
        assert not task.done()

        gateway.hold.set()
        assert (await task).status is ToggleStatus.SAVED

    @pytest.mark.asyncio
    async def test_confirmed_change_published(self, toggle, event_bus, sample_book):
        received: list[LibraryMembershipChanged] = []

        async def handler(event: LibraryMembershipChanged) -> None:
            received.append(event)

        event_bus.subscribe(LibraryMembershipChanged, handler)

        await toggle.toggle(sample_book, current_saved=False)

        assert [(e.book_id, e.saved, e.confirmed) for e in received] == [
            (sample_book.id, True, True)
        ]

    def test_remember_seeds_flag(self, toggle, sample_book):
        toggle.remember(sample_book.id, True)

        assert toggle.is_saved(sample_book.id) is True


class TestLibraryToggleFailures:
    """Tests for rollback on persistence failure."""

    @pytest.mark.asyncio
    async def test_failed_save_rolls_back(self, toggle, gateway, sample_book):
        gateway.fail_next = 1
        changes: list[bool] = []
        errors: list[str] = []
        toggle.set_on_change_callback(lambda _id, saved: changes.append(saved))
        toggle.set_on_error_callback(lambda _id, message: errors.append(message))

        result = await toggle.toggle(sample_book, current_saved=False)

        assert result.status is ToggleStatus.ROLLED_BACK
        assert result.saved is False
        assert changes == [True, False]
        assert errors == [result.message]
        assert "Could not add" in result.message
        assert toggle.is_saved(sample_book.id) is False
        assert not _saved(gateway, sample_book.id)

    @pytest.mark.asyncio
    async def test_failed_unsave_rolls_back_to_saved(self, toggle, gateway, sample_book):
        await toggle.toggle(sample_book, current_saved=False)
        gateway.fail_next = 1

        result = await toggle.toggle(sample_book, current_saved=True)

        assert result.status is ToggleStatus.ROLLED_BACK
        assert result.saved is True
        assert "Could not remove" in result.message
        assert toggle.is_saved(sample_book.id) is True
        assert _saved(gateway, sample_book.id)

    @pytest.mark.asyncio
    async def test_async_callbacks_awaited(self, toggle, gateway, sample_book):
        gateway.fail_next = 1
        on_error = AsyncMock()
        toggle.set_on_error_callback(on_error)

        await toggle.toggle(sample_book, current_saved=False)

        on_error.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_broken_callback_does_not_break_toggle(self, toggle, gateway, sample_book):
        toggle.set_on_change_callback(MagicMock(side_effect=RuntimeError("render failed")))

        result = await toggle.toggle(sample_book, current_saved=False)

        assert result.status is ToggleStatus.SAVED
        assert _saved(gateway, sample_book.id)


class TestLibraryToggleConcurrency:
    """Rapid toggles persist the last intent."""

    @pytest.mark.asyncio
    async def test_three_rapid_toggles_end_saved(self, toggle, gateway, sample_book):
        """save, unsave, save in quick succession leaves the book saved."""
        gateway.hold = asyncio.Event()

        first = asyncio.create_task(toggle.toggle(sample_book, current_saved=False))
        await asyncio.sleep(0)
        second = asyncio.create_task(toggle.toggle(sample_book, current_saved=True))
        await asyncio.sleep(0)
        third = asyncio.create_task(toggle.toggle(sample_book, current_saved=False))
        await asyncio.sleep(0)

        assert toggle.is_saved(sample_book.id) is True

        gateway.hold.set()
        results = await asyncio.gather(first, second, third)

        assert [r.status for r in results] == [
            ToggleStatus.SAVED,
            ToggleStatus.SUPERSEDED,
            ToggleStatus.SAVED,
        ]
        assert gateway.operations == [("write", sample_book.id), ("write", sample_book.id)]
        assert _saved(gateway, sample_book.id)
        assert toggle.is_saved(sample_book.id) is True

    @pytest.mark.asyncio
    async def test_two_rapid_toggles_end_unsaved(self, toggle, gateway, sample_book):
        gateway.hold = asyncio.Event()

        first = asyncio.create_task(toggle.toggle(sample_book, current_saved=False))
        await asyncio.sleep(0)
        second = asyncio.create_task(toggle.toggle(sample_book, current_saved=True))
        await asyncio.sleep(0)

        gateway.hold.set()
        await asyncio.gather(first, second)

        assert not _saved(gateway, sample_book.id)
        assert toggle.is_saved(sample_book.id) is False

    @pytest.mark.asyncio
    async def test_stale_failure_does_not_roll_back(self, toggle, gateway, sample_book):
        """A failed write that was already overtaken leaves the newer intent alone."""
        gateway.hold = asyncio.Event()
        gateway.fail_next = 1
        errors: list[str] = []
        toggle.set_on_error_callback(lambda _id, message: errors.append(message))

        first = asyncio.create_task(toggle.toggle(sample_book, current_saved=False))
        await asyncio.sleep(0)
        second = asyncio.create_task(toggle.toggle(sample_book, current_saved=True))
        await asyncio.sleep(0)

        gateway.hold.set()
        stale, latest = await asyncio.gather(first, second)

        assert stale.status is ToggleStatus.SUPERSEDED
        assert latest.status is ToggleStatus.UNSAVED
        assert errors == []
        assert toggle.is_saved(sample_book.id) is False

    @pytest.mark.asyncio
    async def test_different_books_do_not_interfere(self, toggle, gateway, sample_book, premium_book):
        await asyncio.gather(
            toggle.toggle(sample_book, current_saved=False),
            toggle.toggle(premium_book, current_saved=False),
        )

        assert _saved(gateway, sample_book.id)
        assert _saved(gateway, premium_book.id)


class TestLibraryToggleBookkeeping:
    """Per-key counters and locks do not outlive their toggles."""

    @staticmethod
    def _assert_released(toggle: LibraryToggle) -> None:
        assert toggle._intents == {}
        assert toggle._locks == {}
        assert toggle._pending == {}

    @pytest.mark.asyncio
    async def test_keys_kept_while_toggle_in_flight(self, toggle, gateway, sample_book):
        gateway.hold = asyncio.Event()

        task = asyncio.create_task(toggle.toggle(sample_book, current_saved=False))
        await asyncio.sleep(0)

        assert ("u1", sample_book.id) in toggle._locks
        assert toggle._intents[("u1", sample_book.id)] == 1

        gateway.hold.set()
        await task

        self._assert_released(toggle)

    @pytest.mark.asyncio
    async def test_rapid_toggles_across_books_leave_nothing_behind(
        self, toggle, gateway, sample_book, premium_book
    ):
        gateway.hold = asyncio.Event()
        tasks = []
        for current in (False, True, False, True):
            for book in (sample_book, premium_book):
                tasks.append(asyncio.create_task(toggle.toggle(book, current_saved=current)))
                await asyncio.sleep(0)

        gateway.hold.set()
        await asyncio.gather(*tasks)

        self._assert_released(toggle)
        assert not _saved(gateway, sample_book.id)
        assert toggle.is_saved(premium_book.id) is False

    @pytest.mark.asyncio
    async def test_released_after_rollback(self, toggle, gateway, sample_book):
        gateway.fail_next = 1

        result = await toggle.toggle(sample_book, current_saved=False)

        assert result.status is ToggleStatus.ROLLED_BACK
        self._assert_released(toggle)

    @pytest.mark.asyncio
    async def test_toggle_after_release_still_persists(self, toggle, gateway, sample_book):
        await toggle.toggle(sample_book, current_saved=False)
        self._assert_released(toggle)

        result = await toggle.toggle(sample_book, current_saved=True)

        assert result.status is ToggleStatus.UNSAVED
        assert not _saved(gateway, sample_book.id)
        self._assert_released(toggle)


class TestLibraryToggleAuth:
    """Anonymous visitors are sent to log in."""

    @pytest.mark.asyncio
    async def test_anonymous_gets_auth_required(self, gateway, event_bus, sample_book):
        prompts: list[str] = []
        toggle = LibraryToggle(gateway=gateway, auth=StaticAuthProvider(), event_bus=event_bus)
        toggle.set_on_auth_required_callback(prompts.append)

        result = await toggle.toggle(sample_book, current_saved=False)

        assert result.status is ToggleStatus.AUTH_REQUIRED
        assert result.saved is False
        assert prompts == [sample_book.id]
        assert gateway.operations == []
        assert toggle.is_saved(sample_book.id) is False

    @pytest.mark.asyncio
    async def test_flags_are_per_user(self, gateway, event_bus, sample_book):
        auth = StaticAuthProvider("u1")
        toggle = LibraryToggle(gateway=gateway, auth=auth, event_bus=event_bus)
        await toggle.toggle(sample_book, current_saved=False)

        auth.sign_in("u2")

        assert toggle.is_saved(sample_book.id) is False
