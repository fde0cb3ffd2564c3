import asyncio
from collections.abc import Awaitable, Callable

import pytest
import pytest_asyncio

from summary_player.application.interfaces.duration_resolver import DurationResolver
from summary_player.application.interfaces.media_engine import MediaEngine
from summary_player.domain.media.events import EngineEvent
from summary_player.domain.media.value_objects import MediaResource

# ============================================================================
# Global State
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Give every test a fresh event bus and duration cache."""
    from summary_player.application.services.duration_cache import reset_duration_cache
    from summary_player.config.settings import clear_settings_cache
    from summary_player.domain.shared.events import reset_event_bus

    reset_event_bus()
    reset_duration_cache()
    clear_settings_cache()
    yield
    reset_event_bus()
    reset_duration_cache()
    clear_settings_cache()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from summary_player.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def document_gateway(in_memory_database):
    """Create a document gateway with in-memory database."""
    from summary_player.infrastructure.persistence.repositories.document_gateway import (
        SQLiteDocumentGateway,
    )

    return SQLiteDocumentGateway(in_memory_database)


# ============================================================================
# Media Fakes
# ============================================================================


class FakeResolver(DurationResolver):
    """Resolver that answers from a table and counts calls per resource id.

    Resources listed in ``gated`` block until the test releases them.
    """

    def __init__(self, durations: dict[str, float | None] | None = None) -> None:
        self.durations = durations or {}
        self.calls: dict[str, int] = {}
        self.gated: dict[str, asyncio.Event] = {}
        self.errors: dict[str, Exception] = {}

    def gate(self, resource_id: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gated[resource_id] = event
        return event

    async def resolve(self, resource: MediaResource) -> float | None:
        self.calls[resource.id] = self.calls.get(resource.id, 0) + 1
        if resource.id in self.gated:
            await self.gated[resource.id].wait()
        if resource.id in self.errors:
            raise self.errors[resource.id]
        return self.durations.get(resource.id)


class FakeEngine(MediaEngine):
    """Engine that records commands; tests post events through ``emit``."""

    def __init__(self) -> None:
        self.handler: Callable[[EngineEvent], Awaitable[None]] | None = None
        self.commands: list[tuple[str, object]] = []
        self.opened: list[MediaResource] = []
        self._time = 0.0
        self._duration: float | None = None

    def set_event_handler(self, handler: Callable[[EngineEvent], Awaitable[None]]) -> None:
        self.handler = handler

    async def emit(self, event: EngineEvent) -> None:
        assert self.handler is not None
        await self.handler(event)

    async def open(self, resource: MediaResource) -> None:
        self.opened.append(resource)
        self.commands.append(("open", resource.id))
        self._time = 0.0

    async def play(self) -> None:
        self.commands.append(("play", None))

    async def pause(self) -> None:
        self.commands.append(("pause", None))

    async def seek(self, seconds: float) -> None:
        self.commands.append(("seek", seconds))
        self._time = seconds

    async def stop(self) -> None:
        self.commands.append(("stop", None))

    @property
    def current_time(self) -> float:
        return self._time

    @property
    def duration(self) -> float | None:
        return self._duration


@pytest.fixture
def fake_resolver():
    return FakeResolver()


@pytest.fixture
def fake_engine():
    return FakeEngine()


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


@pytest.fixture
def sample_book():
    """A free catalog book with audio."""
    from summary_player.domain.library.entities import Book

    return Book.model_validate(
        {
            "id": "f9gy1gpai8",
            "title": "How to Win Friends and Influence People",
            "author": "Dale Carnegie",
            "subTitle": "Time-tested advice",
            "imageLink": "https://example.com/cover.png",
            "audioLink": "https://example.com/audio.mp3",
            "averageRating": 4.4,
            "totalRating": 12,
            "keyIdeas": 8,
            "subscriptionRequired": False,
            "status": "selected",
        }
    )


@pytest.fixture
def premium_book():
    """A book that needs a subscription."""
    from summary_player.domain.library.entities import Book

    return Book.model_validate(
        {
            "id": "5bxl50cz4bt",
            "title": "Can't Hurt Me",
            "author": "David Goggins",
            "audioLink": "https://example.com/goggins.mp3",
            "subscriptionRequired": True,
        }
    )
