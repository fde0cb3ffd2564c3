"""
Unit Tests for Dependency Injection Container

Tests for:
- Container initialization with settings
- Lazy initialization (properties create instances on first access)
- Caching (subsequent property access returns same instance)
- Completion recording wired onto the playback controller
- Per-page batch loaders sharing one duration cache
- Lifecycle methods (initialize, shutdown)
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from summary_player.application.interfaces.auth_provider import StaticAuthProvider
from summary_player.application.services.batch_duration_loader import BatchDurationLoader
from summary_player.application.services.duration_cache import get_duration_cache
from summary_player.config.container import Container, create_container
from summary_player.config.settings import DatabaseSettings, Settings
from summary_player.infrastructure.catalog.http_catalog_client import HttpCatalogClient
from summary_player.infrastructure.media.ffplay_engine import FfplayMediaEngine
from summary_player.infrastructure.media.ffprobe_resolver import FfprobeDurationResolver
from summary_player.infrastructure.persistence.repositories.document_gateway import (
    SQLiteDocumentGateway,
)


@pytest.fixture
def settings():
    return Settings(_env_file=None, database=DatabaseSettings(url="sqlite:///:memory:"))


@pytest.fixture
def container(settings):
    return Container(settings=settings)


# =============================================================================
# Container Initialization Tests
# =============================================================================


class TestContainerInitialization:
    """Unit tests for Container initialization."""

    def test_create_container_factory(self, settings):
        """Should create container using factory function."""
        container = create_container(settings)

        assert isinstance(container, Container)
        assert container.settings is settings

    def test_nothing_built_up_front(self, container):
        """Should not create components until first access."""
        assert container._database is None
        assert container._gateway is None
        assert container._playback_controller is None


# =============================================================================
# Lazy Property Tests
# =============================================================================


class TestContainerProperties:
    """Tests for lazily built components."""

    def test_database_strips_url_prefix(self, container):
        assert container.database.db_path == ":memory:"

    @pytest.mark.parametrize(
        "name,expected_type",
        [
            ("gateway", SQLiteDocumentGateway),
            ("duration_resolver", FfprobeDurationResolver),
            ("media_engine", FfplayMediaEngine),
            ("catalog", HttpCatalogClient),
            ("auth", StaticAuthProvider),
        ],
    )
    def test_component_types_and_caching(self, container, name, expected_type):
        first = getattr(container, name)

        assert isinstance(first, expected_type)
        assert getattr(container, name) is first

    def test_duration_cache_is_process_wide(self, container):
        assert container.duration_cache is get_duration_cache()

    def test_service_properties_cached(self, container):
        assert container.playback_controller is container.playback_controller
        assert container.completion_recorder is container.completion_recorder
        assert container.library_toggle is container.library_toggle
        assert container.library_service is container.library_service

    def test_controller_has_completion_recorder_bound(self, container):
        controller = container.playback_controller

        assert len(controller._completion_listeners) == 1

    def test_set_auth_used_by_toggle(self, container):
        auth = StaticAuthProvider("u1")
        container.set_auth(auth)

        assert container.auth is auth
        assert container.library_toggle._auth is auth

    def test_batch_loader_is_fresh_per_call(self, container):
        first = container.batch_duration_loader()
        second = container.batch_duration_loader()

        assert isinstance(first, BatchDurationLoader)
        assert first is not second
        assert first._cache is second._cache is container.duration_cache


# =============================================================================
# Lifecycle Tests
# =============================================================================


class TestContainerLifecycle:
    """Tests for initialize and shutdown."""

    @pytest.mark.asyncio
    async def test_initialize_opens_database(self, container):
        await container.initialize()
        try:
            assert container.database.is_initialized
        finally:
            await container.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_closes_components(self, container):
        controller = MagicMock()
        controller.close = AsyncMock()
        catalog = MagicMock()
        catalog.close = AsyncMock()
        database = MagicMock()
        database.close = AsyncMock()
        container._playback_controller = controller
        container._catalog = catalog
        container._database = database

        await container.shutdown()

        controller.close.assert_awaited_once()
        catalog.close.assert_awaited_once()
        database.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_continues_after_close_errors(self, container):
        controller = MagicMock()
        controller.close = AsyncMock(side_effect=RuntimeError("engine gone"))
        database = MagicMock()
        database.close = AsyncMock()
        container._playback_controller = controller
        container._database = database

        await container.shutdown()

        database.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_with_nothing_built(self, container):
        await container.shutdown()
