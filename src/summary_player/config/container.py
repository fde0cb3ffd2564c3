"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the persistence gateway, media adapters and
the playback and library services. Components are created on-demand and
cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.interfaces.auth_provider import AuthProvider
    from ..application.interfaces.catalog_service import CatalogService
    from ..application.interfaces.duration_resolver import DurationResolver
    from ..application.interfaces.media_engine import MediaEngine
    from ..application.services.batch_duration_loader import BatchDurationLoader
    from ..application.services.completion_recorder import CompletionRecorder
    from ..application.services.duration_cache import DurationCache
    from ..application.services.library_service import LibraryService
    from ..application.services.library_toggle import LibraryToggle
    from ..application.services.playback_controller import PlaybackController
    from ..domain.library.repository import PersistenceGateway
    from ..infrastructure.persistence.database import Database
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _instances: dict[str, Any] = field(default_factory=dict)

    # Persistence layer
    _database: Database | None = None
    _gateway: PersistenceGateway | None = None

    # Infrastructure adapters
    _duration_resolver: DurationResolver | None = None
    _media_engine: MediaEngine | None = None
    _catalog: CatalogService | None = None
    _auth: AuthProvider | None = None

    # Application services
    _duration_cache: DurationCache | None = None
    _playback_controller: PlaybackController | None = None
    _completion_recorder: CompletionRecorder | None = None
    _library_toggle: LibraryToggle | None = None
    _library_service: LibraryService | None = None

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    @property
    def gateway(self) -> PersistenceGateway:
        """Get the document gateway."""
        if self._gateway is None:
            from ..infrastructure.persistence.repositories.document_gateway import (
                SQLiteDocumentGateway,
            )

            self._gateway = SQLiteDocumentGateway(self.database)
        return self._gateway

    # === Infrastructure Adapters ===

    @property
    def duration_resolver(self) -> DurationResolver:
        """Get the ffprobe duration resolver."""
        if self._duration_resolver is None:
            from ..infrastructure.media.ffprobe_resolver import FfprobeDurationResolver

            self._duration_resolver = FfprobeDurationResolver(self.settings.media)
        return self._duration_resolver

    @property
    def media_engine(self) -> MediaEngine:
        """Get the audio engine."""
        if self._media_engine is None:
            from ..infrastructure.media.ffplay_engine import FfplayMediaEngine

            self._media_engine = FfplayMediaEngine(
                self.settings.media, resolver=self.duration_resolver
            )
        return self._media_engine

    @property
    def catalog(self) -> CatalogService:
        """Get the catalog client."""
        if self._catalog is None:
            from ..infrastructure.catalog.http_catalog_client import HttpCatalogClient

            self._catalog = HttpCatalogClient(self.settings.catalog)
        return self._catalog

    @property
    def auth(self) -> AuthProvider:
        """Get the auth provider (anonymous until someone signs in)."""
        if self._auth is None:
            from ..application.interfaces.auth_provider import StaticAuthProvider

            self._auth = StaticAuthProvider()
        return self._auth

    def set_auth(self, auth: AuthProvider) -> None:
        """Replace the auth provider; must happen before dependent services are built."""
        self._auth = auth

    # === Application Services ===

    @property
    def duration_cache(self) -> DurationCache:
        """Get the process-wide duration cache."""
        if self._duration_cache is None:
            from ..application.services.duration_cache import get_duration_cache

            self._duration_cache = get_duration_cache(self.duration_resolver)
        return self._duration_cache

    def batch_duration_loader(self) -> BatchDurationLoader:
        """Create a loader for one page's set of resources."""
        from ..application.services.batch_duration_loader import BatchDurationLoader

        return BatchDurationLoader(duration_cache=self.duration_cache)

    @property
    def playback_controller(self) -> PlaybackController:
        """Get the playback controller, with completion recording attached."""
        if self._playback_controller is None:
            from ..application.services.playback_controller import PlaybackController

            self._playback_controller = PlaybackController(
                engine=self.media_engine,
                settings=self.settings.media,
            )
            self.completion_recorder.bind(self._playback_controller, self.auth)
        return self._playback_controller

    @property
    def completion_recorder(self) -> CompletionRecorder:
        """Get the completion recorder."""
        if self._completion_recorder is None:
            from ..application.services.completion_recorder import CompletionRecorder

            self._completion_recorder = CompletionRecorder(
                gateway=self.gateway,
                catalog=self.catalog,
            )
        return self._completion_recorder

    @property
    def library_toggle(self) -> LibraryToggle:
        """Get the save/unsave toggle."""
        if self._library_toggle is None:
            from ..application.services.library_toggle import LibraryToggle

            self._library_toggle = LibraryToggle(gateway=self.gateway, auth=self.auth)
        return self._library_toggle

    @property
    def library_service(self) -> LibraryService:
        """Get the library read service."""
        if self._library_service is None:
            from ..application.services.library_service import LibraryService

            self._library_service = LibraryService(gateway=self.gateway)
        return self._library_service

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        await self.database.initialize()

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._playback_controller is not None:
            try:
                await self._playback_controller.close()
            except Exception as exc:
                logger.warning("Failed closing playback controller: %r", exc)

        if self._catalog is not None:
            close = getattr(self._catalog, "close", None)
            if close is not None:
                try:
                    await close()
                except Exception as exc:
                    logger.warning("Failed closing catalog client: %r", exc)

        if self._database is not None:
            await self._database.close()

        # Clear all cached instances
        self._instances.clear()
        logger.info(LogTemplates.CONTAINER_SHUTDOWN)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
