"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from summary_player.application.interfaces.auth_provider import AuthProvider, StaticAuthProvider
from summary_player.application.interfaces.catalog_service import CatalogService
from summary_player.application.interfaces.duration_resolver import DurationResolver
from summary_player.application.interfaces.media_engine import MediaEngine

__all__ = [
    "AuthProvider",
    "StaticAuthProvider",
    "CatalogService",
    "DurationResolver",
    "MediaEngine",
]
