"""
Library Bounded Context

Catalog books, saved-library membership and completion records.
"""

from summary_player.domain.library.entities import (
    Book,
    BookStatus,
    CompletionRecord,
    LibraryMembership,
)
from summary_player.domain.library.repository import CollectionPaths, PersistenceGateway
from summary_player.domain.library.services import AccessDomainService

__all__ = [
    "Book",
    "BookStatus",
    "LibraryMembership",
    "CompletionRecord",
    "CollectionPaths",
    "PersistenceGateway",
    "AccessDomainService",
]
