"""SQLite repository implementations."""

from summary_player.infrastructure.persistence.repositories.document_gateway import (
    SQLiteDocumentGateway,
)

__all__ = [
    "SQLiteDocumentGateway",
]
