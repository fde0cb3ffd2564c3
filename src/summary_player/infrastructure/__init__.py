"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite document store)
- Media (ffprobe, ffplay)
- Catalog (HTTP)
"""

from summary_player.infrastructure.persistence.database import Database

__all__ = [
    "Database",
]
