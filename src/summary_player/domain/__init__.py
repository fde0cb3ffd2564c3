# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, events and exceptions
- media/: Playable resources, duration entries and the playback phase machine
- library/: Books, saved-library membership and completion records
"""

from summary_player.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
