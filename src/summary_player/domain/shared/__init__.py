"""
Shared Domain Kernel

Contains types, events and exceptions shared across all bounded contexts.
"""

from summary_player.domain.shared.exceptions import (
    BusinessRuleViolationError,
    CatalogError,
    DomainError,
    InvalidOperationError,
    NoAudioError,
    PersistenceError,
    SubscriptionRequiredError,
)

__all__ = [
    "DomainError",
    "BusinessRuleViolationError",
    "InvalidOperationError",
    "SubscriptionRequiredError",
    "NoAudioError",
    "PersistenceError",
    "CatalogError",
]
