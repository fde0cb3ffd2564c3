"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class BusinessRuleViolationError(DomainError):
    """Raised when a business rule is violated."""

    def __init__(self, rule: str, message: str | None = None) -> None:
        msg = message or f"Business rule violated: {rule}"
        super().__init__(msg, code="BUSINESS_RULE_VIOLATION")
        self.rule = rule


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class SubscriptionRequiredError(BusinessRuleViolationError):
    """Raised when a subscriber-only book is opened without a subscription."""

    def __init__(self, book_id: str) -> None:
        super().__init__(
            rule="SUBSCRIPTION_REQUIRED",
            message=f"Book '{book_id}' requires an active subscription",
        )
        self.book_id = book_id


class NoAudioError(BusinessRuleViolationError):
    """Raised when a book without an audio source is handed to playback."""

    def __init__(self, book_id: str) -> None:
        super().__init__(rule="NO_AUDIO", message=f"Book '{book_id}' has no audio")
        self.book_id = book_id


class PersistenceError(DomainError):
    """Raised by persistence adapters when a read or write fails."""

    def __init__(self, operation: str, path: str, message: str | None = None) -> None:
        msg = message or f"Persistence {operation} failed for '{path}'"
        super().__init__(msg, code="PERSISTENCE_ERROR")
        self.operation = operation
        self.path = path


class CatalogError(DomainError):
    """Raised when the catalog service cannot be reached or answers garbage."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CATALOG_ERROR")
