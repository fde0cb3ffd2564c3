"""Domain service for access rules on catalog books."""

from __future__ import annotations

from summary_player.domain.library.entities import Book
from summary_player.domain.media.value_objects import MediaResource
from summary_player.domain.shared.exceptions import NoAudioError, SubscriptionRequiredError


class AccessDomainService:
    """Decides whether a book may be opened in the player."""

    @staticmethod
    def can_listen(book: Book, is_subscribed: bool) -> bool:
        return not book.subscription_required or is_subscribed

    @staticmethod
    def playable_resource(book: Book, is_subscribed: bool) -> MediaResource:
        """Return the book's audio resource, or raise why it cannot be played."""
        if not AccessDomainService.can_listen(book, is_subscribed):
            raise SubscriptionRequiredError(book.id)
        resource = book.media_resource
        if resource is None:
            raise NoAudioError(book.id)
        return resource
