"""Port interface for the remote book catalog."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.library.entities import Book, BookStatus


class CatalogService(ABC):
    """Interface for fetching books from the catalog."""

    @abstractmethod
    async def get_book(self, book_id: str) -> "Book | None":
        """Fetch one book, or None if the catalog does not know it."""
        ...

    @abstractmethod
    async def get_books(self, status: "BookStatus") -> list["Book"]:
        """Fetch the books of one catalog listing."""
        ...
