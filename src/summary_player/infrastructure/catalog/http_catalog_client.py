"""HTTP client for the remote book catalog."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from summary_player.application.interfaces.catalog_service import CatalogService
from summary_player.domain.library.entities import Book, BookStatus
from summary_player.domain.shared.constants import CatalogEndpoints
from summary_player.domain.shared.exceptions import CatalogError
from summary_player.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...config.settings import CatalogSettings

logger = logging.getLogger(__name__)


class HttpCatalogClient(CatalogService):
    """Reads books from the catalog's ``getBook``/``getBooks`` endpoints."""

    def __init__(
        self,
        settings: CatalogSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        base_url = settings.base_url if settings else "https://us-central1-summaristt.cloudfunctions.net"
        timeout = settings.timeout_s if settings else 10.0
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)

    async def get_book(self, book_id: str) -> Book | None:
        what = f"book '{book_id}'"
        payload = await self._get_json(CatalogEndpoints.GET_BOOK, {"id": book_id}, what)
        if not payload:
            return None
        if not isinstance(payload, dict):
            raise CatalogError(ErrorMessages.CATALOG_BAD_RESPONSE.format(what=what))
        return self._to_book(payload, what)

    async def get_books(self, status: BookStatus) -> list[Book]:
        what = f"{status.value} books"
        payload = await self._get_json(CatalogEndpoints.GET_BOOKS, {"status": status.value}, what)
        if not payload:
            return []
        if not isinstance(payload, list):
            raise CatalogError(ErrorMessages.CATALOG_BAD_RESPONSE.format(what=what))
        return [self._to_book(item, what) for item in payload]

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, str], what: str) -> Any:
        logger.debug(LogTemplates.CATALOG_REQUEST, path, params)
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise CatalogError(ErrorMessages.CATALOG_UNREACHABLE.format(what=what, error=e)) from e

        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise CatalogError(ErrorMessages.CATALOG_BAD_RESPONSE.format(what=what)) from e

    @staticmethod
    def _to_book(payload: Any, what: str) -> Book:
        try:
            return Book.model_validate(payload)
        except PydanticValidationError as e:
            raise CatalogError(ErrorMessages.CATALOG_BAD_RESPONSE.format(what=what)) from e
