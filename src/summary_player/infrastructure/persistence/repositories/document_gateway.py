"""SQLite implementation of the keyed document gateway."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import aiosqlite

from summary_player.domain.library.repository import CollectionPaths, PersistenceGateway
from summary_player.domain.shared.datetime_utils import UtcDateTime
from summary_player.domain.shared.exceptions import PersistenceError
from summary_player.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


class SQLiteDocumentGateway(PersistenceGateway):
    """Stores each document as a JSON object keyed by (collection path, record id)."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def write(
        self,
        collection_path: str,
        record_id: str,
        fields: dict[str, Any],
        merge: bool = True,
    ) -> None:
        path = CollectionPaths.validate(collection_path)
        try:
            async with self._db.transaction() as conn:
                document = dict(fields)
                if merge:
                    cursor = await conn.execute(
                        "SELECT fields_json FROM documents WHERE collection_path = ? AND record_id = ?",
                        (path, record_id),
                    )
                    row = await cursor.fetchone()
                    if row is not None:
                        document = {**json.loads(row["fields_json"]), **fields}

                await conn.execute(
                    """
                    INSERT INTO documents (collection_path, record_id, fields_json, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(collection_path, record_id) DO UPDATE SET
                        fields_json = excluded.fields_json,
                        updated_at = excluded.updated_at
                    """,
                    (path, record_id, json.dumps(document), UtcDateTime.now().iso),
                )
        except (aiosqlite.Error, json.JSONDecodeError, TypeError) as e:
            logger.error(LogTemplates.GATEWAY_FAILED, "write", path, record_id)
            raise PersistenceError("write", f"{path}/{record_id}", str(e)) from e

        logger.debug(LogTemplates.GATEWAY_WRITE, path, record_id, merge)

    async def delete(self, collection_path: str, record_id: str) -> bool:
        path = CollectionPaths.validate(collection_path)
        try:
            cursor = await self._db.execute(
                "DELETE FROM documents WHERE collection_path = ? AND record_id = ?",
                (path, record_id),
            )
        except aiosqlite.Error as e:
            logger.error(LogTemplates.GATEWAY_FAILED, "delete", path, record_id)
            raise PersistenceError("delete", f"{path}/{record_id}", str(e)) from e

        logger.debug(LogTemplates.GATEWAY_DELETE, path, record_id)
        return cursor.rowcount > 0

    async def read(self, collection_path: str, record_id: str) -> dict[str, Any] | None:
        path = CollectionPaths.validate(collection_path)
        try:
            row = await self._db.fetch_one(
                "SELECT fields_json FROM documents WHERE collection_path = ? AND record_id = ?",
                (path, record_id),
            )
            if row is None:
                return None
            return json.loads(row["fields_json"])
        except (aiosqlite.Error, json.JSONDecodeError) as e:
            logger.error(LogTemplates.GATEWAY_FAILED, "read", path, record_id)
            raise PersistenceError("read", f"{path}/{record_id}", str(e)) from e

    async def read_all(self, collection_path: str) -> dict[str, dict[str, Any]]:
        path = CollectionPaths.validate(collection_path)
        try:
            rows = await self._db.fetch_all(
                """
                SELECT record_id, fields_json FROM documents
                WHERE collection_path = ?
                ORDER BY updated_at ASC, record_id ASC
                """,
                (path,),
            )
            return {row["record_id"]: json.loads(row["fields_json"]) for row in rows}
        except (aiosqlite.Error, json.JSONDecodeError) as e:
            logger.error(LogTemplates.GATEWAY_FAILED, "read_all", path, "*")
            raise PersistenceError("read_all", path, str(e)) from e
