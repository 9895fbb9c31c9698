"""SQLite-backed repository for favorite events."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite

from event_finder.errors import AlreadyExistsError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

FavoriteEvent = dict[str, Any]

ADDED_AT_FIELD = "addedAt"


def _require_event_id(event: Any) -> str:
    if not isinstance(event, Mapping):
        raise ValidationError("Event must be a JSON object")
    event_id = event.get("id")
    if not isinstance(event_id, str) or not event_id.strip():
        raise ValidationError("Event ID is required")
    return event_id


class FavoritesRepository:
    """Persist a personal list of favorite events keyed by upstream event id.

    Uniqueness of the event id is enforced by a ``UNIQUE`` constraint, so an
    insert either lands or fails atomically; there is no separate lookup step.
    Documents are returned in insertion order, tracked by an ``AUTOINCREMENT``
    sequence that never reuses values, so a removed and re-added event moves to
    the end of the list.
    """

    def __init__(self, database_path: Path):
        self._path = database_path
        self._connection: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open the SQLite connection and ensure tables exist."""
        if self._connection is not None:
            return

        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._path)
        self._connection.row_factory = aiosqlite.Row
        await self._connection.execute("PRAGMA journal_mode=WAL;")
        await self._create_schema()

    async def _create_schema(self) -> None:
        assert self._connection is not None
        await self._connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS favorites (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                event_id TEXT NOT NULL UNIQUE,
                document TEXT NOT NULL,
                added_at TEXT NOT NULL
            );
            """
        )
        await self._connection.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def list_favorites(self) -> list[FavoriteEvent]:
        """Return every stored favorite, oldest first."""
        assert self._connection is not None

        cursor = await self._connection.execute(
            "SELECT document FROM favorites ORDER BY seq ASC"
        )
        rows = await cursor.fetchall()
        await cursor.close()

        favorites = [json.loads(row["document"]) for row in rows]
        logger.debug("Retrieved %d favorites", len(favorites))
        return favorites

    async def add(self, event: Mapping[str, Any]) -> str:
        """Store ``event`` unless its id is already a favorite.

        Raises:
            ValidationError: ``event`` has no usable ``id``.
            AlreadyExistsError: a favorite with the same id is stored.
        """
        assert self._connection is not None

        event_id = _require_event_id(event)
        added_at = datetime.now(timezone.utc).isoformat()
        document = dict(event)
        document[ADDED_AT_FIELD] = added_at

        try:
            serialized = json.dumps(document)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Event is not JSON serializable: {exc}") from exc

        # Always commit, even on conflict, so the write lock is released. A
        # rollback would discard other callers' pending inserts on this connection.
        cursor = await self._connection.execute(
            """
            INSERT INTO favorites (event_id, document, added_at)
            VALUES (?, ?, ?)
            ON CONFLICT(event_id) DO NOTHING
            """,
            (event_id, serialized, added_at),
        )
        inserted = cursor.rowcount
        await cursor.close()
        await self._connection.commit()

        if inserted == 0:
            raise AlreadyExistsError(event_id)

        logger.info("Added favorite: %s", event_id)
        return event_id

    async def remove(self, event_id: str) -> int:
        """Delete the favorite with ``event_id`` and return the deleted count.

        Raises:
            NotFoundError: no favorite with that id exists.
        """
        assert self._connection is not None

        if not event_id:
            raise ValidationError("Event ID is required")

        cursor = await self._connection.execute(
            "DELETE FROM favorites WHERE event_id = ?",
            (event_id,),
        )
        deleted = cursor.rowcount
        await cursor.close()
        await self._connection.commit()

        if deleted == 0:
            raise NotFoundError(f"Favorite {event_id!r} not found")

        logger.info("Removed favorite: %s", event_id)
        return deleted

    async def exists(self, event_id: str) -> bool:
        """Return whether ``event_id`` is a favorite.

        Read failures are logged and reported as ``False``; the answer only
        drives a display toggle.
        """
        if self._connection is None:
            logger.warning("Check favorite %s failed: repository is closed", event_id)
            return False
        try:
            cursor = await self._connection.execute(
                "SELECT 1 FROM favorites WHERE event_id = ? LIMIT 1",
                (event_id,),
            )
            row = await cursor.fetchone()
            await cursor.close()
        except Exception as exc:
            logger.warning("Check favorite %s failed: %s", event_id, exc)
            return False
        return row is not None

    async def clear(self) -> int:
        """Delete every favorite and return how many were removed."""
        assert self._connection is not None

        cursor = await self._connection.execute("DELETE FROM favorites")
        deleted = cursor.rowcount
        await cursor.close()
        await self._connection.commit()

        logger.info("Cleared %d favorites", deleted)
        return deleted


__all__ = ["ADDED_AT_FIELD", "FavoriteEvent", "FavoritesRepository"]
