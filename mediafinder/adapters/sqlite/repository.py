"""
SQLite Repository - Search history and suggestion storage.

Features:
- Async operations via aiosqlite
- Per-user search history (newest 100 kept)
- Popular/trending query counters for suggestions
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any

import aiosqlite

from mediafinder.config.errors import ErrorCode, StorageError

logger = logging.getLogger(__name__)

__all__ = ["SearchHistoryRepository"]

MAX_HISTORY_PER_USER = 100
MAX_HISTORY_PAGE = 100
MAX_SUGGESTIONS = 20


class SearchHistoryRepository:
    """
    SQLite repository for search history and suggestions.

    Example:
        >>> repo = SearchHistoryRepository("data/history.db")
        >>> await repo.initialize()
        >>> await repo.record_search("user-1", "batman", {"sortBy": "rating"}, 12)
        >>> await repo.get_suggestions("bat")
    """

    def __init__(self, db_path: str | Path) -> None:
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection: aiosqlite.Connection | None = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            try:
                self._connection = await aiosqlite.connect(str(self.db_path))
            except (OSError, aiosqlite.Error) as e:
                raise StorageError(f"Cannot open {self.db_path}: {e}") from e
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def initialize(self) -> None:
        """Initialize database schema."""
        conn = await self._get_connection()

        await conn.executescript("""
            CREATE TABLE IF NOT EXISTS search_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                query TEXT NOT NULL,
                filters TEXT,
                results_count INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
            );

            CREATE TABLE IF NOT EXISTS search_suggestions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                query TEXT NOT NULL UNIQUE,
                search_count INTEGER DEFAULT 1,
                last_searched TIMESTAMP DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
            );

            CREATE INDEX IF NOT EXISTS idx_search_history_user ON search_history(user_id);
            CREATE INDEX IF NOT EXISTS idx_search_history_created ON search_history(created_at DESC);
            CREATE INDEX IF NOT EXISTS idx_search_suggestions_count ON search_suggestions(search_count DESC);
            CREATE INDEX IF NOT EXISTS idx_search_suggestions_last ON search_suggestions(last_searched DESC);
        """)

        await conn.commit()
        logger.info("Database initialized: %s", self.db_path)

    async def record_search(
        self,
        user_id: str | None,
        query: str,
        filters: dict[str, Any] | None,
        results_count: int,
    ) -> None:
        """
        Record one executed search.

        The suggestion counter is bumped for every search; a history row is
        only written when the caller is known.
        """
        conn = await self._get_connection()
        normalized = query.strip()

        try:
            await conn.execute(
                """
                INSERT INTO search_suggestions (query, search_count, last_searched)
                VALUES (?, 1, strftime('%Y-%m-%d %H:%M:%f', 'now'))
                ON CONFLICT(query) DO UPDATE SET
                    search_count = search_count + 1,
                    last_searched = excluded.last_searched
                """,
                (normalized,),
            )

            if user_id:
                await conn.execute(
                    """
                    INSERT INTO search_history (user_id, query, filters, results_count)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        user_id,
                        normalized,
                        json.dumps(filters) if filters else None,
                        results_count,
                    ),
                )
                await conn.execute(
                    """
                    DELETE FROM search_history
                    WHERE user_id = ? AND id NOT IN (
                        SELECT id FROM search_history
                        WHERE user_id = ?
                        ORDER BY created_at DESC, id DESC
                        LIMIT ?
                    )
                    """,
                    (user_id, user_id, MAX_HISTORY_PER_USER),
                )

            await conn.commit()
        except aiosqlite.Error as e:
            raise StorageError(
                f"Failed to record search: {e}", code=ErrorCode.STORAGE_WRITE_FAILED
            ) from e

    async def get_history(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Get a user's search history, newest first."""
        conn = await self._get_connection()
        limit = max(1, min(limit, MAX_HISTORY_PAGE))

        try:
            cursor = await conn.execute(
                """
                SELECT * FROM search_history
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (user_id, limit, max(0, offset)),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageError(
                f"Failed to read history: {e}", code=ErrorCode.STORAGE_READ_FAILED
            ) from e

        history = []
        for row in rows:
            entry = dict(row)
            entry["filters"] = json.loads(entry["filters"]) if entry["filters"] else {}
            history.append(entry)
        return history

    async def delete_history(self, user_id: str, entry_id: int | None = None) -> int:
        """
        Delete one history entry, or the user's whole history.

        Returns:
            Number of rows removed
        """
        conn = await self._get_connection()

        try:
            if entry_id is not None:
                cursor = await conn.execute(
                    "DELETE FROM search_history WHERE id = ? AND user_id = ?",
                    (entry_id, user_id),
                )
            else:
                cursor = await conn.execute(
                    "DELETE FROM search_history WHERE user_id = ?", (user_id,)
                )
            await conn.commit()
        except aiosqlite.Error as e:
            raise StorageError(
                f"Failed to delete history: {e}", code=ErrorCode.STORAGE_WRITE_FAILED
            ) from e

        return cursor.rowcount

    async def get_suggestions(
        self,
        query: str | None,
        user_id: str | None = None,
        limit: int = 10,
        include_history: bool = False,
    ) -> list[dict[str, Any]]:
        """
        Suggest queries.

        With a query of 2+ characters: popular matches, then the user's own
        matching history. Without one: trending queries by recency.
        """
        limit = max(1, min(limit, MAX_SUGGESTIONS))

        try:
            suggestions = await self._find_suggestions(
                (query or "").strip(), user_id, limit, include_history
            )
        except aiosqlite.Error as e:
            raise StorageError(
                f"Failed to read suggestions: {e}", code=ErrorCode.STORAGE_READ_FAILED
            ) from e

        unique: list[dict[str, Any]] = []
        seen: set[str] = set()
        for suggestion in suggestions:
            if suggestion["query"] in seen:
                continue
            seen.add(suggestion["query"])
            unique.append(suggestion)
        return unique[:limit]

    async def _find_suggestions(
        self,
        text: str,
        user_id: str | None,
        limit: int,
        include_history: bool,
    ) -> list[dict[str, Any]]:
        conn = await self._get_connection()
        suggestions: list[dict[str, Any]] = []

        if len(text) >= 2:
            pattern = f"%{_escape_like(text)}%"
            cursor = await conn.execute(
                """
                SELECT query, search_count FROM search_suggestions
                WHERE query LIKE ? ESCAPE '\\'
                ORDER BY search_count DESC, last_searched DESC
                LIMIT ?
                """,
                (pattern, math.ceil(limit / 2)),
            )
            suggestions.extend(
                {"query": row["query"], "type": "popular", "count": row["search_count"]}
                for row in await cursor.fetchall()
            )

            if include_history and user_id:
                cursor = await conn.execute(
                    """
                    SELECT query, created_at FROM search_history
                    WHERE user_id = ? AND query LIKE ? ESCAPE '\\'
                    ORDER BY created_at DESC, id DESC
                    LIMIT ?
                    """,
                    (user_id, pattern, limit // 2),
                )
                suggestions.extend(
                    {"query": row["query"], "type": "history", "last_searched": row["created_at"]}
                    for row in await cursor.fetchall()
                )
        else:
            cursor = await conn.execute(
                """
                SELECT query, search_count, last_searched FROM search_suggestions
                ORDER BY last_searched DESC
                LIMIT ?
                """,
                (limit,),
            )
            suggestions.extend(
                {
                    "query": row["query"],
                    "type": "trending",
                    "count": row["search_count"],
                    "last_searched": row["last_searched"],
                }
                for row in await cursor.fetchall()
            )

        return suggestions

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
