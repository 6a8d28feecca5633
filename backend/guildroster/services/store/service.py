"""Backing store access.

``MemberStore`` is the query interface the rest of the service depends on.
``PostgresMemberStore`` implements it on an asyncpg connection pool.

Stores return raw rows (mappings keyed by column name) and never shape them
into models; that is the job of the member service. Any failure to talk to
the database is raised as ``QueryFailedError`` so callers can tell it apart
from an empty result.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

import asyncpg

from guildroster.models import QueryFailedError

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

# Latest record per identity among members currently on the server.
LIST_MEMBERS_SQL = """
    SELECT DISTINCT ON (user_id)
        user_id::text AS user_id,
        username,
        roles,
        last_message
    FROM channel_activity
    WHERE on_server = true
    ORDER BY user_id, last_message DESC NULLS LAST
"""

FIND_MEMBER_SQL = """
    SELECT
        user_id::text AS user_id,
        username,
        roles,
        last_message
    FROM channel_activity
    WHERE on_server = true
      AND (user_id::text = $1 OR lower(username) = lower($1))
    ORDER BY last_message DESC NULLS LAST
"""

WEEKLY_TOTALS_SQL = """
    SELECT user_id::text AS user_id, SUM(message_count)::bigint AS total
    FROM message_stats
    WHERE day > CURRENT_DATE - 7
    GROUP BY user_id
"""

# Rows of the two most recent snapshots.
SNAPSHOTS_SQL = """
    WITH latest AS (
        SELECT DISTINCT taken_at
        FROM activity_snapshots
        ORDER BY taken_at DESC
        LIMIT 2
    )
    SELECT s.user_id::text AS user_id, s.message_count, s.taken_at
    FROM activity_snapshots s
    JOIN latest l ON s.taken_at = l.taken_at
"""

SOCIAL_HANDLES_SQL = """
    SELECT user_id::text AS user_id, platform, handle
    FROM social_accounts
    ORDER BY user_id, platform
"""

SOCIAL_HANDLES_FOR_USER_SQL = """
    SELECT user_id::text AS user_id, platform, handle
    FROM social_accounts
    WHERE user_id::text = $1
    ORDER BY platform
"""

API_KEY_EXISTS_SQL = "SELECT EXISTS (SELECT 1 FROM api_keys WHERE key = $1)"


class MemberStore(ABC):
    """Query interface over the relational store."""

    async def start(self) -> None:
        """Open connections. Optional for stores that need none."""

    async def close(self) -> None:
        """Release connections."""

    @abstractmethod
    async def ping(self) -> None:
        """Run a trivial query; raise ``QueryFailedError`` if it fails."""
        pass

    @abstractmethod
    async def fetch_member_rows(self) -> Sequence[Row]:
        """Rows with ``user_id``, ``username``, ``roles``, ``last_message``
        for members on the server, ordered by ``user_id``."""
        pass

    @abstractmethod
    async def fetch_member_rows_matching(self, identifier: str) -> Sequence[Row]:
        """Member rows whose id equals ``identifier`` or whose username
        matches it case-insensitively."""
        pass

    @abstractmethod
    async def fetch_weekly_message_totals(self) -> Sequence[Row]:
        """Rows with ``user_id`` and ``total`` messages over the last 7 days."""
        pass

    @abstractmethod
    async def fetch_activity_snapshots(self) -> Sequence[Row]:
        """Rows with ``user_id``, ``message_count`` and ``taken_at`` from the
        two most recent activity snapshots."""
        pass

    @abstractmethod
    async def fetch_social_handles(self, user_id: str | None = None) -> Sequence[Row]:
        """Rows with ``user_id``, ``platform`` and ``handle``, optionally
        narrowed to one identity."""
        pass

    @abstractmethod
    async def api_key_exists(self, key: str) -> bool:
        pass


class PostgresMemberStore(MemberStore):
    """asyncpg-backed store.

    Attributes:
        _dsn: PostgreSQL connection string.
        _pool: The connection pool, created by ``start``.
    """

    def __init__(
        self,
        dsn: str,
        min_size: int = 1,
        max_size: int = 10,
        command_timeout: float = 30.0,
    ) -> None:
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None
        # Serializes pool creation so concurrent first queries share one pool.
        self._start_lock = asyncio.Lock()

    async def start(self) -> None:
        async with self._start_lock:
            if self._pool is not None:
                return
            try:
                self._pool = await asyncpg.create_pool(
                    self._dsn,
                    min_size=self._min_size,
                    max_size=self._max_size,
                    command_timeout=self._command_timeout,
                )
            except (
                asyncpg.PostgresError,
                asyncpg.InterfaceError,
                OSError,
                asyncio.TimeoutError,
            ) as e:
                logger.error(f"[DB] Could not create connection pool: {e}")
                raise QueryFailedError(f"Could not connect to database: {e}") from e
        logger.info(f"[DB] Connection pool ready (max_size={self._max_size})")

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("[DB] Connection pool closed")

    async def _fetch(self, query: str, *args: Any) -> list[Row]:
        if self._pool is None:
            # Startup may have failed while the database was unreachable.
            await self.start()
        try:
            return await self._pool.fetch(query, *args)
        except (
            asyncpg.PostgresError,
            asyncpg.InterfaceError,
            OSError,
            asyncio.TimeoutError,
        ) as e:
            logger.error(f"[DB] Query failed: {e}")
            raise QueryFailedError(f"Query failed: {e}") from e

    async def ping(self) -> None:
        rows = await self._fetch("SELECT NOW() AS now")
        logger.info(f"[DB] Connected, server time {rows[0]['now']}")

    async def fetch_member_rows(self) -> list[Row]:
        return await self._fetch(LIST_MEMBERS_SQL)

    async def fetch_member_rows_matching(self, identifier: str) -> list[Row]:
        return await self._fetch(FIND_MEMBER_SQL, identifier)

    async def fetch_weekly_message_totals(self) -> list[Row]:
        return await self._fetch(WEEKLY_TOTALS_SQL)

    async def fetch_activity_snapshots(self) -> list[Row]:
        return await self._fetch(SNAPSHOTS_SQL)

    async def fetch_social_handles(self, user_id: str | None = None) -> list[Row]:
        if user_id is None:
            return await self._fetch(SOCIAL_HANDLES_SQL)
        return await self._fetch(SOCIAL_HANDLES_FOR_USER_SQL, user_id)

    async def api_key_exists(self, key: str) -> bool:
        rows = await self._fetch(API_KEY_EXISTS_SQL, key)
        return bool(rows and rows[0][0])
