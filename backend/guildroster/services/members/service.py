"""Member queries and the cached member listing.

``MemberQueryService`` turns store rows into ``Member`` values:
- one member per Discord identity, taken from its most recent activity record
- roles decomposed from the stored delimited string

``MemberListingService`` serves the full listing through a ``SnapshotCache``.
A hit returns the cached listing unchanged. A miss queries the store, stores
the result stamped with the time the request started, and returns it. A
failed query leaves the cache as it was and the error reaches the caller.
"""

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from guildroster.models import (
    ActivityMatch,
    Member,
    NotFoundError,
    QueryFailedError,
    SocialProfile,
)
from guildroster.services.store import MemberStore, Row
from guildroster.utils.cache import SnapshotCache
from guildroster.utils.roles import split_roles

logger = logging.getLogger(__name__)

DEFAULT_WEEKLY_THRESHOLD = 100
DEFAULT_GROWTH_THRESHOLD = 50

Listing = tuple[Member, ...]


def _is_newer(candidate: Any, current: Any) -> bool:
    # Rows without activity lose to any row that has some.
    if candidate is None:
        return False
    if current is None:
        return True
    return candidate > current


def latest_per_identity(rows: Iterable[Row]) -> list[Row]:
    """Keep the row with the latest ``last_message`` for each ``user_id``.

    Identities keep the position of their first row. On equal timestamps the
    earlier row wins.
    """
    latest: dict[str, Row] = {}
    for row in rows:
        user_id = str(row["user_id"])
        current = latest.get(user_id)
        if current is None or _is_newer(row["last_message"], current["last_message"]):
            latest[user_id] = row
    return list(latest.values())


def row_to_member(row: Row) -> Member:
    """Build a Member from a store row.

    Raises:
        QueryFailedError: The row does not describe a valid member.
    """
    try:
        return Member(
            id=str(row["user_id"]),
            display_name=row["username"] or "",
            roles=split_roles(row["roles"]),
        )
    except ValidationError as e:
        logger.error(f"[MEMBERS] Malformed member row for {row['user_id']!r}: {e}")
        raise QueryFailedError(f"Store returned a malformed member row: {e}") from e


def _ranked(values: dict[str, int], threshold: int) -> list[ActivityMatch]:
    matches = [
        ActivityMatch(id=user_id, value=value)
        for user_id, value in values.items()
        if value > threshold
    ]
    matches.sort(key=lambda m: (-m.value, m.id))
    return matches


class MemberQueryService:
    """Authoritative, uncached reads of member data."""

    def __init__(self, store: MemberStore) -> None:
        self._store = store

    async def list_members(self) -> Listing:
        rows = await self._store.fetch_member_rows()
        members = tuple(row_to_member(row) for row in latest_per_identity(rows))
        logger.info(f"[MEMBERS] Loaded {len(members)} members from {len(rows)} rows")
        return members

    async def find_member(self, identifier: str) -> Member:
        """Look up one member by Discord id or username.

        Raises:
            NotFoundError: No member on the server matches.
            QueryFailedError: The store failed.
        """
        rows = await self._store.fetch_member_rows_matching(identifier)
        best: Row | None = None
        for row in rows:
            if best is None or _is_newer(row["last_message"], best["last_message"]):
                best = row
        if best is None:
            raise NotFoundError(
                f"No member matches {identifier!r}",
                user_message="Member not found.",
            )
        return row_to_member(best)

    async def weekly_active(
        self, threshold: int = DEFAULT_WEEKLY_THRESHOLD
    ) -> list[ActivityMatch]:
        """Members with more than ``threshold`` messages over the last 7 days."""
        rows = await self._store.fetch_weekly_message_totals()
        totals = {str(row["user_id"]): int(row["total"] or 0) for row in rows}
        return _ranked(totals, threshold)

    async def activity_growth(
        self, threshold: int = DEFAULT_GROWTH_THRESHOLD
    ) -> list[ActivityMatch]:
        """Members whose message count grew by more than ``threshold`` between
        the two most recent snapshots.

        An identity missing from the older snapshot counts up from zero.
        With fewer than two snapshots there is nothing to compare.
        """
        rows = await self._store.fetch_activity_snapshots()
        taken = sorted({row["taken_at"] for row in rows})
        if len(taken) < 2:
            return []
        previous_at, current_at = taken[-2], taken[-1]

        previous: dict[str, int] = {}
        current: dict[str, int] = {}
        for row in rows:
            user_id = str(row["user_id"])
            count = int(row["message_count"] or 0)
            if row["taken_at"] == current_at:
                current[user_id] = count
            elif row["taken_at"] == previous_at:
                previous[user_id] = count

        growth = {
            user_id: count - previous.get(user_id, 0)
            for user_id, count in current.items()
        }
        return _ranked(growth, threshold)

    async def list_social_profiles(self) -> list[SocialProfile]:
        rows = await self._store.fetch_social_handles()
        return _group_handles(rows)

    async def get_social_profile(self, user_id: str) -> SocialProfile:
        rows = await self._store.fetch_social_handles(user_id)
        profiles = _group_handles(rows)
        if not profiles:
            raise NotFoundError(
                f"No social handles linked to {user_id!r}",
                user_message="No linked social accounts found.",
            )
        return profiles[0]


def _group_handles(rows: Iterable[Row]) -> list[SocialProfile]:
    grouped: dict[str, dict[str, str]] = {}
    for row in rows:
        handle = row["handle"]
        if not handle:
            continue
        grouped.setdefault(str(row["user_id"]), {})[row["platform"]] = handle
    return [SocialProfile(id=user_id, handles=handles) for user_id, handles in grouped.items()]


class MemberListingService:
    """The member listing behind a TTL cache.

    Concurrent misses each query the store and each store their result;
    whichever finishes last is what later requests see.
    """

    def __init__(self, query: MemberQueryService, cache: SnapshotCache[Listing]) -> None:
        self._query = query
        self._cache = cache

    @property
    def cache(self) -> SnapshotCache[Listing]:
        return self._cache

    async def get_listing(self) -> Listing:
        now = self._cache.now()
        cached = self._cache.get(now)
        if cached is not None:
            logger.info(f"[CACHE] Hit: {len(cached)} members, age {self._cache.age(now):.1f}s")
            return cached

        logger.info("[CACHE] Miss, querying store")
        try:
            listing = await self._query.list_members()
        except Exception as e:
            logger.warning(f"[CACHE] Refresh failed, cache left unchanged: {e}")
            raise
        self._cache.put(listing, now)
        return listing
