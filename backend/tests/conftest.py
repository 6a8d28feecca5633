"""Shared fixtures: an in-memory store and a stub S3 client."""

from datetime import datetime, timedelta
from typing import Any

import pytest

from guildroster.models import QueryFailedError
from guildroster.services.store import MemberStore

T0 = datetime(2024, 5, 1, 12, 0, 0)


def member_row(
    user_id: str,
    username: str,
    roles: str | None = None,
    minutes: int = 0,
) -> dict[str, Any]:
    """A channel_activity row whose last message is ``minutes`` after T0."""
    return {
        "user_id": user_id,
        "username": username,
        "roles": roles,
        "last_message": T0 + timedelta(minutes=minutes),
    }


class FakeMemberStore(MemberStore):
    """MemberStore over plain lists, counting calls and failing on demand."""

    def __init__(self) -> None:
        self.member_rows: list[dict[str, Any]] = []
        self.weekly_rows: list[dict[str, Any]] = []
        self.snapshot_rows: list[dict[str, Any]] = []
        self.social_rows: list[dict[str, Any]] = []
        self.api_keys: set[str] = {"test-key"}
        self.fail = False
        self.fail_auth = False
        self.calls: dict[str, int] = {}
        self.started = False
        self.closed = False

    def _record(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1
        if self.fail:
            raise QueryFailedError(f"{name} failed")

    async def start(self) -> None:
        self.started = True

    async def close(self) -> None:
        self.closed = True

    async def ping(self) -> None:
        self._record("ping")

    async def fetch_member_rows(self):
        self._record("fetch_member_rows")
        return list(self.member_rows)

    async def fetch_member_rows_matching(self, identifier: str):
        self._record("fetch_member_rows_matching")
        return [
            row
            for row in self.member_rows
            if row["user_id"] == identifier
            or row["username"].lower() == identifier.lower()
        ]

    async def fetch_weekly_message_totals(self):
        self._record("fetch_weekly_message_totals")
        return list(self.weekly_rows)

    async def fetch_activity_snapshots(self):
        self._record("fetch_activity_snapshots")
        return list(self.snapshot_rows)

    async def fetch_social_handles(self, user_id: str | None = None):
        self._record("fetch_social_handles")
        if user_id is None:
            return list(self.social_rows)
        return [row for row in self.social_rows if row["user_id"] == user_id]

    async def api_key_exists(self, key: str) -> bool:
        self.calls["api_key_exists"] = self.calls.get("api_key_exists", 0) + 1
        if self.fail_auth:
            raise QueryFailedError("api key lookup failed")
        return key in self.api_keys


class StubPaginator:
    def __init__(self, client: "StubS3Client") -> None:
        self._client = client

    def paginate(self, Bucket: str, Prefix: str):
        self._client.requests.append((Bucket, Prefix))
        if self._client.error is not None:
            raise self._client.error
        for page in self._client.pages:
            yield {
                "Contents": [
                    {"Key": key} for key in page if key.startswith(Prefix)
                ]
            }


class StubS3Client:
    """Just enough of a boto3 S3 client for ``list_objects_v2`` paging."""

    def __init__(self, pages: list[list[str]] | None = None) -> None:
        self.pages = pages or []
        self.error: Exception | None = None
        self.requests: list[tuple[str, str]] = []

    def get_paginator(self, operation: str) -> StubPaginator:
        assert operation == "list_objects_v2"
        return StubPaginator(self)


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store() -> FakeMemberStore:
    return FakeMemberStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1000.0)
