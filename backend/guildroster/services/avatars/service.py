"""Profile picture lookup in S3.

Pictures are stored under ``{prefix}{discord_id}/{label}.{ext}``, e.g.
``avatars/123456789/summer-2024.png``. A lookup lists the keys under one
identity's prefix and splits each into owner id and label.

Object store errors are logged and reported as "no pictures"; this lookup
never fails a request.
"""

import asyncio
import logging
import posixpath
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from guildroster.models import ProfilePicture

logger = logging.getLogger(__name__)


def parse_picture_key(key: str, prefix: str) -> tuple[str, str] | None:
    """Split an object key into ``(owner_id, label)``.

    Returns None for keys outside ``prefix`` or not shaped ``owner/label``.

    Example:
        >>> parse_picture_key("avatars/42/profile.png", "avatars/")
        ('42', 'profile')
    """
    if not key.startswith(prefix):
        return None
    owner, sep, filename = key[len(prefix):].partition("/")
    if not sep or not owner or not filename or "/" in filename:
        return None
    label, _ = posixpath.splitext(filename)
    if not label:
        return None
    return owner, label


class AvatarService(ABC):
    """Abstract base class for profile picture lookups."""

    @abstractmethod
    async def find_pictures(self, user_id: str) -> list[ProfilePicture]:
        pass


class S3AvatarService(AvatarService):
    """S3 implementation using a boto3 client.

    boto3 is blocking, so listing runs in a worker thread.
    """

    def __init__(
        self,
        bucket: str | None,
        prefix: str = "avatars/",
        region: str = "us-east-1",
        client: Any | None = None,
    ) -> None:
        self._bucket = bucket
        self._prefix = prefix
        self._region = region
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("s3", region_name=self._region)
        return self._client

    def _public_url(self, key: str) -> str:
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{quote(key)}"

    def _list_keys(self, prefix: str) -> list[str]:
        paginator = self._get_client().get_paginator("list_objects_v2")
        keys: list[str] = []
        for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys

    async def find_pictures(self, user_id: str) -> list[ProfilePicture]:
        if not self._bucket:
            logger.info("[AVATAR] No bucket configured, skipping lookup")
            return []
        if not user_id or "/" in user_id:
            return []

        prefix = f"{self._prefix}{user_id}/"
        try:
            keys = await asyncio.to_thread(self._list_keys, prefix)
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"[AVATAR] Listing {prefix} failed: {e}")
            return []

        pictures = []
        for key in keys:
            parsed = parse_picture_key(key, self._prefix)
            if parsed is None:
                continue
            owner, label = parsed
            pictures.append(
                ProfilePicture(id=owner, label=label, key=key, url=self._public_url(key))
            )
        logger.info(f"[AVATAR] Found {len(pictures)} pictures for {user_id}")
        return pictures
