"""API key validation against the store's ``api_keys`` table."""

import logging

from guildroster.models import UnauthorizedError
from guildroster.services.store import MemberStore

logger = logging.getLogger(__name__)


class ApiKeyValidator:
    """Checks caller-supplied API keys.

    Store failures propagate as ``QueryFailedError`` so an outage is reported
    as a server fault rather than as a rejected key.
    """

    def __init__(self, store: MemberStore) -> None:
        self._store = store

    async def validate(self, key: str | None) -> str:
        """Return the key if it is known.

        Raises:
            UnauthorizedError: The key is missing, blank or unknown.
            QueryFailedError: The lookup itself failed.
        """
        if key is None or not key.strip():
            raise UnauthorizedError("API key is missing")
        key = key.strip()
        if not await self._store.api_key_exists(key):
            logger.info("[AUTH] Rejected unknown API key")
            raise UnauthorizedError("API key is not recognized")
        return key
