"""Unit tests for API key validation."""

import pytest

from guildroster.models import QueryFailedError, UnauthorizedError
from guildroster.services.auth import ApiKeyValidator


class TestApiKeyValidator:
    @pytest.mark.asyncio
    async def test_known_key(self, store) -> None:
        assert await ApiKeyValidator(store).validate("test-key") == "test-key"

    @pytest.mark.asyncio
    async def test_key_is_trimmed(self, store) -> None:
        assert await ApiKeyValidator(store).validate("  test-key ") == "test-key"

    @pytest.mark.parametrize("key", [None, "", "   "])
    @pytest.mark.asyncio
    async def test_missing_key(self, store, key) -> None:
        with pytest.raises(UnauthorizedError):
            await ApiKeyValidator(store).validate(key)
        assert "api_key_exists" not in store.calls

    @pytest.mark.asyncio
    async def test_unknown_key(self, store) -> None:
        with pytest.raises(UnauthorizedError):
            await ApiKeyValidator(store).validate("nope")

    @pytest.mark.asyncio
    async def test_lookup_failure_is_a_server_fault(self, store) -> None:
        store.fail_auth = True
        with pytest.raises(QueryFailedError):
            await ApiKeyValidator(store).validate("test-key")
