"""FastAPI dependencies.

Service instances are built once in the application lifespan and kept on
``app.state``; handlers receive them through these providers.
"""

from fastapi import Depends, Header, Query, Request

from guildroster.services import (
    ApiKeyValidator,
    AvatarService,
    MemberListingService,
    MemberQueryService,
)


def get_listing_service(request: Request) -> MemberListingService:
    return request.app.state.listing_service


def get_query_service(request: Request) -> MemberQueryService:
    return request.app.state.query_service


def get_avatar_service(request: Request) -> AvatarService:
    return request.app.state.avatar_service


def get_key_validator(request: Request) -> ApiKeyValidator:
    return request.app.state.key_validator


async def require_api_key(
    x_api_key: str | None = Header(None),
    api_key: str | None = Query(None, description="API key, if not sent as X-API-Key"),
    validator: ApiKeyValidator = Depends(get_key_validator),
) -> str:
    """Reject the request with 401 unless it carries a known API key."""
    return await validator.validate(x_api_key or api_key)
