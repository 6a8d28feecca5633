"""API routes for Guild Roster.

Every route here requires an API key (``X-API-Key`` header or ``api_key``
query parameter). The key is checked before any service is touched, so an
unauthorized request never reads or fills the listing cache.

Endpoints:
- /discord: full member listing, served from the TTL cache
- /discord/{identifier}: one member by Discord id or username (uncached)
- /activity/weekly, /activity/growth: threshold queries (uncached)
- /socials, /socials/{user_id}: linked social handles
- /avatars/{user_id}: profile pictures from S3
"""

from fastapi import APIRouter, Depends, Query

from guildroster.api.dependencies import (
    get_avatar_service,
    get_listing_service,
    get_query_service,
    require_api_key,
)
from guildroster.models import ActivityMatch, Member, ProfilePicture, SocialProfile
from guildroster.services import AvatarService, MemberListingService, MemberQueryService
from guildroster.services.members import (
    DEFAULT_GROWTH_THRESHOLD,
    DEFAULT_WEEKLY_THRESHOLD,
)

router = APIRouter(dependencies=[Depends(require_api_key)])


@router.get("/discord", response_model=list[Member])
async def list_members(
    listing_service: MemberListingService = Depends(get_listing_service),
) -> list[Member]:
    """All members currently on the server, at most one cache TTL old."""
    return list(await listing_service.get_listing())


@router.get("/discord/{identifier}", response_model=Member)
async def get_member(
    identifier: str,
    query_service: MemberQueryService = Depends(get_query_service),
) -> Member:
    """One member by Discord id or username."""
    return await query_service.find_member(identifier)


@router.get("/activity/weekly", response_model=list[ActivityMatch])
async def weekly_active_members(
    threshold: int = Query(
        DEFAULT_WEEKLY_THRESHOLD,
        ge=0,
        description="Minimum messages over the last 7 days (exclusive)",
    ),
    query_service: MemberQueryService = Depends(get_query_service),
) -> list[ActivityMatch]:
    return await query_service.weekly_active(threshold)


@router.get("/activity/growth", response_model=list[ActivityMatch])
async def growing_members(
    threshold: int = Query(
        DEFAULT_GROWTH_THRESHOLD,
        ge=0,
        description="Minimum increase between the last two snapshots (exclusive)",
    ),
    query_service: MemberQueryService = Depends(get_query_service),
) -> list[ActivityMatch]:
    return await query_service.activity_growth(threshold)


@router.get("/socials", response_model=list[SocialProfile])
async def list_social_profiles(
    query_service: MemberQueryService = Depends(get_query_service),
) -> list[SocialProfile]:
    return await query_service.list_social_profiles()


@router.get("/socials/{user_id}", response_model=SocialProfile)
async def get_social_profile(
    user_id: str,
    query_service: MemberQueryService = Depends(get_query_service),
) -> SocialProfile:
    return await query_service.get_social_profile(user_id)


@router.get("/avatars/{user_id}", response_model=list[ProfilePicture])
async def get_profile_pictures(
    user_id: str,
    avatar_service: AvatarService = Depends(get_avatar_service),
) -> list[ProfilePicture]:
    """Profile pictures for a member. Empty when none are found."""
    return await avatar_service.find_pictures(user_id)
