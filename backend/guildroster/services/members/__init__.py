"""Member service module.

Provides member queries, activity threshold queries, social handle lookups
and the cached member listing.
"""

from .service import (
    DEFAULT_GROWTH_THRESHOLD,
    DEFAULT_WEEKLY_THRESHOLD,
    Listing,
    MemberListingService,
    MemberQueryService,
    latest_per_identity,
    row_to_member,
)

__all__ = [
    "DEFAULT_GROWTH_THRESHOLD",
    "DEFAULT_WEEKLY_THRESHOLD",
    "Listing",
    "MemberListingService",
    "MemberQueryService",
    "latest_per_identity",
    "row_to_member",
]
