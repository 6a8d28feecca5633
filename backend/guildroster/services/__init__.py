"""Guild Roster Services.

Service layer components:
- Store: PostgreSQL query interface (asyncpg)
- Members: member listing, lookups, activity thresholds and social handles
- Auth: API key validation against the store
- Avatars: S3 profile picture lookup
"""

from .store import MemberStore, PostgresMemberStore
from .members import MemberListingService, MemberQueryService
from .auth import ApiKeyValidator
from .avatars import AvatarService, S3AvatarService

__all__ = [
    # Store
    "MemberStore",
    "PostgresMemberStore",
    # Members
    "MemberListingService",
    "MemberQueryService",
    # Auth
    "ApiKeyValidator",
    # Avatars
    "AvatarService",
    "S3AvatarService",
]
