"""Guild Roster models."""

from .core import ActivityMatch, Member, ProfilePicture, SocialProfile
from .errors import (
    AppError,
    ErrorCode,
    NotFoundError,
    QueryFailedError,
    RosterError,
    UnauthorizedError,
)

__all__ = [
    "ActivityMatch",
    "Member",
    "ProfilePicture",
    "SocialProfile",
    "AppError",
    "ErrorCode",
    "NotFoundError",
    "QueryFailedError",
    "RosterError",
    "UnauthorizedError",
]
