"""Profile picture service module.

Provides S3 lookups of profile-picture objects keyed by Discord identity.
"""

from .service import AvatarService, S3AvatarService, parse_picture_key

__all__ = [
    "AvatarService",
    "S3AvatarService",
    "parse_picture_key",
]
