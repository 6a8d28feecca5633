"""Core data models for Guild Roster.

Pydantic models for the values the API serves: community members, activity
threshold matches, linked social handles and profile pictures.
"""

from pydantic import BaseModel, ConfigDict, Field


class Member(BaseModel):
    """A community member as listed by the roster.

    Instances are frozen so a cached listing can be handed to many requests
    without any of them being able to alter it.

    Roles keep the order they arrived in from the store, but two members with
    the same roles in a different order describe the same role set
    (see ``role_set``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Discord user id")
    display_name: str = Field(
        ..., alias="displayName", description="Username shown on the server"
    )
    roles: tuple[str, ...] = Field(
        default_factory=tuple, description="Role labels held on the server"
    )

    @property
    def role_set(self) -> frozenset[str]:
        """Roles as an order-insensitive set."""
        return frozenset(self.roles)


class ActivityMatch(BaseModel):
    """An identity whose activity metric crossed a threshold."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Discord user id")
    value: int = Field(..., description="Aggregated or differenced message count")


class SocialProfile(BaseModel):
    """Social-media handles linked to a Discord identity."""

    id: str = Field(..., description="Discord user id")
    handles: dict[str, str] = Field(
        default_factory=dict, description="Handle per platform, e.g. {'twitter': 'someone'}"
    )


class ProfilePicture(BaseModel):
    """A profile-picture object found in the object store."""

    id: str = Field(..., description="Owner identity parsed from the object key")
    label: str = Field(..., description="Free-text part of the object key")
    key: str = Field(..., description="Full object key")
    url: str = Field(..., description="Public URL of the object")
