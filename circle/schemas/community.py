"""Community and membership schemas."""

from pydantic import BaseModel


class CommunityCreate(BaseModel):
    """Request body for creating a community.

    Length rules are enforced by the service so every violation is reported.
    """

    name: str = ""
    description: str = ""
    image_url: str | None = None


class MembershipResponse(BaseModel):
    """Membership state for the current user."""

    community_id: str
    is_member: bool
    member_count: int
