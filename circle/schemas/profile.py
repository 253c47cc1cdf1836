"""Profile schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    """Public profile representation."""

    id: str
    username: str
    full_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    reputation_points: int = 0
    created_at: datetime


class ProfileUpdate(BaseModel):
    """Editable profile fields; omitted fields are left unchanged."""

    username: str | None = Field(None, max_length=30)
    full_name: str | None = Field(None, max_length=100)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = None


class ReputationEntryResponse(BaseModel):
    """A single reputation history entry."""

    id: str
    user_id: str
    points: int
    reason: str
    related_submission_id: str | None = None
    related_challenge_id: str | None = None
    created_at: datetime


class BadgeResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    icon_url: str | None = None


class UserBadgeResponse(BaseModel):
    """A badge earned by a user."""

    id: str
    user_id: str
    badge_id: str
    earned_at: datetime
    badge: BadgeResponse | None = None
