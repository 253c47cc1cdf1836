"""Profile and reputation endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from circle.config import settings
from circle.dependencies import get_current_user, get_current_user_id, get_db_client
from circle.schemas.profile import (
    ProfileResponse,
    ProfileUpdate,
    ReputationEntryResponse,
    UserBadgeResponse,
)
from circle.services.badge_service import BadgeService
from circle.services.profile_service import ProfileService
from circle.services.reputation_service import ReputationService
from supabase import Client

router = APIRouter()


@router.get("/me")
def my_profile(
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return the caller's profile page payload."""
    return ProfileService(client).overview(get_current_user_id(user))


@router.patch("/me", response_model=ProfileResponse)
def update_my_profile(
    payload: ProfileUpdate,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Edit the caller's profile fields."""
    return ProfileService(client).update(
        get_current_user_id(user), payload.model_dump(exclude_unset=True)
    )


@router.get("/me/reputation", response_model=list[ReputationEntryResponse])
def my_reputation(
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> list[dict]:
    return ReputationService(client).history(get_current_user_id(user), limit=limit)


@router.get("/{username}", response_model=ProfileResponse)
def get_profile(username: str, client: Client = Depends(get_db_client)) -> dict:
    return ProfileService(client).get_by_username(username)


@router.get("/{username}/badges", response_model=list[UserBadgeResponse])
def get_profile_badges(username: str, client: Client = Depends(get_db_client)) -> list[dict]:
    """Return the badges a user has earned, newest first."""
    profile = ProfileService(client).get_by_username(username)
    return BadgeService(client).list_for_user(str(profile["id"]))
