"""Community and membership endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from circle.dependencies import (
    get_current_user,
    get_current_user_id,
    get_db_client,
    get_optional_user_id,
)
from circle.schemas.community import CommunityCreate, MembershipResponse
from circle.services.challenge_service import ChallengeService
from circle.services.community_service import CommunityService
from circle.services.membership_service import MembershipService
from supabase import Client

router = APIRouter()


@router.get("")
def list_communities(client: Client = Depends(get_db_client)) -> dict:
    """Browse active communities, largest first."""
    return {"communities": CommunityService(client).list_all()}


@router.post("")
def create_community(
    payload: CommunityCreate,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Create a community led by the caller."""
    community = CommunityService(client).create(
        user_id=get_current_user_id(user),
        name=payload.name,
        description=payload.description,
        image_url=payload.image_url,
    )
    return {"community": community}


@router.get("/mine")
def my_communities(
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return communities the caller belongs to and those they lead."""
    service = CommunityService(client)
    user_id = get_current_user_id(user)
    return {
        "communities": service.list_for_user(user_id),
        "leading": service.list_led_by(user_id),
    }


@router.get("/{community_id}")
def get_community(
    community_id: str,
    user_id: str | None = Depends(get_optional_user_id),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return a community with its challenges and the caller's membership."""
    community = CommunityService(client).get(community_id)
    challenges = ChallengeService(client).list_for_community(community_id)
    is_member = MembershipService(client).is_member(user_id, community_id)
    return {"community": community, "challenges": challenges, "is_member": is_member}


@router.get("/{community_id}/members")
def list_members(
    community_id: str,
    client: Client = Depends(get_db_client),
) -> dict:
    return {"members": MembershipService(client).list_members(community_id)}


@router.post("/{community_id}/join", response_model=MembershipResponse)
def join_community(
    community_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Join a community."""
    result = MembershipService(client).join(get_current_user_id(user), community_id)
    return {
        "community_id": community_id,
        "is_member": True,
        "member_count": result["member_count"],
    }


@router.post("/{community_id}/leave", response_model=MembershipResponse)
def leave_community(
    community_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Leave a community."""
    result = MembershipService(client).leave(get_current_user_id(user), community_id)
    return {
        "community_id": community_id,
        "is_member": False,
        "member_count": result["member_count"],
    }
