"""Challenge endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from circle.dependencies import (
    get_current_user,
    get_current_user_id,
    get_db_client,
    get_optional_user_id,
)
from circle.schemas.challenge import ChallengeCreate, EligibilityResponse
from circle.services.challenge_service import ChallengeService
from circle.services.submission_service import SubmissionService
from circle.services.vote_service import VoteService
from supabase import Client

router = APIRouter()


@router.get("")
def list_active_challenges(
    community_id: str | None = Query(default=None),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return running challenges, optionally for one community."""
    return {"challenges": ChallengeService(client).list_active(community_id=community_id)}


@router.post("")
def create_challenge(
    payload: ChallengeCreate,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Create a challenge in a community the caller leads."""
    challenge = ChallengeService(client).create(
        actor_id=get_current_user_id(user),
        payload=payload.model_dump(),
    )
    return {"challenge": challenge}


@router.get("/{challenge_id}")
def get_challenge(
    challenge_id: str,
    user_id: str | None = Depends(get_optional_user_id),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return a challenge with ranked submissions and the caller's votes."""
    service = ChallengeService(client)
    challenge = service.get(challenge_id)
    submissions = SubmissionService(client).list_for_challenge(challenge_id)

    voted: list[str] = []
    if user_id:
        voted = sorted(
            VoteService(client).voted_submission_ids(
                user_id, [str(row["id"]) for row in submissions]
            )
        )
    return {
        "challenge": challenge,
        "submissions": submissions,
        "voted_submission_ids": voted,
        "eligibility": service.eligibility(user_id, challenge_id),
    }


@router.get("/{challenge_id}/eligibility", response_model=EligibilityResponse)
def get_eligibility(
    challenge_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return whether the caller may submit right now."""
    return ChallengeService(client).eligibility(get_current_user_id(user), challenge_id)
