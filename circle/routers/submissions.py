"""Submission and voting endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from circle.dependencies import get_current_user, get_current_user_id, get_db_client
from circle.schemas.submission import SubmissionPayload, VoteResponse
from circle.services.submission_service import SubmissionService
from circle.services.vote_service import VoteService
from supabase import Client

router = APIRouter()


@router.get("/challenges/{challenge_id}/submissions")
def list_submissions(
    challenge_id: str,
    client: Client = Depends(get_db_client),
) -> dict:
    return {"submissions": SubmissionService(client).list_for_challenge(challenge_id)}


@router.put("/challenges/{challenge_id}/submission")
def submit(
    challenge_id: str,
    payload: SubmissionPayload,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Create or replace the caller's submission for a challenge."""
    submission = SubmissionService(client).submit(
        user_id=get_current_user_id(user),
        challenge_id=challenge_id,
        payload=payload.model_dump(),
    )
    return {"submission": submission}


@router.delete("/submissions/{submission_id}")
def delete_submission(
    submission_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    SubmissionService(client).delete(get_current_user_id(user), submission_id)
    return {"success": True}


@router.post("/submissions/{submission_id}/vote", response_model=VoteResponse)
def vote(
    submission_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Vote for a submission."""
    return VoteService(client).vote(get_current_user_id(user), submission_id)


@router.delete("/submissions/{submission_id}/vote", response_model=VoteResponse)
def unvote(
    submission_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Remove the caller's vote from a submission."""
    return VoteService(client).unvote(get_current_user_id(user), submission_id)
