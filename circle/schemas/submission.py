"""Submission and vote schemas."""

from pydantic import BaseModel


class SubmissionPayload(BaseModel):
    """Request body for submitting (or resubmitting) to a challenge."""

    title: str = ""
    description: str | None = None
    content_url: str = ""
    submission_type: str = "video"


class VoteResponse(BaseModel):
    submission_id: str
    vote_count: int
    has_voted: bool
