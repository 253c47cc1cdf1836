"""Challenge schemas."""

from pydantic import BaseModel


class ChallengeCreate(BaseModel):
    """Request body for creating a challenge.

    Dates are ISO 8601 strings with a UTC offset (``Z`` or ``+02:00``), so a
    browser's local time is never guessed. All rules are checked together by
    the lifecycle validator.
    """

    community_id: str = ""
    title: str = ""
    description: str = ""
    start_date: str = ""
    end_date: str = ""


class EligibilityResponse(BaseModel):
    can_submit: bool
    reason: str | None = None
    status: str
