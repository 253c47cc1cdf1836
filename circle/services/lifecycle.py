"""Challenge lifecycle rules.

Status is always derived from ``start_date``/``end_date`` and the current
time. A stored ``status`` column is only a cache and is never consulted here.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol

from circle.config import settings
from circle.utils.errors import ValidationError
from circle.utils.time import (
    NaiveTimestampError,
    days_between,
    now_utc,
    parse_timestamp,
    require_timestamp,
)

STATUS_UPCOMING = "upcoming"
STATUS_ACTIVE = "active"
STATUS_EXPIRED = "expired"

MIN_TITLE_LENGTH = settings.challenge_min_title_length
MIN_DESCRIPTION_LENGTH = settings.challenge_min_description_length
MIN_DURATION_DAYS = settings.challenge_min_duration_days
MAX_DURATION_DAYS = settings.challenge_max_duration_days


class MembershipChecker(Protocol):
    def is_member(self, user_id: str | None, community_id: str) -> bool: ...


def derive_status(challenge: Mapping[str, Any], now: datetime | None = None) -> str:
    """Return upcoming, active or expired for ``challenge`` at ``now``.

    Both bounds are inclusive for ``active``.
    """
    start = require_timestamp(challenge["start_date"])
    end = require_timestamp(challenge["end_date"])
    moment = now or now_utc()
    if moment < start:
        return STATUS_UPCOMING
    if moment > end:
        return STATUS_EXPIRED
    return STATUS_ACTIVE


def submission_block_reason(
    user_id: str | None,
    challenge: Mapping[str, Any],
    membership: MembershipChecker,
    now: datetime | None = None,
) -> str | None:
    """Return why ``user_id`` cannot submit right now, or None if they can."""
    if not user_id:
        return "You must be signed in to submit entries"

    status = derive_status(challenge, now)
    if status == STATUS_UPCOMING:
        return "This challenge has not started yet"
    if status == STATUS_EXPIRED:
        return "This challenge has ended"

    if not membership.is_member(user_id, str(challenge["community_id"])):
        return "You must be a member of this community to submit entries"
    return None


def can_submit(
    user_id: str | None,
    challenge: Mapping[str, Any],
    membership: MembershipChecker,
    now: datetime | None = None,
) -> bool:
    """True iff the user is signed in, a member, and the challenge is active."""
    return submission_block_reason(user_id, challenge, membership, now) is None


def _text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return str(value).strip() if value is not None else ""


def _timestamp_field(
    payload: Mapping[str, Any],
    key: str,
    label: str,
    violations: dict[str, list[str]],
) -> datetime | None:
    try:
        parsed = parse_timestamp(payload.get(key), assume_utc=False)
    except NaiveTimestampError:
        violations.setdefault(key, []).append(
            f"{label} must include a UTC offset, for example 2026-03-11T09:00:00+02:00"
        )
        return None
    except (TypeError, ValueError):
        violations.setdefault(key, []).append(f"{label} is not a valid date")
        return None
    if parsed is None:
        violations.setdefault(key, []).append(f"{label} is required")
    return parsed


def validate_create(payload: Mapping[str, Any], now: datetime | None = None) -> dict[str, Any]:
    """Validate a new challenge and return its normalized fields.

    Every violated rule is collected before raising, keyed by field name.
    """
    moment = now or now_utc()
    violations: dict[str, list[str]] = {}

    title = _text(payload, "title")
    if not title:
        violations.setdefault("title", []).append("Title is required")
    elif len(title) < MIN_TITLE_LENGTH:
        violations.setdefault("title", []).append(
            f"Title must be at least {MIN_TITLE_LENGTH} characters"
        )

    description = _text(payload, "description")
    if not description:
        violations.setdefault("description", []).append("Description is required")
    elif len(description) < MIN_DESCRIPTION_LENGTH:
        violations.setdefault("description", []).append(
            f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters"
        )

    community_id = _text(payload, "community_id")
    if not community_id:
        violations.setdefault("community_id", []).append("Please select a community")

    start = _timestamp_field(payload, "start_date", "Start date", violations)
    end = _timestamp_field(payload, "end_date", "End date", violations)

    if start is not None and start < moment:
        violations.setdefault("start_date", []).append("Start date cannot be in the past")

    if start is not None and end is not None:
        if end <= start:
            violations.setdefault("end_date", []).append("End date must be after start date")
        else:
            duration = days_between(start, end)
            if duration < MIN_DURATION_DAYS:
                violations.setdefault("end_date", []).append(
                    "Challenge must run for at least 1 day"
                )
            if duration > MAX_DURATION_DAYS:
                violations.setdefault("end_date", []).append(
                    f"Challenge cannot run for more than {MAX_DURATION_DAYS} days"
                )

    if violations:
        raise ValidationError(violations)

    return {
        "title": title,
        "description": description,
        "community_id": community_id,
        "start_date": start,
        "end_date": end,
    }
