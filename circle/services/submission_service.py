"""Challenge submission registry."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from circle.services.common import SupabaseService, map_users_on_field
from circle.services.lifecycle import STATUS_EXPIRED, derive_status, submission_block_reason
from circle.services.membership_service import MembershipService
from circle.utils.content_urls import (
    SUBMISSION_VIDEO,
    extract_youtube_video_id,
    validate_content_url,
)
from circle.utils.errors import (
    ChallengeClosedError,
    ForbiddenError,
    NotEligibleError,
    NotFoundError,
    UniqueViolationError,
    ValidationError,
)
from circle.utils.time import format_relative_time, now_utc
from supabase import Client

logger = logging.getLogger(__name__)


def clean_submission(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Validate the editable fields of a submission."""
    title = str(payload.get("title") or "").strip()
    if not title:
        raise ValidationError({"title": ["Title is required"]})

    submission_type = str(payload.get("submission_type") or SUBMISSION_VIDEO).strip().lower()
    content_url = validate_content_url(payload.get("content_url"), submission_type)
    description = str(payload.get("description") or "").strip()
    return {
        "title": title,
        "description": description or None,
        "content_url": content_url,
        "submission_type": submission_type,
    }


class SubmissionService:
    """One submission per user per challenge; resubmitting edits it in place."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)
        self.membership = MembershipService(client)

    def find(self, user_id: str, challenge_id: str) -> dict[str, Any] | None:
        """Return the user's submission for a challenge, if any."""
        rows = self.db.select_many(
            "submissions",
            filters={"user_id": user_id, "challenge_id": challenge_id},
            limit=1,
        )
        return rows[0] if rows else None

    def _update(self, submission_id: str, fields: dict[str, Any], now: datetime) -> dict[str, Any]:
        rows = self.db.update(
            "submissions",
            {"id": submission_id},
            {**fields, "updated_at": now.isoformat()},
        )
        if not rows:
            raise NotFoundError("Submission")
        return rows[0]

    def submit(
        self,
        user_id: str,
        challenge_id: str,
        payload: Mapping[str, Any],
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Create or update the user's submission for a challenge."""
        moment = now or now_utc()
        challenge = self.db.select_one(
            "challenges", {"id": challenge_id}, not_found_label="Challenge"
        )
        existing = self.find(user_id, challenge_id)
        if existing and derive_status(challenge, moment) == STATUS_EXPIRED:
            raise ChallengeClosedError()

        reason = submission_block_reason(user_id, challenge, self.membership, moment)
        if reason:
            raise NotEligibleError(reason)

        fields = clean_submission(payload)
        if existing:
            logger.info("Updating submission %s", existing["id"])
            return self._update(str(existing["id"]), fields, moment)

        try:
            created = self.db.insert_one(
                "submissions",
                {
                    **fields,
                    "challenge_id": challenge_id,
                    "user_id": user_id,
                    "vote_count": 0,
                },
            )
        except UniqueViolationError:
            # A concurrent submit won the insert; apply this payload on top.
            existing = self.find(user_id, challenge_id)
            if existing is None:
                raise
            return self._update(str(existing["id"]), fields, moment)

        logger.info("User %s submitted to challenge %s", user_id, challenge_id)
        return created

    def delete(self, user_id: str, submission_id: str, now: datetime | None = None) -> None:
        """Withdraw a submission while its challenge is still open."""
        moment = now or now_utc()
        submission = self.db.select_one(
            "submissions", {"id": submission_id}, not_found_label="Submission"
        )
        if str(submission["user_id"]) != str(user_id):
            raise ForbiddenError("You can only delete your own submission")

        challenge = self.db.select_one(
            "challenges", {"id": submission["challenge_id"]}, not_found_label="Challenge"
        )
        if derive_status(challenge, moment) == STATUS_EXPIRED:
            raise ChallengeClosedError()

        self.db.delete("submissions", {"id": submission_id})
        logger.info("Submission %s deleted by %s", submission_id, user_id)

    def list_for_challenge(self, challenge_id: str) -> list[dict[str, Any]]:
        """Return submissions with authors and ledger vote counts, most voted first."""
        rows = self.db.select_many(
            "submissions",
            filters={"challenge_id": challenge_id},
            order_by="created_at",
        )
        votes = self.db.select_in(
            "votes", "submission_id", (row["id"] for row in rows), columns="submission_id"
        )
        counts = Counter(str(vote["submission_id"]) for vote in votes)
        for row in rows:
            row["vote_count"] = counts.get(str(row["id"]), 0)
            row["video_id"] = extract_youtube_video_id(str(row.get("content_url") or ""))
            row["submitted"] = format_relative_time(row.get("created_at"))

        rows.sort(key=lambda row: row["vote_count"], reverse=True)
        authors = self.db.get_profiles_map(row["user_id"] for row in rows)
        return map_users_on_field(rows, authors)

    def list_for_user(self, user_id: str) -> list[dict[str, Any]]:
        """Return a user's submissions, newest first, with challenge titles."""
        rows = self.db.select_many(
            "submissions",
            filters={"user_id": user_id},
            order_by="created_at",
            descending=True,
        )
        challenges = {
            str(row["id"]): row
            for row in self.db.select_in(
                "challenges",
                "id",
                (row["challenge_id"] for row in rows),
                columns="id,title,community_id",
            )
        }
        for row in rows:
            row["challenge"] = challenges.get(str(row["challenge_id"]))
        return rows
