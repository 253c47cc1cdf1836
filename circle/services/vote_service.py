"""Submission voting ledger."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from circle.services.common import SupabaseService
from circle.services.membership_service import MembershipService
from circle.utils.errors import (
    AlreadyVotedError,
    NotMemberError,
    NotVotedError,
    UniqueViolationError,
)
from supabase import Client

logger = logging.getLogger(__name__)


class VoteService:
    """Vote and unvote on submissions.

    The vote count of a submission is the number of ``votes`` rows pointing at
    it. ``submissions.vote_count`` is rewritten from that count after every
    change and is never incremented on its own.
    """

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)
        self.membership = MembershipService(client)

    def _community_of(self, submission_id: str) -> str:
        submission = self.db.select_one(
            "submissions",
            {"id": submission_id},
            columns="id,challenge_id",
            not_found_label="Submission",
        )
        challenge = self.db.select_one(
            "challenges",
            {"id": submission["challenge_id"]},
            columns="id,community_id",
            not_found_label="Challenge",
        )
        return str(challenge["community_id"])

    def has_voted(self, user_id: str, submission_id: str) -> bool:
        return self.db.exists("votes", {"user_id": user_id, "submission_id": submission_id})

    def vote_count(self, submission_id: str) -> int:
        """Count ledger rows for a submission."""
        return self.db.count("votes", {"submission_id": submission_id})

    def refresh_vote_count(self, submission_id: str) -> int:
        """Write the ledger count back onto the submission row."""
        count = self.vote_count(submission_id)
        self.db.update("submissions", {"id": submission_id}, {"vote_count": count})
        return count

    def vote(self, user_id: str, submission_id: str) -> dict[str, Any]:
        """Record one vote by a member of the submission's community."""
        community_id = self._community_of(submission_id)
        if not self.membership.is_member(user_id, community_id):
            raise NotMemberError("You must be a member of this community to vote")
        if self.has_voted(user_id, submission_id):
            raise AlreadyVotedError()

        try:
            self.db.insert_one("votes", {"user_id": user_id, "submission_id": submission_id})
        except UniqueViolationError as exc:
            raise AlreadyVotedError() from exc

        logger.info("User %s voted for submission %s", user_id, submission_id)
        return {
            "submission_id": submission_id,
            "vote_count": self.refresh_vote_count(submission_id),
            "has_voted": True,
        }

    def unvote(self, user_id: str, submission_id: str) -> dict[str, Any]:
        """Remove the user's vote from a submission."""
        removed = self.db.delete("votes", {"user_id": user_id, "submission_id": submission_id})
        if not removed:
            raise NotVotedError()

        logger.info("User %s removed vote from submission %s", user_id, submission_id)
        return {
            "submission_id": submission_id,
            "vote_count": self.refresh_vote_count(submission_id),
            "has_voted": False,
        }

    def voted_submission_ids(self, user_id: str, submission_ids: Iterable[str]) -> set[str]:
        """Return which of ``submission_ids`` the user has voted for."""
        wanted = {str(value) for value in submission_ids}
        if not wanted:
            return set()
        rows = self.db.execute(
            self.db.client.table("votes")
            .select("submission_id")
            .eq("user_id", user_id)
            .in_("submission_id", sorted(wanted)),
            default=[],
        )
        return {str(row["submission_id"]) for row in rows}
