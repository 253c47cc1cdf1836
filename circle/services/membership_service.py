"""Community membership ledger."""

from __future__ import annotations

import logging
from typing import Any

from circle.services.common import SupabaseService, map_users_on_field
from circle.utils.errors import (
    AlreadyMemberError,
    ForbiddenError,
    NotMemberError,
    UniqueViolationError,
)
from supabase import Client

MEMBERSHIPS_TABLE = "community_memberships"
logger = logging.getLogger(__name__)


class MembershipService:
    """Join, leave, and membership checks.

    ``communities.member_count`` is always rewritten from the ledger count
    after a mutation, so retries and races cannot make it drift.
    """

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def is_member(self, user_id: str | None, community_id: str) -> bool:
        """Check if a membership row exists for the pair."""
        if not user_id:
            return False
        return self.db.exists(
            MEMBERSHIPS_TABLE,
            {"user_id": user_id, "community_id": community_id},
        )

    def ensure_member(self, user_id: str, community_id: str) -> None:
        """Raise NotMemberError when the user is not in the community."""
        if not self.is_member(user_id, community_id):
            raise NotMemberError()

    def join(self, user_id: str, community_id: str) -> dict[str, Any]:
        """Add the user to a community and return the membership with the new count."""
        self.db.select_one(
            "communities", {"id": community_id}, columns="id", not_found_label="Community"
        )
        if self.is_member(user_id, community_id):
            raise AlreadyMemberError()

        try:
            membership = self.db.insert_one(
                MEMBERSHIPS_TABLE,
                {"user_id": user_id, "community_id": community_id},
            )
        except UniqueViolationError as exc:
            raise AlreadyMemberError() from exc

        member_count = self.sync_member_count(community_id)
        logger.info("User %s joined community %s", user_id, community_id)
        return {"membership": membership, "member_count": member_count}

    def leave(self, user_id: str, community_id: str) -> dict[str, Any]:
        """Remove the user from a community and return the new count."""
        community = self.db.select_one(
            "communities",
            {"id": community_id},
            columns="id,leader_id",
            not_found_label="Community",
        )
        if str(community.get("leader_id")) == str(user_id):
            raise ForbiddenError("Community leaders cannot leave their own community")

        removed = self.db.delete(
            MEMBERSHIPS_TABLE,
            {"user_id": user_id, "community_id": community_id},
        )
        if not removed:
            raise NotMemberError()

        member_count = self.sync_member_count(community_id)
        logger.info("User %s left community %s", user_id, community_id)
        return {"member_count": member_count}

    def sync_member_count(self, community_id: str) -> int:
        """Store the ledger count as the community's member_count."""
        member_count = max(0, self.db.count(MEMBERSHIPS_TABLE, {"community_id": community_id}))
        self.db.update("communities", {"id": community_id}, {"member_count": member_count})
        return member_count

    def community_ids_for_user(self, user_id: str) -> list[str]:
        rows = self.db.select_many(
            MEMBERSHIPS_TABLE,
            filters={"user_id": user_id},
            columns="community_id",
        )
        return sorted({str(row["community_id"]) for row in rows})

    def member_ids(self, community_id: str) -> list[str]:
        rows = self.db.select_many(
            MEMBERSHIPS_TABLE,
            filters={"community_id": community_id},
            columns="user_id",
        )
        return sorted({str(row["user_id"]) for row in rows})

    def list_members(self, community_id: str) -> list[dict[str, Any]]:
        """Return memberships with public profiles, oldest first."""
        rows = self.db.select_many(
            MEMBERSHIPS_TABLE,
            filters={"community_id": community_id},
            columns="user_id,community_id,joined_at",
            order_by="joined_at",
        )
        profiles = self.db.get_profiles_map(row["user_id"] for row in rows)
        return map_users_on_field(rows, profiles)
