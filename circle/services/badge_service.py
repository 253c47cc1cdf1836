"""Badge catalog and per-user badge awards."""

from __future__ import annotations

import logging
from typing import Any

from circle.services.common import SupabaseService
from circle.utils.errors import ConflictError, UniqueViolationError
from supabase import Client

logger = logging.getLogger(__name__)


class BadgeService:
    """Earned badges; which badges to grant is decided by the caller."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def list_for_user(self, user_id: str) -> list[dict[str, Any]]:
        """Return a user's badges, most recently earned first, with badge details."""
        earned = self.db.select_many(
            "user_badges",
            filters={"user_id": user_id},
            order_by="earned_at",
            descending=True,
        )
        catalog = {
            str(row["id"]): row
            for row in self.db.select_in("badges", "id", (row["badge_id"] for row in earned))
        }
        for row in earned:
            row["badge"] = catalog.get(str(row["badge_id"]))
        return earned

    def grant(self, user_id: str, badge_id: str) -> dict[str, Any]:
        """Record that ``user_id`` earned ``badge_id``; each badge is earned once."""
        self.db.select_one("badges", {"id": badge_id}, columns="id", not_found_label="Badge")
        try:
            awarded = self.db.insert_one("user_badges", {"user_id": user_id, "badge_id": badge_id})
        except UniqueViolationError as exc:
            raise ConflictError("Badge already earned", code="BADGE_ALREADY_EARNED") from exc
        logger.info("Badge %s granted to %s", badge_id, user_id)
        return awarded
