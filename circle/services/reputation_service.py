"""Reputation history and totals."""

from __future__ import annotations

import logging
from typing import Any

from circle.services.common import SupabaseService
from circle.utils.errors import InvalidInputError, StorageError
from supabase import Client

AWARD_FUNCTION = "award_reputation_points"
logger = logging.getLogger(__name__)


class ReputationService:
    """Append-only point history reducing to ``profiles.reputation_points``."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def award(
        self,
        user_id: str,
        points: int,
        reason: str,
        related_submission_id: str | None = None,
        related_challenge_id: str | None = None,
    ) -> dict[str, Any]:
        """Append a history entry and refresh the user's total atomically.

        The database function inserts the entry and rewrites the cached total
        from the sum of all entries inside one transaction.
        """
        if isinstance(points, bool) or not isinstance(points, int):
            raise InvalidInputError("Points must be an integer")
        clean_reason = (reason or "").strip()
        if not clean_reason:
            raise InvalidInputError("A reason is required")

        rows = self.db.execute(
            self.db.client.rpc(
                AWARD_FUNCTION,
                {
                    "p_user_id": user_id,
                    "p_points": points,
                    "p_reason": clean_reason,
                    "p_related_submission_id": related_submission_id,
                    "p_related_challenge_id": related_challenge_id,
                },
            ),
            default=[],
        )
        if not rows:
            raise StorageError("Reputation award failed, please retry")

        result = rows[0]
        logger.info("Awarded %s points to %s (%s)", points, user_id, clean_reason)
        return {
            "history_id": str(result["history_id"]),
            "reputation_points": int(result["reputation_points"]),
        }

    def history(self, user_id: str, limit: int = 50) -> list[dict[str, Any]]:
        return self.db.select_many(
            "reputation_history",
            filters={"user_id": user_id},
            order_by="created_at",
            descending=True,
            limit=limit,
        )

    def total(self, user_id: str) -> int:
        """Sum every history entry for the user."""
        rows = self.db.select_many(
            "reputation_history", filters={"user_id": user_id}, columns="points"
        )
        return sum(int(row["points"]) for row in rows)

    def reconcile(self, user_id: str) -> int:
        """Rewrite the cached profile total from the history and return it."""
        total = self.total(user_id)
        self.db.update("profiles", {"id": user_id}, {"reputation_points": total})
        return total
