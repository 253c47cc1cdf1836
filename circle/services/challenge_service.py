"""Challenge creation, lookup, and stored-status reconciliation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from circle.services.common import SupabaseService
from circle.services.lifecycle import (
    STATUS_EXPIRED,
    derive_status,
    submission_block_reason,
    validate_create,
)
from circle.services.membership_service import MembershipService
from circle.services.notification_service import NotificationService
from circle.utils.errors import ForbiddenError, StorageError
from circle.utils.time import days_left, now_utc
from supabase import Client

logger = logging.getLogger(__name__)


class ChallengeService:
    """Challenges scoped to a community and led by its leader."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)
        self.membership = MembershipService(client)
        self.notifications = NotificationService(client)

    def _with_live_status(
        self, challenge: dict[str, Any], now: datetime
    ) -> dict[str, Any]:
        payload = dict(challenge)
        status = derive_status(challenge, now)
        if challenge.get("status") != status:
            self.db.update("challenges", {"id": challenge["id"]}, {"status": status})
            logger.info(
                "Challenge %s status %s -> %s",
                challenge["id"],
                challenge.get("status"),
                status,
            )
        payload["status"] = status
        payload["days_left"] = days_left(challenge["end_date"], now)
        return payload

    def create(
        self,
        actor_id: str,
        payload: Mapping[str, Any],
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Create a challenge in a community the actor leads."""
        moment = now or now_utc()
        fields = validate_create(payload, moment)

        community = self.db.select_one(
            "communities",
            {"id": fields["community_id"]},
            columns="id,name,leader_id",
            not_found_label="Community",
        )
        if str(community["leader_id"]) != str(actor_id):
            raise ForbiddenError("Only the community leader can create challenges")

        challenge = self.db.insert_one(
            "challenges",
            {
                "community_id": fields["community_id"],
                "title": fields["title"],
                "description": fields["description"],
                "start_date": fields["start_date"].isoformat(),
                "end_date": fields["end_date"].isoformat(),
                "status": derive_status(fields, moment),
                "created_by": actor_id,
            },
        )

        recipients = [
            member_id
            for member_id in self.membership.member_ids(fields["community_id"])
            if member_id != str(actor_id)
        ]
        # Best-effort once the challenge row exists.
        try:
            self.notifications.create_bulk(
                user_ids=recipients,
                notification_type="challenge",
                title="New challenge",
                message=f"{community['name']} posted a new challenge: {fields['title']}",
                related_id=str(challenge["id"]),
            )
        except StorageError:
            logger.warning(
                "Could not notify %d members about challenge %s",
                len(recipients),
                challenge["id"],
                exc_info=True,
            )
        logger.info("Challenge %s created in community %s", challenge["id"], community["id"])
        return self._with_live_status(challenge, moment)

    def get_row(self, challenge_id: str) -> dict[str, Any]:
        """Return the stored challenge row."""
        return self.db.select_one("challenges", {"id": challenge_id}, not_found_label="Challenge")

    def get(self, challenge_id: str, now: datetime | None = None) -> dict[str, Any]:
        """Return a challenge with its community, live status, and days left."""
        moment = now or now_utc()
        challenge = self._with_live_status(self.get_row(challenge_id), moment)
        challenge["community"] = self.db.select_one(
            "communities",
            {"id": challenge["community_id"]},
            columns="id,name,image_url,leader_id",
            not_found_label="Community",
        )
        return challenge

    def list_active(
        self,
        community_id: str | None = None,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Return challenges running at ``now``, newest first."""
        moment = now or now_utc()
        stamp = moment.isoformat()
        query = (
            self.db.client.table("challenges")
            .select("*")
            .lte("start_date", stamp)
            .gte("end_date", stamp)
        )
        if community_id:
            query = query.eq("community_id", community_id)
        rows = self.db.execute(query.order("created_at", desc=True), default=[])
        return [self._with_live_status(row, moment) for row in rows]

    def list_for_community(
        self, community_id: str, now: datetime | None = None
    ) -> list[dict[str, Any]]:
        """Return every challenge of a community with live status."""
        moment = now or now_utc()
        rows = self.db.select_many(
            "challenges",
            filters={"community_id": community_id},
            order_by="end_date",
            descending=True,
        )
        return [self._with_live_status(row, moment) for row in rows]

    def eligibility(
        self,
        user_id: str | None,
        challenge_id: str,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Return whether the user may submit right now and why not."""
        moment = now or now_utc()
        challenge = self.get_row(challenge_id)
        reason = submission_block_reason(user_id, challenge, self.membership, moment)
        return {
            "can_submit": reason is None,
            "reason": reason,
            "status": derive_status(challenge, moment),
        }

    def sync_statuses(self, now: datetime | None = None) -> int:
        """Rewrite stale stored statuses; return how many rows changed."""
        moment = now or now_utc()
        rows = self.db.execute(
            self.db.client.table("challenges")
            .select("id,start_date,end_date,status")
            .neq("status", STATUS_EXPIRED),
            default=[],
        )
        changed = 0
        for row in rows:
            status = derive_status(row, moment)
            if row.get("status") != status:
                self.db.update("challenges", {"id": row["id"]}, {"status": status})
                changed += 1
        return changed
