"""Community creation and lookup service."""

from __future__ import annotations

import logging
from typing import Any

from circle.services.common import SupabaseService
from circle.services.membership_service import MembershipService
from circle.utils.errors import StorageError, ValidationError
from supabase import Client

CREATE_FUNCTION = "create_community_with_leader"
MIN_NAME_LENGTH = 3
MIN_DESCRIPTION_LENGTH = 10
logger = logging.getLogger(__name__)


def validate_community(name: str, description: str) -> tuple[str, str]:
    """Return trimmed name/description or raise with every violation."""
    violations: dict[str, list[str]] = {}
    clean_name = (name or "").strip()
    clean_description = (description or "").strip()

    if not clean_name:
        violations["name"] = ["Community name is required"]
    elif len(clean_name) < MIN_NAME_LENGTH:
        violations["name"] = [
            f"Community name must be at least {MIN_NAME_LENGTH} characters long"
        ]

    if not clean_description:
        violations["description"] = ["Community description is required"]
    elif len(clean_description) < MIN_DESCRIPTION_LENGTH:
        violations["description"] = [
            f"Community description must be at least {MIN_DESCRIPTION_LENGTH} characters long"
        ]

    if violations:
        raise ValidationError(violations)
    return clean_name, clean_description


class CommunityService:
    """Community creation, browsing, and per-user listings."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)
        self.membership = MembershipService(client)

    def _attach_leaders(self, communities: list[dict[str, Any]]) -> list[dict[str, Any]]:
        leaders = self.db.get_profiles_map(
            str(row["leader_id"]) for row in communities if row.get("leader_id")
        )
        enriched = []
        for community in communities:
            payload = dict(community)
            payload["leader"] = leaders.get(str(community.get("leader_id")))
            enriched.append(payload)
        return enriched

    def create(
        self,
        user_id: str,
        name: str,
        description: str,
        image_url: str | None = None,
    ) -> dict[str, Any]:
        """Create a community led by ``user_id`` together with the leader's membership.

        Both rows and the initial member_count are written by one database
        function, so a failure leaves neither behind.
        """
        clean_name, clean_description = validate_community(name, description)
        rows = self.db.execute(
            self.db.client.rpc(
                CREATE_FUNCTION,
                {
                    "p_leader_id": user_id,
                    "p_name": clean_name,
                    "p_description": clean_description,
                    "p_image_url": (image_url or "").strip() or None,
                },
            ),
            default=[],
        )
        if not rows:
            raise StorageError("Community creation failed, please retry")

        community = dict(rows[0])
        logger.info("Community %s created by %s", community["id"], user_id)
        return community

    def list_all(self) -> list[dict[str, Any]]:
        """Return active communities, largest first."""
        rows = self.db.select_many(
            "communities",
            filters={"is_active": True},
            order_by="member_count",
            descending=True,
        )
        return self._attach_leaders(rows)

    def get(self, community_id: str) -> dict[str, Any]:
        """Return one community with its leader profile."""
        community = self.db.select_one(
            "communities", {"id": community_id}, not_found_label="Community"
        )
        return self._attach_leaders([community])[0]

    def list_for_user(self, user_id: str) -> list[dict[str, Any]]:
        """Return the communities a user belongs to."""
        community_ids = self.membership.community_ids_for_user(user_id)
        rows = self.db.select_in("communities", "id", community_ids)
        rows.sort(key=lambda item: str(item.get("created_at")), reverse=True)
        return rows

    def list_led_by(self, user_id: str) -> list[dict[str, Any]]:
        """Return the communities a user leads (where they may create challenges)."""
        return self.db.select_many(
            "communities",
            filters={"leader_id": user_id},
            order_by="created_at",
            descending=True,
        )
