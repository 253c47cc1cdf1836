"""Profile lookup, editing, and overview aggregation."""

from __future__ import annotations

import re
from typing import Any

from circle.services.badge_service import BadgeService
from circle.services.common import SupabaseService
from circle.services.community_service import CommunityService
from circle.services.reputation_service import ReputationService
from circle.services.submission_service import SubmissionService
from circle.utils.errors import ConflictError, UniqueViolationError, ValidationError
from supabase import Client

EDITABLE_FIELDS = ("username", "full_name", "bio", "avatar_url")
USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,30}$")


class ProfileService:
    """Public profiles; reputation_points is read-only here."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def get(self, user_id: str) -> dict[str, Any]:
        return self.db.select_one("profiles", {"id": user_id}, not_found_label="Profile")

    def get_by_username(self, username: str) -> dict[str, Any]:
        return self.db.select_one(
            "profiles", {"username": username.strip()}, not_found_label="Profile"
        )

    def update(self, user_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        """Apply editable profile fields; other keys are ignored."""
        payload: dict[str, Any] = {}
        for field in EDITABLE_FIELDS:
            if field in updates and updates[field] is not None:
                payload[field] = str(updates[field]).strip()

        if "username" in payload and not USERNAME_RE.match(payload["username"]):
            raise ValidationError(
                {"username": ["Username must be 3-30 letters, digits or underscores"]}
            )
        if not payload:
            return self.get(user_id)

        if "username" in payload:
            taken = self.db.select_many(
                "profiles", filters={"username": payload["username"]}, columns="id", limit=1
            )
            if taken and str(taken[0]["id"]) != str(user_id):
                raise ConflictError("Username is already taken", code="USERNAME_TAKEN")

        try:
            rows = self.db.update("profiles", {"id": user_id}, payload)
        except UniqueViolationError as exc:
            raise ConflictError("Username is already taken", code="USERNAME_TAKEN") from exc
        return rows[0] if rows else self.get(user_id)

    def overview(self, user_id: str) -> dict[str, Any]:
        """Return the profile page payload."""
        client = self.db.client
        return {
            "profile": self.get(user_id),
            "communities": CommunityService(client).list_for_user(user_id),
            "submissions": SubmissionService(client).list_for_user(user_id),
            "reputation_history": ReputationService(client).history(user_id, limit=20),
            "badges": BadgeService(client).list_for_user(user_id),
        }
