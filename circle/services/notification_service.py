"""Notification service."""

from __future__ import annotations

from typing import Any

from circle.services.common import SupabaseService
from circle.utils.errors import NotFoundError
from supabase import Client


class NotificationService:
    """Create and manage user notifications."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    @staticmethod
    def _payload(
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        related_id: str | None,
    ) -> dict[str, Any]:
        return {
            "user_id": user_id,
            "type": notification_type,
            "title": title,
            "message": message,
            "related_id": related_id,
            "is_read": False,
        }

    def create_notification(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        related_id: str | None = None,
    ) -> dict[str, Any]:
        """Create a notification row."""
        return self.db.insert_one(
            "notifications",
            self._payload(user_id, notification_type, title, message, related_id),
        )

    def create_bulk(
        self,
        user_ids: list[str],
        notification_type: str,
        title: str,
        message: str,
        related_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """Create one notification per user."""
        payloads = [
            self._payload(user_id, notification_type, title, message, related_id)
            for user_id in user_ids
        ]
        return self.db.insert_many("notifications", payloads)

    def list_notifications(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Return notifications for a user in reverse chronological order."""
        query = self.db.client.table("notifications").select("*").eq("user_id", user_id)
        if unread_only:
            query = query.eq("is_read", False)
        query = query.order("created_at", desc=True).limit(limit)
        return self.db.execute(query, default=[])

    def mark_read(self, user_id: str, notification_id: str) -> dict[str, Any]:
        """Mark a single notification as read."""
        rows = self.db.update(
            "notifications",
            {"id": notification_id, "user_id": user_id},
            {"is_read": True},
        )
        if not rows:
            raise NotFoundError("Notification")
        return rows[0]

    def mark_all_read(self, user_id: str) -> int:
        """Mark all unread notifications as read and return affected count."""
        rows = self.db.update(
            "notifications",
            {"user_id": user_id, "is_read": False},
            {"is_read": True},
        )
        return len(rows)
