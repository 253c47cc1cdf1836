"""Notification endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from circle.config import settings
from circle.dependencies import get_current_user, get_current_user_id, get_db_client
from circle.schemas.notification import NotificationListResponse, NotificationResponse
from circle.services.notification_service import NotificationService
from supabase import Client

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    unread_only: bool = Query(default=False),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return the caller's notifications, newest first."""
    service = NotificationService(client)
    notifications = service.list_notifications(
        user_id=get_current_user_id(user),
        unread_only=unread_only,
        limit=limit,
    )
    return {"notifications": notifications}


@router.put("/read-all")
def mark_all_read(
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    service = NotificationService(client)
    return {"count": service.mark_all_read(user_id=get_current_user_id(user))}


@router.put("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: str,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Mark one of the caller's notifications as read."""
    service = NotificationService(client)
    return service.mark_read(
        user_id=get_current_user_id(user),
        notification_id=notification_id,
    )
