"""Authentication endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from circle.dependencies import get_current_user, get_current_user_id, get_db_client
from circle.services.profile_service import ProfileService
from circle.utils.supabase_client import get_auth_client
from supabase import Client

router = APIRouter()


class AuthCallbackRequest(BaseModel):
    """Request body for auth callback endpoint."""

    access_token: str
    refresh_token: str


@router.post("/callback")
def auth_callback(payload: AuthCallbackRequest) -> dict:
    """Validate tokens from the frontend callback and return the user."""
    supabase = get_auth_client()
    supabase.auth.set_session(payload.access_token, payload.refresh_token)
    user_response = supabase.auth.get_user(payload.access_token)
    return {"user": user_response.user}


@router.get("/session")
def auth_session(
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return the authenticated user with their Circle profile."""
    profile = ProfileService(client).get(get_current_user_id(user))
    return {"user": user, "profile": profile}


@router.post("/signout")
def auth_signout() -> dict:
    """Return success for stateless sign-out handling."""
    return {"success": True}
