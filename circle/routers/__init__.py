"""API router package."""

from circle.routers import auth, challenges, communities, notifications, profiles, submissions

__all__ = [
    "auth",
    "challenges",
    "communities",
    "notifications",
    "profiles",
    "submissions",
]
