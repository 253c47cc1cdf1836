"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "BadgeService": "circle.services.badge_service",
    "ChallengeService": "circle.services.challenge_service",
    "CommunityService": "circle.services.community_service",
    "MembershipService": "circle.services.membership_service",
    "NotificationService": "circle.services.notification_service",
    "ProfileService": "circle.services.profile_service",
    "ReputationService": "circle.services.reputation_service",
    "SubmissionService": "circle.services.submission_service",
    "SupabaseService": "circle.services.common",
    "VoteService": "circle.services.vote_service",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
