"""Challenge status reconciliation job."""

from __future__ import annotations

import logging

from circle.services.challenge_service import ChallengeService
from circle.utils.supabase_client import get_service_client

logger = logging.getLogger(__name__)


async def challenge_status_sync() -> None:
    """Bring stored challenge statuses in line with their dates."""
    changed = ChallengeService(get_service_client()).sync_statuses()
    logger.info("challenge_status_sync completed with %s updated challenges", changed)
