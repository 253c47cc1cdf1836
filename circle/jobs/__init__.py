"""Background job modules for periodic Circle tasks."""

from circle.jobs.challenge_status_sync import challenge_status_sync

__all__ = ["challenge_status_sync"]
