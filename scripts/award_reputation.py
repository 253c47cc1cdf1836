"""Award (or deduct) reputation points for one user from the command line."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Append an entry to public.reputation_history and refresh the total.",
    )
    parser.add_argument("user", help="Profile id, or username when --by-username is set.")
    parser.add_argument("points", type=int, help="Points to add (negative to deduct).")
    parser.add_argument("reason", help="Why the points are awarded.")
    parser.add_argument(
        "--by-username",
        action="store_true",
        help="Treat USER as a username instead of a profile id.",
    )
    parser.add_argument("--submission", default=None, help="Related submission id.")
    parser.add_argument("--challenge", default=None, help="Related challenge id.")
    parser.add_argument("--badge", default=None, help="Badge id to grant along with the points.")
    parser.add_argument(
        "--reconcile",
        action="store_true",
        help="Only recompute the cached total from history; POINTS and REASON are ignored.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = parse_args(argv)

    from circle.services.badge_service import BadgeService
    from circle.services.profile_service import ProfileService
    from circle.services.reputation_service import ReputationService
    from circle.utils.errors import AppError
    from circle.utils.supabase_client import get_service_client

    client = get_service_client()
    try:
        user_id = args.user
        if args.by_username:
            user_id = str(ProfileService(client).get_by_username(args.user)["id"])

        service = ReputationService(client)
        if args.reconcile:
            total = service.reconcile(user_id)
            print(f"Reconciled {user_id}: {total} points")
            return 0

        result = service.award(
            user_id=user_id,
            points=args.points,
            reason=args.reason,
            related_submission_id=args.submission,
            related_challenge_id=args.challenge,
        )
        if args.badge:
            BadgeService(client).grant(user_id, args.badge)
    except AppError as exc:
        print(f"error: {exc.message} ({exc.code})", file=sys.stderr)
        return 1

    print(f"Awarded {args.points} to {user_id}; total is now {result['reputation_points']}")
    if args.badge:
        print(f"Granted badge {args.badge} to {user_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
