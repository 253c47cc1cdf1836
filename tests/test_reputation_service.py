"""Reputation accumulator tests."""

from __future__ import annotations

import pytest
from postgrest import APIError

from circle.services.reputation_service import ReputationService
from circle.utils.errors import InvalidInputError, StorageError


def _profile(fake_db, user_id: str) -> dict:
    return next(row for row in fake_db.rows("profiles") if row["id"] == user_id)


def test_award_appends_and_refreshes_total(fake_db) -> None:
    service = ReputationService(fake_db)
    service.award("alice", 10, "Won a challenge", related_challenge_id="ch1")
    result = service.award("alice", -3, "Late submission penalty")

    assert result["reputation_points"] == 7
    assert _profile(fake_db, "alice")["reputation_points"] == 7
    assert service.total("alice") == 7
    assert len(service.history("alice")) == 2
    assert _profile(fake_db, "bob")["reputation_points"] == 0


@pytest.mark.parametrize(
    ("points", "reason"),
    [(2.5, "Half points"), (True, "Boolean"), (5, "   ")],
)
def test_award_rejects_bad_input(fake_db, points, reason: str) -> None:
    with pytest.raises(InvalidInputError):
        ReputationService(fake_db).award("alice", points, reason)
    assert fake_db.rows("reputation_history") == []


def test_reconcile_repairs_cached_total(fake_db) -> None:
    service = ReputationService(fake_db)
    service.award("alice", 4, "Helpful feedback")
    _profile(fake_db, "alice")["reputation_points"] = 400

    assert service.reconcile("alice") == 4
    assert _profile(fake_db, "alice")["reputation_points"] == 4


def test_store_failure_surfaces_as_storage_error(fake_db) -> None:
    fake_db.fail_next(APIError({"message": "connection reset", "code": "08006"}))

    with pytest.raises(StorageError):
        ReputationService(fake_db).award("alice", 5, "Top voted")
    assert fake_db.rows("reputation_history") == []
    assert _profile(fake_db, "alice")["reputation_points"] == 0
