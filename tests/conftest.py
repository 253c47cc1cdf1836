"""Pytest fixtures for backend tests."""

from __future__ import annotations

import copy
import os
import uuid
from collections import defaultdict
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient
from postgrest import APIError


def _set_default_env() -> None:
    os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
    os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
    os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-key")
    os.environ.setdefault("ENABLE_SCHEDULER", "false")


# Service modules read settings at import time.
_set_default_env()

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)

UNIQUE_KEYS: dict[str, list[tuple[str, ...]]] = {
    "profiles": [("username",)],
    "community_memberships": [("user_id", "community_id")],
    "submissions": [("challenge_id", "user_id")],
    "votes": [("user_id", "submission_id")],
    "user_badges": [("user_id", "badge_id")],
}

# ``on delete cascade`` children per parent table.
CASCADES: dict[str, list[tuple[str, str]]] = {
    "communities": [("community_memberships", "community_id"), ("challenges", "community_id")],
    "challenges": [("submissions", "challenge_id")],
    "submissions": [("votes", "submission_id")],
}


def _same(left: Any, right: Any) -> bool:
    if left == right:
        return True
    return left is not None and right is not None and str(left) == str(right)


def _comparable(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


class FakeResponse:
    def __init__(self, data: Any, count: int | None = None) -> None:
        self.data = data
        self.count = count


class FakeQuery:
    """Chainable stand-in for the supabase-py request builder."""

    def __init__(self, client: FakeSupabaseClient, table: str) -> None:
        self._client = client
        self.table = table
        self.action = "select"
        self.payload: Any = None
        self.filters: list[Callable[[dict[str, Any]], bool]] = []
        self.ordering: tuple[str, bool] | None = None
        self.row_limit: int | None = None
        self.row_offset = 0
        self.count_mode: str | None = None
        self.head = False

    def select(self, columns: str = "*", count: str | None = None, head: bool = False):
        self.count_mode = count
        self.head = head
        return self

    def insert(self, payload: Any):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict[str, Any]):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column: str, value: Any):
        self.filters.append(lambda row: _same(row.get(column), value))
        return self

    def neq(self, column: str, value: Any):
        self.filters.append(lambda row: not _same(row.get(column), value))
        return self

    def in_(self, column: str, values: list[Any]):
        wanted = {str(value) for value in values}
        self.filters.append(lambda row: str(row.get(column)) in wanted)
        return self

    def lt(self, column: str, value: Any):
        self.filters.append(lambda row: _comparable(row.get(column)) < _comparable(value))
        return self

    def lte(self, column: str, value: Any):
        self.filters.append(lambda row: _comparable(row.get(column)) <= _comparable(value))
        return self

    def gt(self, column: str, value: Any):
        self.filters.append(lambda row: _comparable(row.get(column)) > _comparable(value))
        return self

    def gte(self, column: str, value: Any):
        self.filters.append(lambda row: _comparable(row.get(column)) >= _comparable(value))
        return self

    def order(self, column: str, desc: bool = False):
        self.ordering = (column, desc)
        return self

    def limit(self, size: int):
        self.row_limit = size
        return self

    def offset(self, size: int):
        self.row_offset = size
        return self

    def execute(self) -> FakeResponse:
        return self._client.execute(self)


class FakeRpc:
    def __init__(self, client: FakeSupabaseClient, name: str, params: dict[str, Any]) -> None:
        self._client = client
        self.name = name
        self.params = params

    def execute(self) -> FakeResponse:
        return self._client.execute_rpc(self)


class FakeSupabaseClient:
    """In-memory tables with the unique constraints of the Circle schema."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.pending_errors: list[Exception] = []
        self.failing_inserts: dict[str, Exception] = {}
        self.requests: list[tuple[str, str]] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict[str, Any]) -> FakeRpc:
        return FakeRpc(self, name, params)

    def fail_next(self, exc: Exception) -> None:
        """Make the next executed request raise ``exc``."""
        self.pending_errors.append(exc)

    def fail_inserts_into(self, table: str, exc: Exception) -> None:
        """Make every insert into ``table`` raise ``exc``."""
        self.failing_inserts[table] = exc

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables[table]

    def seed(self, table: str, **values: Any) -> dict[str, Any]:
        return self._insert(table, [values])[0]

    def _insert(self, table: str, payloads: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if table in self.failing_inserts:
            raise self.failing_inserts[table]
        created = []
        for payload in payloads:
            row = {
                "id": str(uuid.uuid4()),
                "created_at": datetime.now(tz=UTC).isoformat(),
                **payload,
            }
            if table == "community_memberships":
                row.setdefault("joined_at", row["created_at"])
            for columns in UNIQUE_KEYS.get(table, []):
                for existing in self.tables[table]:
                    if all(_same(existing.get(col), row.get(col)) for col in columns):
                        raise APIError(
                            {
                                "message": f'duplicate key value violates unique constraint "{table}"',
                                "code": "23505",
                                "hint": None,
                                "details": None,
                            }
                        )
            self.tables[table].append(row)
            created.append(dict(row))
        return created

    def _matching(self, query: FakeQuery) -> list[dict[str, Any]]:
        return [row for row in self.tables[query.table] if all(f(row) for f in query.filters)]

    def execute(self, query: FakeQuery) -> FakeResponse:
        self.requests.append((query.action, query.table))
        if self.pending_errors:
            raise self.pending_errors.pop(0)

        if query.action == "insert":
            payloads = query.payload if isinstance(query.payload, list) else [query.payload]
            return FakeResponse(self._insert(query.table, payloads))

        matched = self._matching(query)
        if query.action == "update":
            for row in matched:
                row.update(query.payload)
            return FakeResponse([dict(row) for row in matched])

        if query.action == "delete":
            self._delete_rows(query.table, matched)
            return FakeResponse([dict(row) for row in matched])

        rows = [dict(row) for row in matched]
        if query.ordering:
            column, desc = query.ordering
            rows.sort(
                key=lambda row: (row.get(column) is None, _comparable(row.get(column))),
                reverse=desc,
            )
        total = len(rows)
        rows = rows[query.row_offset :]
        if query.row_limit is not None:
            rows = rows[: query.row_limit]
        if query.head:
            return FakeResponse(None, count=total)
        return FakeResponse(rows, count=total if query.count_mode else None)

    def _delete_rows(self, table: str, doomed: list[dict[str, Any]]) -> None:
        ids = {str(row.get("id")) for row in doomed}
        self.tables[table] = [row for row in self.tables[table] if row not in doomed]
        for child, column in CASCADES.get(table, []):
            orphans = [row for row in self.tables[child] if str(row.get(column)) in ids]
            if orphans:
                self._delete_rows(child, orphans)

    def execute_rpc(self, call: FakeRpc) -> FakeResponse:
        if self.pending_errors:
            raise self.pending_errors.pop(0)
        handler = getattr(self, f"_rpc_{call.name}", None)
        if handler is None:
            raise APIError({"message": f"function {call.name} does not exist", "code": "42883"})

        # Functions run in one transaction: a failure leaves no rows behind.
        snapshot = copy.deepcopy(self.tables)
        try:
            return FakeResponse(handler(**call.params))
        except Exception:
            self.tables = snapshot
            raise

    def _rpc_award_reputation_points(
        self,
        p_user_id: str,
        p_points: int,
        p_reason: str,
        p_related_submission_id: str | None = None,
        p_related_challenge_id: str | None = None,
    ) -> list[dict[str, Any]]:
        entry = self._insert(
            "reputation_history",
            [
                {
                    "user_id": p_user_id,
                    "points": p_points,
                    "reason": p_reason,
                    "related_submission_id": p_related_submission_id,
                    "related_challenge_id": p_related_challenge_id,
                }
            ],
        )[0]
        total = sum(
            int(row["points"])
            for row in self.tables["reputation_history"]
            if _same(row["user_id"], p_user_id)
        )
        for profile in self.tables["profiles"]:
            if _same(profile["id"], p_user_id):
                profile["reputation_points"] = total
        return [{"history_id": entry["id"], "reputation_points": total}]

    def _rpc_create_community_with_leader(
        self,
        p_leader_id: str,
        p_name: str,
        p_description: str,
        p_image_url: str | None = None,
    ) -> list[dict[str, Any]]:
        community = self._insert(
            "communities",
            [
                {
                    "name": p_name,
                    "description": p_description,
                    "image_url": p_image_url,
                    "leader_id": p_leader_id,
                    "member_count": 0,
                    "is_active": True,
                }
            ],
        )[0]
        self._insert(
            "community_memberships",
            [{"user_id": p_leader_id, "community_id": community["id"]}],
        )
        for row in self.tables["communities"]:
            if row["id"] == community["id"]:
                row["member_count"] = 1
                return [dict(row)]
        return []


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fake_db() -> FakeSupabaseClient:
    """Fresh in-memory Supabase stand-in seeded with two profiles."""
    db = FakeSupabaseClient()
    db.seed("profiles", id="leader", username="leader", full_name="Lee Leader", reputation_points=0)
    db.seed("profiles", id="alice", username="alice", full_name="Alice", reputation_points=0)
    db.seed("profiles", id="bob", username="bob", full_name="Bob", reputation_points=0)
    return db


@pytest.fixture
def community(fake_db: FakeSupabaseClient) -> dict[str, Any]:
    """Community with member_count 0 and no membership rows."""
    return fake_db.seed(
        "communities",
        name="Speedrunners",
        description="Fast runs only, all games welcome",
        leader_id="leader",
        member_count=0,
        is_active=True,
    )


@pytest.fixture
def make_challenge(fake_db: FakeSupabaseClient, community: dict[str, Any]):
    """Factory seeding a challenge relative to ``NOW``."""

    def _make(start_offset: timedelta, end_offset: timedelta, **extra: Any) -> dict[str, Any]:
        return fake_db.seed(
            "challenges",
            community_id=community["id"],
            title="Any% glitchless",
            description="Fastest glitchless run wins the week",
            start_date=(NOW + start_offset).isoformat(),
            end_date=(NOW + end_offset).isoformat(),
            status=extra.pop("status", "active"),
            created_by="leader",
            **extra,
        )

    return _make


@pytest.fixture
def active_challenge(make_challenge) -> dict[str, Any]:
    return make_challenge(timedelta(days=-1), timedelta(days=6))


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a FastAPI test client."""
    from circle.main import app

    return TestClient(app)


@pytest.fixture
def api(client: TestClient, fake_db: FakeSupabaseClient):
    """Test client wired to ``fake_db`` and authenticated as ``alice``."""
    from circle.dependencies import get_current_user, get_db_client, get_optional_user
    from circle.main import app

    alice = SimpleNamespace(id="alice", email="alice@example.com")
    app.dependency_overrides[get_db_client] = lambda: fake_db
    app.dependency_overrides[get_current_user] = lambda: alice
    app.dependency_overrides[get_optional_user] = lambda: alice
    yield client
    app.dependency_overrides.clear()
