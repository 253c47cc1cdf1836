"""Shared Supabase data access helpers."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

import httpx
from postgrest import APIError

from circle.config import settings
from circle.utils.errors import NotFoundError, StorageError, UniqueViolationError
from supabase import Client

UNIQUE_VIOLATION_CODE = "23505"
logger = logging.getLogger(__name__)


def is_unique_violation(exc: APIError) -> bool:
    """Return True when a write failed on a unique constraint."""
    message = str(getattr(exc, "message", "") or "").lower()
    code = str(getattr(exc, "code", "") or "")
    return code == UNIQUE_VIOLATION_CODE or "duplicate key value" in message


class SupabaseService:
    """Thin helper wrapper around a Supabase client."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def run(self, query) -> Any:
        """Execute a query and return the raw response, mapping store failures."""
        started = time.perf_counter()
        try:
            response = query.execute()
        except APIError as exc:
            message = str(getattr(exc, "message", "") or "Database request failed")
            if is_unique_violation(exc):
                raise UniqueViolationError(message) from exc
            logger.error("Supabase request failed: %s", message)
            raise StorageError() from exc
        except httpx.HTTPError as exc:
            logger.error("Supabase transport error: %s", exc)
            raise StorageError() from exc

        elapsed_ms = (time.perf_counter() - started) * 1000
        threshold_ms = settings.slow_query_log_threshold_ms
        if threshold_ms > 0 and elapsed_ms >= threshold_ms:
            logger.warning("Slow Supabase query %.1fms", elapsed_ms)
        return response

    def execute(self, query, default: Any = None) -> Any:
        """Execute a Supabase query and return its data."""
        data = self.run(query).data
        return default if data is None and default is not None else data

    def select_one(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
        not_found_label: str | None = None,
    ) -> dict[str, Any]:
        """Select a single row and raise NotFoundError when missing."""
        query = self.client.table(table).select(columns)
        for key, value in filters.items():
            query = query.eq(key, value)
        rows = self.execute(query.limit(1), default=[])
        if not rows:
            label = not_found_label or table
            raise NotFoundError(label)
        return rows[0]

    def select_many(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select many rows from a table with optional filters and paging."""
        query = self.client.table(table).select(columns)
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return self.execute(query, default=[])

    def select_in(
        self,
        table: str,
        column: str,
        values: Iterable[Any],
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """Select rows whose ``column`` is one of ``values``."""
        keys = sorted({str(value) for value in values})
        if not keys:
            return []
        return self.execute(
            self.client.table(table).select(columns).in_(column, keys),
            default=[],
        )

    def exists(self, table: str, filters: dict[str, Any]) -> bool:
        """Return whether at least one row matches the equality filters."""
        return bool(self.select_many(table, filters=filters, columns="id", limit=1))

    def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        """Count rows in a table with optional equality filters."""
        query = self.client.table(table).select("*", count="exact", head=True)
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        return self.run(query).count or 0

    def insert_one(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return the created object."""
        rows = self.execute(self.client.table(table).insert(payload), default=[])
        if not rows:
            raise StorageError(f"Failed to insert into {table}")
        return rows[0]

    def insert_many(self, table: str, payloads: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert many rows and return inserted rows."""
        if not payloads:
            return []
        return self.execute(self.client.table(table).insert(payloads), default=[])

    def update(
        self,
        table: str,
        filters: dict[str, Any],
        payload: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Update rows by equality filters and return the updated rows."""
        query = self.client.table(table).update(payload)
        for key, value in filters.items():
            query = query.eq(key, value)
        return self.execute(query, default=[])

    def delete(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """Delete rows by equality filters and return removed rows."""
        query = self.client.table(table).delete()
        for key, value in filters.items():
            query = query.eq(key, value)
        return self.execute(query, default=[])

    def get_profiles_map(self, user_ids: Iterable[str]) -> dict[str, dict[str, Any]]:
        """Fetch public profile fields for many users, keyed by id."""
        rows = self.select_in(
            "profiles",
            "id",
            user_ids,
            columns="id,username,full_name,avatar_url",
        )
        return {str(row["id"]): row for row in rows}


def map_users_on_field(
    rows: list[dict[str, Any]],
    users: dict[str, dict[str, Any]],
    user_key: str = "user_id",
    out_key: str = "user",
) -> list[dict[str, Any]]:
    """Attach user records to rows based on ``user_key``."""
    enriched: list[dict[str, Any]] = []
    for row in rows:
        payload = dict(row)
        payload[out_key] = users.get(str(row[user_key]))
        enriched.append(payload)
    return enriched
