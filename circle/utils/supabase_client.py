"""Supabase client factories for Circle.

Two clients exist: the anon client only validates end-user access tokens;
the service client runs every data query issued by the services.
"""

from functools import lru_cache

import httpx
from supabase.lib.client_options import SyncClientOptions

from circle.config import settings
from supabase import Client, create_client


def _http_client(timeout_seconds: int) -> httpx.Client:
    max_connections = max(10, settings.supabase_http_max_connections)
    keepalive = min(max_connections, max(5, settings.supabase_http_max_keepalive_connections))
    return httpx.Client(
        timeout=httpx.Timeout(timeout_seconds),
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=keepalive,
        ),
    )


def _create(api_key: str) -> Client:
    timeout_seconds = max(1, settings.supabase_postgrest_timeout_seconds)
    options = SyncClientOptions(
        auto_refresh_token=False,
        persist_session=False,
        postgrest_client_timeout=timeout_seconds,
        storage_client_timeout=timeout_seconds,
        function_client_timeout=min(timeout_seconds, 30),
        httpx_client=_http_client(timeout_seconds),
    )
    return create_client(settings.supabase_url, api_key, options=options)


@lru_cache(maxsize=1)
def get_auth_client() -> Client:
    """Return the anon-key client used to resolve access tokens."""
    return _create(settings.supabase_anon_key)


@lru_cache(maxsize=1)
def get_service_client() -> Client:
    """Return the service-role client (bypasses RLS).

    Identity checks happen in the service layer, so every call site passes
    the acting user's id explicitly.
    """
    return _create(settings.supabase_service_key)
