"""Circle settings, read from the environment or a `.env` file."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Runtime configuration for the Circle API and its background jobs."""

    # Supabase connection and pooling
    supabase_url: str
    supabase_anon_key: str
    supabase_service_key: str
    supabase_http_max_connections: int = 100
    supabase_http_max_keepalive_connections: int = 50
    supabase_postgrest_timeout_seconds: int = 30

    # Service
    app_name: str = "Circle API"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000"

    # Background status reconciliation
    enable_scheduler: bool = True
    timezone: str = "UTC"
    challenge_status_sync_minutes: int = 5

    # Challenge rules
    challenge_min_title_length: int = 5
    challenge_min_description_length: int = 20
    challenge_min_duration_days: int = 1
    challenge_max_duration_days: int = 30

    # Listings
    default_page_size: int = 50
    max_page_size: int = 200

    # Auth token cache and slow-path logging (0 disables the log)
    auth_token_cache_ttl_seconds: int = 15
    auth_token_cache_max_entries: int = 1024
    slow_request_log_threshold_ms: int = 0
    slow_query_log_threshold_ms: int = 0

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def origins_list(self) -> list[str]:
        """CORS origins from the comma-separated ALLOWED_ORIGINS value."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()  # type: ignore[call-arg]
