"""
Configuration management for fantasy-sync.

Uses Pydantic settings for type-safe configuration with environment variable support.
All settings can be overridden via environment variables.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables,
    e.g. RATE_LIMIT_INTERVAL_MS=500 or STRICT_MODE=true.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    # ==========================================================================
    # Application Metadata
    # ==========================================================================
    app_name: str = "fantasy-sync"
    log_level: str = "INFO"
    user_agent: str = "FantasySync/1.0"

    # ==========================================================================
    # Season (updated annually)
    # ==========================================================================
    current_season: str = Field(
        default="2025",
        description="Season used in provider endpoint paths and as the normalization default",
    )

    # ==========================================================================
    # HTTP Behaviour
    # ==========================================================================
    rate_limit_interval_ms: int = Field(
        default=1000, ge=0, description="Minimum gap between dispatched requests per client"
    )
    request_timeout: float = Field(default=15.0, gt=0, description="Per-request deadline (seconds)")
    max_retries: int = Field(default=2, ge=1, le=10, description="Attempts for transient failures")

    # ==========================================================================
    # Caching Configuration (milliseconds)
    # ==========================================================================
    cache_ttl_leagues_ms: int = Field(default=5 * 60 * 1000, ge=0)
    cache_ttl_teams_ms: int = Field(default=2 * 60 * 1000, ge=0)
    cache_ttl_players_ms: int = Field(default=60 * 1000, ge=0)
    cache_ttl_stats_ms: int = Field(default=30 * 1000, ge=0)

    # ==========================================================================
    # Failure Policy
    # ==========================================================================
    strict_mode: bool = Field(
        default=False,
        description="Return [] instead of a placeholder league when league listing fails",
    )

    # ==========================================================================
    # Storage
    # ==========================================================================
    database_url: Optional[str] = Field(default=None, description="PostgreSQL connection string")
    database_pool_size: int = Field(default=5, ge=1, le=50)

    # ==========================================================================
    # OAuth Applications
    # ==========================================================================
    yahoo_client_id: Optional[str] = None
    yahoo_client_secret: Optional[str] = None
    cbs_client_id: Optional[str] = None
    cbs_client_secret: Optional[str] = None
    oauth_redirect_uri: Optional[str] = None

    @computed_field
    @property
    def oauth_clients(self) -> dict[str, tuple[Optional[str], Optional[str]]]:
        """Get (client_id, client_secret) pairs by provider name."""
        return {
            "yahoo": (self.yahoo_client_id, self.yahoo_client_secret),
            "cbs": (self.cbs_client_id, self.cbs_client_secret),
        }


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
