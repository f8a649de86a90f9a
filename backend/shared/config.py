"""
Centralized configuration for the BaaS emulator.

All settings are loaded from environment variables with sensible defaults.
Emulator tuning knobs are namespaced with EMULATOR_*, real provider
credentials with SUPABASE_*.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "BaaS Emulator"
    debug: bool = False

    # Persistence (empty directory means an in-memory store)
    emulator_storage_dir: str = ""

    # Simulated network behaviour
    emulator_latency_scale: float = 1.0
    emulator_subscribe_delay: float = 0.1  # seconds
    emulator_oauth_delay: float = 1.5  # seconds

    # Sessions
    emulator_session_ttl: int = 3600  # seconds
    emulator_refresh_threshold: int = 300  # seconds
    emulator_auto_refresh_interval: float = 30.0  # seconds

    # Storage
    emulator_default_buckets: list[str] = ["avatars", "uploads", "public"]
    emulator_storage_url: str = "https://mock-storage.supabase.co"
    emulator_oauth_url: str = "https://mock-oauth.supabase.co/authorize"

    # Supabase (real provider)
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_jwt_secret: str = "emulator-jwt-secret"

    # Feature Flags
    force_emulator: bool = False

    @property
    def has_real_backend(self) -> bool:
        """Whether credentials for a hosted backend are configured."""
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
