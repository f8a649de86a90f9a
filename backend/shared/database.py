"""
Hosted backend client factory for Supabase.

Used instead of the emulator when real credentials are configured.
"""

from typing import Optional
from supabase import create_client, Client

from .config import Settings, get_settings

# Module-level client cache
_hosted_client: Optional[Client] = None


def get_supabase_client(settings: Optional[Settings] = None) -> Client:
    """
    Get the hosted Supabase client (anon key).

    Returns:
        Supabase client configured with SUPABASE_URL and SUPABASE_ANON_KEY

    Raises:
        RuntimeError: If the credentials are not configured
    """
    global _hosted_client

    if _hosted_client is None:
        settings = settings or get_settings()
        if not settings.has_real_backend:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
            )
        _hosted_client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _hosted_client


def reset_client_cache() -> None:
    """
    Reset the cached hosted client.

    Useful for testing or when configuration changes.
    """
    global _hosted_client
    _hosted_client = None
