"""
Supabase client factory.

The identity directory and document store adapters share one
service-role client. Both act on behalf of the platform, so the client
bypasses row level security.
"""

from typing import Optional

from supabase import create_client, Client

from .config import Settings, get_settings

_service_client: Optional[Client] = None


def get_supabase_client(settings: Optional[Settings] = None) -> Client:
    """
    Get the shared service-role Supabase client.

    The service role is required by the auth admin API (creating
    principals, writing app_metadata claims) and for writing profile,
    invitation, and relationship rows on behalf of callers.

    Args:
        settings: Settings to build the client from on first use;
            defaults to the environment settings

    Raises:
        RuntimeError: If the Supabase URL or service role key is unset
    """
    global _service_client

    if _service_client is None:
        settings = settings or get_settings()
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY, or STORAGE_BACKEND=memory."
            )
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def reset_client_cache() -> None:
    """Drop the cached client so the next call rebuilds it."""
    global _service_client
    _service_client = None
