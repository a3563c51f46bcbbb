"""Supabase client access."""
import logging
from typing import Optional

from supabase import create_client

from fitplan_api.config import settings

logger = logging.getLogger(__name__)

_client = None


def get_supabase_client():
    """Get the shared Supabase client instance, or None when it cannot be created."""
    global _client
    if _client is not None:
        return _client

    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        logger.warning("Supabase credentials not configured. Persistence will be disabled.")
        return None

    try:
        _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        return _client
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None


def reset_client(client: Optional[object] = None) -> None:
    """Replace the cached client (used by tests and app startup)."""
    global _client
    _client = client
