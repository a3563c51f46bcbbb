"""Shared plumbing for Supabase table gateways."""
import logging
from typing import Any, Dict, List

from fitplan_api.db import get_supabase_client
from fitplan_api.errors import PersistenceFailure, RemoteUnavailable

logger = logging.getLogger(__name__)


class SupabaseRepository:
    """
    Base class for table gateways.

    Backend exceptions are translated at this boundary: failed reads surface as
    RemoteUnavailable, failed writes as PersistenceFailure.
    """

    TABLE_NAME = ""

    def __init__(self, client=None):
        self._supabase = client

    @property
    def supabase(self):
        client = self._supabase or get_supabase_client()
        if client is None:
            raise RemoteUnavailable("Backend is not configured")
        return client

    def table(self):
        return self.supabase.table(self.TABLE_NAME)

    def _read(self, query, action: str) -> List[Dict[str, Any]]:
        try:
            result = query.execute()
        except Exception as e:
            logger.error(f"Failed to {action} ({self.TABLE_NAME}): {e}")
            raise RemoteUnavailable(f"Could not {action}") from e
        if result is None or not result.data:
            return []
        return list(result.data)

    def _write(self, query, action: str) -> List[Dict[str, Any]]:
        try:
            result = query.execute()
        except Exception as e:
            logger.error(f"Failed to {action} ({self.TABLE_NAME}): {e}")
            raise PersistenceFailure(f"Could not {action}: {e}") from e
        if result is None or not result.data:
            return []
        return list(result.data)
