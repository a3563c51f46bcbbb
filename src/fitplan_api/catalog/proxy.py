"""
Client for the remote exercise-database proxy functions.

Two functions are deployed next to the backend:
- search-exercises:      {searchTerm, bodyPart, equipment} -> {exercises} | {error}
- get-exercise-filters:  {type: "bodyPart" | "equipment"} -> {data} | {error}

Remote items use camelCase field names; they are normalized into Exercise.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from fitplan_api.config import settings
from fitplan_api.errors import RateLimited, RemoteUnavailable
from fitplan_api.models import Exercise
from fitplan_api.retry import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_WAIT_SECONDS,
    DEFAULT_MIN_WAIT_SECONDS,
    retry_async_call,
)

logger = logging.getLogger(__name__)

SEARCH_FUNCTION = "search-exercises"
FILTERS_FUNCTION = "get-exercise-filters"


def _is_rate_limit_message(message: str) -> bool:
    text = message.lower()
    return "rate limit" in text or "429" in text or "too many requests" in text


class ExerciseProxyClient:
    """Calls the proxy functions over HTTP and translates failures."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
        max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.functions_url
        self.api_key = api_key or settings.SUPABASE_KEY
        self.timeout = timeout or settings.REMOTE_TIMEOUT_SECONDS
        self.max_attempts = max_attempts
        self.min_wait_seconds = min_wait_seconds
        self.max_wait_seconds = max_wait_seconds
        self._transport = transport

    async def search(
        self,
        term: Optional[str] = None,
        body_part: Optional[str] = None,
        equipment: Optional[str] = None,
    ) -> List[Exercise]:
        body = await self._invoke(SEARCH_FUNCTION, {
            "searchTerm": term or "",
            "bodyPart": body_part,
            "equipment": equipment,
        })
        items = body.get("exercises") or []
        logger.info(f"Remote catalog returned {len(items)} exercises for '{term or ''}'")
        return [Exercise.from_record(item) for item in items]

    async def filter_options(self, kind: str) -> List[str]:
        body = await self._invoke(FILTERS_FUNCTION, {"type": kind})
        values = body.get("data") or body.get("filters") or []
        return sorted({str(value) for value in values if value})

    async def _invoke(self, function_name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.base_url:
            raise RemoteUnavailable("Exercise catalog proxy is not configured")
        return await retry_async_call(
            self._post,
            function_name,
            payload,
            max_attempts=self.max_attempts,
            min_wait_seconds=self.min_wait_seconds,
            max_wait_seconds=self.max_wait_seconds,
        )

    async def _post(self, function_name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url.rstrip('/')}/{function_name}"
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["apikey"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning(f"Timed out calling {function_name}: {e}")
            raise RemoteUnavailable("Exercise catalog timed out") from e
        except httpx.HTTPError as e:
            logger.warning(f"Failed to call {function_name}: {e}")
            raise RemoteUnavailable(f"Exercise catalog unreachable: {e}") from e

        if response.status_code == 429:
            raise RateLimited()

        try:
            body = response.json()
        except ValueError:
            body = {}

        error = body.get("error") if isinstance(body, dict) else None
        if response.status_code >= 400 or error:
            message = str(error or f"API returned {response.status_code}")
            if _is_rate_limit_message(message):
                raise RateLimited()
            logger.error(f"{function_name} failed ({response.status_code}): {message}")
            raise RemoteUnavailable(message, status_code=response.status_code)

        if not isinstance(body, dict):
            raise RemoteUnavailable(
                f"Unexpected response from {function_name}",
                status_code=response.status_code,
            )
        return body
