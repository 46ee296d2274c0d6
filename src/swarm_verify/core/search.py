"""Keyless instant-answer web search used by the Web-Fact-Checker agent."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .settings import AppSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstantAnswer:
    """Abstract text and its source URL from the instant-answer API."""

    abstract_text: str
    abstract_url: str


class DuckDuckGoSearchClient:
    """Query DuckDuckGo's instant-answer API (no authentication needed)."""

    def __init__(
        self,
        base_url: str = "https://api.duckduckgo.com/",
        *,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: AppSettings) -> DuckDuckGoSearchClient | None:
        if not settings.web_search_enabled:
            return None
        return cls(settings.web_search_url, timeout=settings.default_timeout)

    async def instant_answer(self, query: str) -> InstantAnswer:
        """Run one query.

        Args:
            query: Free-text search query

        Returns:
            InstantAnswer with empty fields when the API has no abstract

        Raises:
            httpx.HTTPError: on transport failures or non-2xx responses
        """
        params = {"q": query, "format": "json", "no_html": "1"}

        if self._client is not None:
            response = await self._client.get(self._base_url, params=params)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(self._base_url, params=params)

        response.raise_for_status()
        # The endpoint answers with application/x-javascript
        data: dict[str, Any] = response.json()

        logger.debug(
            "Instant answer received",
            extra={"json_fields": {"query": query, "has_abstract": bool(data.get("AbstractText"))}},
        )
        return InstantAnswer(
            abstract_text=str(data.get("AbstractText") or ""),
            abstract_url=str(data.get("AbstractURL") or ""),
        )
