"""Firecrawl client for turning a website into knowledge base text."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from agentvox.config import Settings, get_settings
from agentvox.logging_config import get_logger
from agentvox.services.crawl.exceptions import (
    CrawlNotConfiguredError,
    CrawlProviderError,
    CrawlServiceError,
)

logger: Any = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CrawlResult:
    """Content extracted from a crawled site."""

    content: str
    page_count: int = 1
    stats: dict[str, Any] = field(default_factory=dict)


class FirecrawlClient:
    """Thin async client for the Firecrawl crawl endpoint."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    def build_payload(self, url: str, config: dict[str, Any] | None = None) -> dict[str, Any]:
        """Request body with configured defaults filled in."""
        config = config or {}
        return {
            "url": url,
            "depth": config.get("depth") or self._settings.crawl_default_depth,
            "maxPages": config.get("maxPages") or self._settings.crawl_default_max_pages,
            "selector": config.get("selector") or self._settings.crawl_default_selector,
            "filters": config.get("filters") or [],
        }

    async def crawl(self, url: str, config: dict[str, Any] | None = None) -> CrawlResult:
        """Crawl a site and return its extracted text.

        Raises:
            CrawlNotConfiguredError: No API key configured
            CrawlProviderError: Error status or empty content
            CrawlServiceError: Network failure or malformed body
        """
        api_key = self._settings.firecrawl_api_key
        if not api_key or not api_key.get_secret_value():
            raise CrawlNotConfiguredError()

        headers = {
            "Authorization": f"Bearer {api_key.get_secret_value()}",
            "Accept": "application/json",
        }
        payload = self.build_payload(url, config)
        logger.info(f"Calling Firecrawl for {url}")

        try:
            async with httpx.AsyncClient(
                timeout=self._settings.provider_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self._settings.firecrawl_url, json=payload, headers=headers
                )
        except httpx.HTTPError as e:
            logger.error(f"Firecrawl request failed: {e}")
            raise CrawlServiceError(f"Failed to reach Firecrawl: {e}") from e

        if response.is_error:
            logger.error(f"Firecrawl API error {response.status_code}: {response.text}")
            raise CrawlProviderError(
                f"Firecrawl API error: {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise CrawlServiceError("Invalid response from Firecrawl") from e

        content = data.get("content") if isinstance(data, dict) else None
        if not content:
            raise CrawlProviderError("No content returned from Firecrawl API")

        return CrawlResult(
            content=content,
            page_count=data.get("pageCount") or 1,
            stats=data.get("stats") or {},
        )
