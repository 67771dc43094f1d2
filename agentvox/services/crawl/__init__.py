"""Website crawling (Firecrawl)."""

from agentvox.services.crawl.exceptions import (
    CrawlNotConfiguredError,
    CrawlProviderError,
    CrawlServiceError,
)
from agentvox.services.crawl.firecrawl import CrawlResult, FirecrawlClient

__all__ = [
    "FirecrawlClient",
    "CrawlResult",
    "CrawlServiceError",
    "CrawlNotConfiguredError",
    "CrawlProviderError",
]
