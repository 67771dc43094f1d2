"""Custom exceptions for website crawling."""


class CrawlServiceError(Exception):
    """Base exception for crawl failures."""

    pass


class CrawlNotConfiguredError(CrawlServiceError):
    """Raised when no Firecrawl API key is configured."""

    def __init__(self, message: str = "Firecrawl API key is not configured") -> None:
        super().__init__(message)


class CrawlProviderError(CrawlServiceError):
    """Raised when Firecrawl answers with an error status or no content."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
