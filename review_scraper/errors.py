"""Error taxonomy shared by fetchers, the pagination controller and the CLI."""

from typing import Optional


class ScraperError(Exception):
    pass


class InputValidationError(ScraperError):
    """Bad company, date or source. Raised before any network activity."""


class PageNotFoundError(ScraperError):
    """Platform answered 404 or rendered its "page not found" screen."""

    def __init__(self, url: str, message: str = "Page not found"):
        super().__init__(f"{message}: {url}")
        self.url = url


class TransientFetchError(ScraperError):
    """Network or parse hiccup. Worth retrying."""


class FetchTimeoutError(TransientFetchError):
    """The readiness selector never showed up."""


class MalformedPageError(TransientFetchError):
    """Page loaded but a control or element it must have is missing."""


class RetriesExhaustedError(ScraperError):
    def __init__(self, page: int, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(f"Gave up on page {page} after {attempts} attempts: {last_error}")
        self.page = page
        self.attempts = attempts
        self.last_error = last_error
