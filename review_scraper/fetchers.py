"""
Page content fetchers.

Each fetch is a single attempt; retrying is the pagination controller's job.
Failures come out as PageNotFoundError (don't bother retrying) or
TransientFetchError (do).
"""

import logging
from typing import Optional

from curl_cffi.requests import AsyncSession, RequestsError
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .config import ScraperSettings
from .errors import FetchTimeoutError, PageNotFoundError, TransientFetchError

logger = logging.getLogger(__name__)

# curl_cffi's impersonate="chrome" supplies the User-Agent matching its TLS
# fingerprint, so only the navigation headers are set here.
EXTRA_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
}

CLICK_IF_ENABLED = """(selector) => {
    const el = document.querySelector(selector);
    if (el && !el.hasAttribute("disabled")) {
        el.click();
        return true;
    }
    return false;
}"""


class StaticFetcher:
    """Plain HTTP GET with Chrome TLS impersonation."""

    def __init__(self, settings: ScraperSettings, not_found_markers: tuple[str, ...] = ()):
        self.settings = settings
        self.not_found_markers = not_found_markers
        self._client: Optional[AsyncSession] = None

    async def __aenter__(self) -> "StaticFetcher":
        self._client = AsyncSession(
            impersonate="chrome",
            headers=EXTRA_HEADERS,
            timeout=self.settings.request_timeout,
            allow_redirects=True,
        )
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.close()

    @property
    def client(self) -> AsyncSession:
        if self._client is None:
            raise RuntimeError("Fetcher used outside of 'async with'")
        return self._client

    async def _get(self, url: str, **kwargs):
        try:
            return await self.client.get(url, **kwargs)
        except RequestsError as e:
            raise TransientFetchError(f"Network error on {url}: {e}") from e

    def check_response(self, url: str, status_code: int, body: str) -> str:
        if status_code == 404:
            raise PageNotFoundError(url)
        if status_code != 200:
            raise TransientFetchError(f"HTTP {status_code} on {url}")
        for marker in self.not_found_markers:
            if marker in body:
                raise PageNotFoundError(url)
        return body

    async def get_html(self, url: str) -> str:
        logger.debug(f"GET {url}")
        resp = await self._get(url)
        return self.check_response(url, resp.status_code, resp.text)


class CrawlbaseFetcher(StaticFetcher):
    """Routes every request through the Crawlbase crawling API."""

    async def get_html(self, url: str) -> str:
        resp = await self._get(
            self.settings.crawlbase_url,
            params={"token": self.settings.crawlbase_token, "url": url},
        )
        # Crawlbase reports the target site's own status separately from its own.
        original_status = resp.headers.get("original_status")
        status = int(original_status) if original_status and original_status.isdigit() else resp.status_code
        return self.check_response(url, status, resp.text)


class RenderedPage:
    """Handle on a live browser tab."""

    def __init__(self, page):
        self.page = page

    async def html(self) -> str:
        try:
            return await self.page.content()
        except PlaywrightError as e:
            raise TransientFetchError(f"Could not read page content: {e}") from e

    async def click(self, selector: str) -> bool:
        """Click selector if it is present and not disabled."""
        try:
            return await self.page.evaluate(CLICK_IF_ENABLED, selector)
        except PlaywrightError as e:
            raise TransientFetchError(f"Could not click {selector}: {e}") from e


class BrowserSession:
    """One persistent Chromium context, closed on every way out of 'async with'."""

    def __init__(self, settings: ScraperSettings):
        self.settings = settings
        self._playwright = None
        self._context = None
        self._page = None

    async def __aenter__(self) -> "BrowserSession":
        self._playwright = await async_playwright().start()
        try:
            self._context = await self._playwright.chromium.launch_persistent_context(
                self.settings.user_data_dir,
                headless=self.settings.headless,
                args=["--no-sandbox", "--disable-setuid-sandbox"],
                viewport={"width": 1280, "height": 900},
                user_agent=self.settings.user_agent,
            )
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        try:
            if self._context is not None:
                await self._context.close()
        finally:
            self._context = None
            self._page = None
            if self._playwright is not None:
                playwright, self._playwright = self._playwright, None
                await playwright.stop()

    async def open(self, url: str, ready_selector: str) -> RenderedPage:
        """Navigate to url and wait until ready_selector is on the page."""
        if self._context is None:
            raise RuntimeError("Browser session used outside of 'async with'")
        if self._page is None:
            self._page = await self._context.new_page()
        page = self._page
        try:
            await page.goto(url, wait_until="networkidle", timeout=self.settings.navigation_timeout_ms)
            await page.wait_for_selector(ready_selector, timeout=self.settings.selector_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise FetchTimeoutError(f"Timed out waiting for {ready_selector} on {url}") from e
        except PlaywrightError as e:
            raise TransientFetchError(f"Browser error on {url}: {e}") from e
        return RenderedPage(page)
