from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from curl_cffi.requests import RequestsError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from review_scraper.errors import FetchTimeoutError, PageNotFoundError, TransientFetchError
from review_scraper.fetchers import BrowserSession, CrawlbaseFetcher, StaticFetcher


def response(status_code=200, text="<html></html>", headers=None):
    return SimpleNamespace(status_code=status_code, text=text, headers=headers or {})


def with_client(fetcher, *responses):
    client = MagicMock()
    client.get = AsyncMock(side_effect=list(responses))
    client.close = AsyncMock()
    fetcher._client = client
    return client


class TestStaticFetcher:

    async def test_returns_body(self, settings):
        fetcher = StaticFetcher(settings)
        with_client(fetcher, response(text="<p>ok</p>"))
        assert await fetcher.get_html("https://example.com") == "<p>ok</p>"

    async def test_404_is_not_found(self, settings):
        fetcher = StaticFetcher(settings)
        with_client(fetcher, response(status_code=404))
        with pytest.raises(PageNotFoundError):
            await fetcher.get_html("https://example.com/missing")

    @pytest.mark.parametrize("status", [403, 429, 500, 503])
    def test_other_errors_are_transient(self, settings, status):
        with pytest.raises(TransientFetchError):
            StaticFetcher(settings).check_response("https://example.com", status, "")

    def test_not_found_marker_in_body(self, settings):
        fetcher = StaticFetcher(settings, not_found_markers=("Page not found",))
        with pytest.raises(PageNotFoundError):
            fetcher.check_response("https://example.com", 200, "<h1>Page not found</h1>")

    async def test_network_error_is_transient(self, settings):
        fetcher = StaticFetcher(settings)
        with_client(fetcher, RequestsError("connection reset"))
        with pytest.raises(TransientFetchError):
            await fetcher.get_html("https://example.com")

    async def test_close_releases_session(self, settings):
        fetcher = StaticFetcher(settings)
        client = with_client(fetcher)
        await fetcher.close()
        client.close.assert_awaited_once()
        with pytest.raises(RuntimeError):
            fetcher.client


class TestCrawlbaseFetcher:

    async def test_goes_through_proxy_with_token(self, settings):
        fetcher = CrawlbaseFetcher(settings)
        client = with_client(fetcher, response(text="<html>reviews</html>", headers={"original_status": "200"}))

        assert await fetcher.get_html("https://www.g2.com/products/acme/reviews?page=2") == "<html>reviews</html>"
        client.get.assert_awaited_once_with(
            "https://api.crawlbase.com/",
            params={"token": "test-token", "url": "https://www.g2.com/products/acme/reviews?page=2"},
        )

    async def test_target_404_is_not_found(self, settings):
        fetcher = CrawlbaseFetcher(settings)
        with_client(fetcher, response(status_code=200, headers={"original_status": "404"}))
        with pytest.raises(PageNotFoundError):
            await fetcher.get_html("https://www.g2.com/products/nope/reviews?page=1")

    async def test_missing_token_fails_at_request_time(self, settings):
        fetcher = CrawlbaseFetcher(settings.model_copy(update={"crawlbase_token": ""}))
        with_client(fetcher, response(status_code=401, text="invalid token"))
        with pytest.raises(TransientFetchError):
            await fetcher.get_html("https://www.g2.com/products/acme/reviews?page=1")


class TestBrowserSession:

    def session_with_page(self, settings, page):
        session = BrowserSession(settings)
        session._context = MagicMock()
        session._context.new_page = AsyncMock(return_value=page)
        session._context.close = AsyncMock()
        return session

    async def test_selector_timeout(self, settings):
        page = AsyncMock()
        page.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 10000ms exceeded")
        session = self.session_with_page(settings, page)

        with pytest.raises(FetchTimeoutError):
            await session.open("https://www.capterra.com/p/1/Acme/reviews", "#ready")
        page.wait_for_selector.assert_awaited_once_with("#ready", timeout=settings.selector_timeout_ms)

    async def test_open_reuses_tab(self, settings):
        page = AsyncMock()
        session = self.session_with_page(settings, page)

        first = await session.open("https://a", "#x")
        second = await session.open("https://b", "#x")
        assert first.page is second.page is page
        session._context.new_page.assert_awaited_once()

    async def test_close_stops_everything(self, settings):
        session = self.session_with_page(settings, AsyncMock())
        context = session._context
        playwright = AsyncMock()
        session._playwright = playwright

        await session.close()
        context.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        with pytest.raises(RuntimeError):
            await session.open("https://a", "#x")
