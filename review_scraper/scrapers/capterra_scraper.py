import logging
from typing import Optional

from bs4 import BeautifulSoup

from ..errors import MalformedPageError, PageNotFoundError, RetriesExhaustedError
from ..fetchers import BrowserSession, RenderedPage
from ..models import DateWindow, ReviewCandidate, Source, StopReason
from ..pagination import PaginationResult, drive_load_more, fetch_with_retries
from ..resolver import resolve_capterra
from .base import ReviewScraper, ScrapeOutcome

logger = logging.getLogger(__name__)

REVIEW_CARD_SELECTOR = ".e1xzmg0z.c1ofrhif"
SORT_BY_SELECTOR = '[data-testid="filters-sort-by"]'
MOST_RECENT_SELECTOR = '[data-testid="filter-sort-MOST_RECENT"]'
SHOW_MORE_SELECTOR = 'button[data-testid="show-more-reviews"]'


def _text(el) -> str:
    return el.get_text(strip=True) if el else ""


def _rating(card) -> Optional[float]:
    raw = _text(card.select_one('[data-testid="rating"] span.e1xzmg0z.sr2r3oj'))
    try:
        return float(raw) if raw else None
    except ValueError:
        return None


def extract_capterra_reviews(html: str) -> list[ReviewCandidate]:
    """Every review card currently rendered on a Capterra reviews page.

    Summary cards at the bottom of the list share the card class but carry
    no date; they come back with an empty raw_date and get dropped later.
    """
    soup = BeautifulSoup(html, "html.parser")
    candidates = []
    for card in soup.select(REVIEW_CARD_SELECTOR):
        body = card.select_one("div.space-y-6")
        candidates.append(ReviewCandidate(
            raw_date=_text(card.select_one("div.typo-0.text-neutral-90")),
            fields={
                "title": _text(card.select_one("h3.typo-20.font-semibold")),
                "description": _text(body.select_one("p")) if body else "",
                "reviewer": _text(card.select_one("span.typo-20.text-neutral-99.font-semibold")),
                "rating": _rating(card),
            },
        ))
    return candidates


class CapterraListing:
    """The live reviews page, grown with the "show more reviews" button."""

    def __init__(self, page: RenderedPage):
        self.page = page

    async def loaded_candidates(self) -> list[ReviewCandidate]:
        return extract_capterra_reviews(await self.page.html())

    async def load_more(self) -> bool:
        return await self.page.click(SHOW_MORE_SELECTOR)


class CapterraScraper(ReviewScraper):
    source = Source.CAPTERRA
    label = "Capterra"

    def make_session(self) -> BrowserSession:
        return BrowserSession(self.settings)

    async def _sort_most_recent(self, page: RenderedPage) -> None:
        if not await page.click(SORT_BY_SELECTOR) or not await page.click(MOST_RECENT_SELECTOR):
            raise MalformedPageError("Could not sort Capterra reviews by most recent")
        await self.sleep(self.settings.page_delay_seconds)

    async def scrape(self, company: str, window: DateWindow) -> ScrapeOutcome:
        async with self.make_session() as session:
            link = await resolve_capterra(session, company)
            if not link:
                return self.not_found(company)
            logger.info(f"{self.tag}Scraping {link} for {window}")

            async def load_listing(_view: int) -> PaginationResult:
                page = await session.open(link, SORT_BY_SELECTOR)
                await self._sort_most_recent(page)
                return await drive_load_more(
                    CapterraListing(page),
                    window,
                    increment_delay=self.settings.page_delay_seconds,
                    max_increments=self.settings.max_pages,
                    sleep=self.sleep,
                    label=self.tag,
                )

            try:
                result = await fetch_with_retries(
                    load_listing, 1, self.retry_policy, sleep=self.sleep, label=self.tag
                )
            except PageNotFoundError as e:
                logger.warning(f"{self.tag}Reviews page not found: {e}")
                result = PaginationResult(stop_reason=StopReason.NOT_FOUND, error=e)
            except RetriesExhaustedError as e:
                logger.error(f"{self.tag}Error scraping reviews after {e.attempts} attempts: {e.last_error}")
                result = PaginationResult(stop_reason=StopReason.RETRIES_EXHAUSTED, error=e)
            except Exception as e:
                logger.exception(f"{self.tag}Unexpected error while loading reviews")
                result = PaginationResult(stop_reason=StopReason.UNEXPECTED_ERROR, error=e)

        return self.finish(company, link, window, result)
