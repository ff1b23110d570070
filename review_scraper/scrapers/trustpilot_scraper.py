import logging
from typing import Optional

from bs4 import BeautifulSoup

from ..fetchers import StaticFetcher
from ..models import DateWindow, ReviewCandidate, Source
from ..pagination import paginate
from ..resolver import resolve_trustpilot
from .base import ReviewScraper, ScrapeOutcome

logger = logging.getLogger(__name__)

CARD_WRAPPER_SELECTOR = '[data-reviews-list-start="true"] > .styles_cardWrapper__g8amG.styles_show__Z8n7u'


def _text(el) -> str:
    return el.get_text(strip=True) if el else ""


def _rating(node) -> Optional[float]:
    header = node.select_one("[data-service-review-rating]")
    raw = header.get("data-service-review-rating") if header else None
    try:
        return float(raw) if raw else None
    except ValueError:
        return None


def extract_trustpilot_reviews(html: str) -> list[ReviewCandidate]:
    soup = BeautifulSoup(html, "html.parser")
    nodes = [
        child
        for wrapper in soup.select(CARD_WRAPPER_SELECTOR)
        for child in wrapper.find_all(recursive=False)
    ]
    candidates = []
    for node in nodes:
        time_el = node.find("time")
        candidates.append(ReviewCandidate(
            raw_date=(time_el.get("datetime") or "") if time_el else "",
            fields={
                "title": _text(node.select_one('[data-service-review-title-typography="true"]')),
                "description": _text(node.select_one('[data-service-review-text-typography="true"]')),
                "reviewer": _text(node.select_one('[data-consumer-name-typography="true"]')),
                "rating": _rating(node),
            },
        ))
    return candidates


class TrustpilotScraper(ReviewScraper):
    source = Source.TRUSTPILOT
    label = "Trustpilot"

    def make_fetcher(self) -> StaticFetcher:
        return StaticFetcher(self.settings)

    async def scrape(self, company: str, window: DateWindow) -> ScrapeOutcome:
        async with self.make_fetcher() as fetcher:
            company_url = await resolve_trustpilot(fetcher, company)
            if not company_url:
                return self.not_found(company)
            logger.info(f"{self.tag}Scraping {company_url} for {window}")

            async def fetch_page(page_number: int) -> list[ReviewCandidate]:
                html = await fetcher.get_html(f"{company_url}?page={page_number}")
                return extract_trustpilot_reviews(html)

            result = await paginate(
                fetch_page,
                window,
                page_delay=self.settings.page_delay_seconds,
                retry_policy=self.retry_policy,
                max_pages=self.settings.max_pages,
                sleep=self.sleep,
                label=self.tag,
            )

        return self.finish(company, company_url, window, result)
