import logging
from typing import Optional

from bs4 import BeautifulSoup

from ..fetchers import CrawlbaseFetcher
from ..models import DateWindow, ReviewCandidate, Source
from ..pagination import paginate
from ..resolver import g2_entry_point
from .base import ReviewScraper, ScrapeOutcome

logger = logging.getLogger(__name__)

ARTICLE_SELECTOR = ".nested-ajax-loading > div > article"
META_SELECTOR = ".elv-tracking-normal.elv-font-figtree.elv-text-xs"
G2_FOOTER = "Review collected by and hosted on G2.com."
NOT_FOUND_MARKERS = ("Page not found",)


def _text(el) -> str:
    return el.get_text(strip=True) if el else ""


def _float_or_none(raw: Optional[str]) -> Optional[float]:
    try:
        return float(raw) if raw else None
    except ValueError:
        return None


def extract_g2_reviews(html: str) -> list[ReviewCandidate]:
    """Pull every review <article> off a G2 listing page, newest first."""
    soup = BeautifulSoup(html, "html.parser")
    candidates = []
    for article in soup.select(ARTICLE_SELECTOR):
        date_meta = article.select_one('meta[itemprop="datePublished"]')
        rating_meta = article.select_one('meta[itemprop="ratingValue"]')
        meta = article.select(META_SELECTOR)
        link = article.select_one("[data-clipboard-text]")

        paragraphs = [
            p.get_text().replace(G2_FOOTER, "").strip()
            for p in article.select('[itemprop="reviewBody"] section p')
        ]

        candidates.append(ReviewCandidate(
            raw_date=(date_meta.get("content") or "") if date_meta else "",
            fields={
                "title": _text(article.select_one('[itemprop="name"] h5')),
                "description": " ".join(p for p in paragraphs if p),
                "reviewer": _text(article.select_one('[itemprop="author"] h5')),
                "reviewerTitle": _text(meta[0]) if len(meta) > 0 else "",
                "companySize": _text(meta[1]) if len(meta) > 1 else "",
                "rating": _float_or_none(rating_meta.get("content") if rating_meta else None),
                "reviewUrl": (link.get("data-clipboard-text") or "") if link else "",
            },
        ))
    return candidates


class G2Scraper(ReviewScraper):
    """G2 listing pages, fetched through the Crawlbase proxy."""

    source = Source.G2
    label = "G2"

    def make_fetcher(self) -> CrawlbaseFetcher:
        return CrawlbaseFetcher(self.settings, not_found_markers=NOT_FOUND_MARKERS)

    async def scrape(self, company: str, window: DateWindow) -> ScrapeOutcome:
        base_url = g2_entry_point(company)
        logger.info(f"{self.tag}Scraping {base_url} for {window}")

        async with self.make_fetcher() as fetcher:
            async def fetch_page(page_number: int) -> list[ReviewCandidate]:
                html = await fetcher.get_html(f"{base_url}?page={page_number}")
                return extract_g2_reviews(html)

            result = await paginate(
                fetch_page,
                window,
                page_delay=self.settings.page_delay_seconds,
                retry_policy=self.retry_policy,
                max_pages=self.settings.max_pages,
                sleep=self.sleep,
                label=self.tag,
            )

        return self.finish(company, base_url, window, result)
