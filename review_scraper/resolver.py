"""
Company resolution: free-text company name -> the listing URL to paginate.

G2 is a pure slug transform. Trustpilot and Capterra go through the
platform's own search page and take the first result card. Every failure
on the search path collapses to None ("company not found").
"""

import logging
import re
from typing import Optional
from urllib.parse import quote, quote_plus, urljoin

from bs4 import BeautifulSoup

from .errors import ScraperError

logger = logging.getLogger(__name__)

G2_BASE_URL = "https://www.g2.com"
TRUSTPILOT_BASE_URL = "https://www.trustpilot.com"
CAPTERRA_BASE_URL = "https://www.capterra.com"

TRUSTPILOT_CARD_LINK = '[data-business-unit-card-link="true"]'
CAPTERRA_CARD_HEADER = '[data-testid="shortlist-product-card-header"]'
CAPTERRA_CARD_ANCHOR = '[data-evt-name="engagement_product_click"]'


def slugify(company: str, separator: str = "-") -> str:
    return re.sub(r"\s+", separator, company.strip().lower())


def g2_entry_point(company: str) -> str:
    return f"{G2_BASE_URL}/products/{quote(slugify(company))}/reviews"


def trustpilot_search_url(company: str) -> str:
    return f"{TRUSTPILOT_BASE_URL}/search?query={quote_plus(company)}"


def capterra_search_url(company: str) -> str:
    return f"{CAPTERRA_BASE_URL}/search/?query={quote_plus(company)}"


def find_trustpilot_link(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    card = soup.select_one(TRUSTPILOT_CARD_LINK)
    href = card.get("href") if card else None
    if not href:
        return None
    return urljoin(TRUSTPILOT_BASE_URL, href)


def find_capterra_link(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    header = soup.select_one(CAPTERRA_CARD_HEADER)
    if header is None:
        return None
    anchor = header.select_one(CAPTERRA_CARD_ANCHOR)
    href = anchor.get("href") if anchor else None
    if not href:
        return None
    return ensure_reviews_path(urljoin(CAPTERRA_BASE_URL, href))


def ensure_reviews_path(url: str) -> str:
    """Point a product URL at its reviews tab rather than the profile root."""
    if url.endswith("/reviews"):
        return url
    return url.rstrip("/") + "/reviews"


async def resolve_trustpilot(fetcher, company: str) -> Optional[str]:
    url = trustpilot_search_url(company)
    try:
        html = await fetcher.get_html(url)
    except ScraperError as e:
        logger.warning(f"[Trustpilot] Search failed for '{company}': {e}")
        return None
    link = find_trustpilot_link(html)
    logger.debug(f"[Trustpilot] Search result link: {link}")
    return link


async def resolve_capterra(session, company: str) -> Optional[str]:
    url = capterra_search_url(company)
    try:
        page = await session.open(url, CAPTERRA_CARD_HEADER)
        html = await page.html()
    except ScraperError as e:
        logger.warning(f"[Capterra] Error fetching company link from search page: {e}")
        return None
    return find_capterra_link(html)
