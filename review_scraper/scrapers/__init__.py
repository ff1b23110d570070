from ..config import ScraperSettings
from ..models import Source
from .base import ReviewScraper, ScrapeOutcome
from .capterra_scraper import CapterraScraper
from .g2_scraper import G2Scraper
from .trustpilot_scraper import TrustpilotScraper

SCRAPERS: dict[Source, type[ReviewScraper]] = {
    Source.G2: G2Scraper,
    Source.CAPTERRA: CapterraScraper,
    Source.TRUSTPILOT: TrustpilotScraper,
}


def build_scraper(source, settings: ScraperSettings) -> ReviewScraper:
    return SCRAPERS[Source(str(getattr(source, "value", source)).lower())](settings)


__all__ = [
    "SCRAPERS",
    "build_scraper",
    "ReviewScraper",
    "ScrapeOutcome",
    "G2Scraper",
    "CapterraScraper",
    "TrustpilotScraper",
]
