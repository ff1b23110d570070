import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ..config import ScraperSettings
from ..date_filter import filter_reviews
from ..models import DateWindow, Review, Source, StopReason
from ..pagination import PaginationResult, RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class ScrapeOutcome:
    source: Source
    company: str
    reviews: list[Review] = field(default_factory=list)
    entry_point: Optional[str] = None
    stop_reason: Optional[StopReason] = None
    error: Optional[BaseException] = None
    pages_fetched: int = 0

    @property
    def failed(self) -> bool:
        """True when the run ended on an error the caller should report."""
        return self.stop_reason in (StopReason.RETRIES_EXHAUSTED, StopReason.UNEXPECTED_ERROR)


class ReviewScraper(ABC):
    """One platform's way of turning (company, window) into reviews."""

    source: Source
    label: str = ""

    def __init__(self, settings: ScraperSettings, sleep=asyncio.sleep):
        self.settings = settings
        self.sleep = sleep

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.settings.max_attempts,
            delay=self.settings.retry_delay_seconds,
        )

    @property
    def tag(self) -> str:
        return f"[{self.label}] "

    @abstractmethod
    async def scrape(self, company: str, window: DateWindow) -> ScrapeOutcome:
        ...

    async def scrape_reviews(self, company: str, window: DateWindow) -> list[Review]:
        return (await self.scrape(company, window)).reviews

    def not_found(self, company: str) -> ScrapeOutcome:
        logger.warning(f"{self.tag}Company '{company}' not found.")
        return ScrapeOutcome(self.source, company, stop_reason=StopReason.COMPANY_NOT_FOUND)

    def finish(self, company: str, entry_point: str, window: DateWindow, result: PaginationResult) -> ScrapeOutcome:
        reviews = filter_reviews(result.reviews, window)
        if not reviews:
            logger.warning(f"{self.tag}No reviews found for {company} in {window}.")
        logger.info(
            f"{self.tag}Done after {result.pages_fetched} page(s): {len(reviews)} reviews "
            f"({result.stop_reason.value if result.stop_reason else 'unknown'})"
        )
        return ScrapeOutcome(
            source=self.source,
            company=company,
            reviews=reviews,
            entry_point=entry_point,
            stop_reason=result.stop_reason,
            error=result.error,
            pages_fetched=result.pages_fetched,
        )
