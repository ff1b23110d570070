"""
Scraper configuration.

Everything is read from the environment (a local .env file is loaded first)
exactly once and handed to fetchers and scrapers when they are built.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    return int(raw) if raw else None


class ScraperSettings(BaseModel):
    # Crawlbase token for the G2 proxy. Missing token only fails at request time.
    crawlbase_token: str = ""
    crawlbase_url: str = "https://api.crawlbase.com/"

    page_delay_seconds: float = 2.0
    retry_delay_seconds: float = 2.0
    max_attempts: int = 3
    max_pages: Optional[int] = None
    request_timeout: float = 25.0

    # Browser
    headless: bool = True
    user_data_dir: str = "./tmp-user-data"
    user_agent: Optional[str] = None
    selector_timeout_ms: int = 10_000
    navigation_timeout_ms: int = 60_000

    output_dir: Path = Path("output")

    @classmethod
    def from_env(cls) -> "ScraperSettings":
        return cls(
            crawlbase_token=os.getenv("CRAWLBASE_TOKEN", ""),
            page_delay_seconds=float(os.getenv("SCRAPER_PAGE_DELAY", "2.0")),
            retry_delay_seconds=float(os.getenv("SCRAPER_RETRY_DELAY", "2.0")),
            max_attempts=int(os.getenv("SCRAPER_MAX_ATTEMPTS", "3")),
            max_pages=_env_int("SCRAPER_MAX_PAGES"),
            request_timeout=float(os.getenv("SCRAPER_REQUEST_TIMEOUT", "25.0")),
            headless=_env_bool("SCRAPER_HEADLESS", True),
            user_data_dir=os.getenv("SCRAPER_USER_DATA_DIR", "./tmp-user-data"),
            user_agent=os.getenv("SCRAPER_USER_AGENT") or None,
            selector_timeout_ms=int(os.getenv("SCRAPER_SELECTOR_TIMEOUT_MS", "10000")),
            navigation_timeout_ms=int(os.getenv("SCRAPER_NAVIGATION_TIMEOUT_MS", "60000")),
            output_dir=Path(os.getenv("SCRAPER_OUTPUT_DIR", "output")),
        )

    def warnings(self) -> list[str]:
        issues = []
        if not self.crawlbase_token:
            issues.append("CRAWLBASE_TOKEN not set. G2 requests will fail.")
        return issues


@lru_cache(maxsize=1)
def get_settings() -> ScraperSettings:
    return ScraperSettings.from_env()
