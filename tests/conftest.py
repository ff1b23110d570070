from datetime import date

import pytest

from review_scraper.config import ScraperSettings
from review_scraper.models import DateWindow

from .helpers import SleepRecorder


@pytest.fixture
def january_2024():
    return DateWindow(start=date(2024, 1, 1), end=date(2024, 1, 31))


@pytest.fixture
def no_sleep():
    return SleepRecorder()


@pytest.fixture
def settings(tmp_path):
    return ScraperSettings(
        crawlbase_token="test-token",
        page_delay_seconds=1.0,
        retry_delay_seconds=5.0,
        output_dir=tmp_path,
    )
