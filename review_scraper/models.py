from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Source(str, Enum):
    G2 = "g2"
    CAPTERRA = "capterra"
    TRUSTPILOT = "trustpilot"


class StopReason(str, Enum):
    END_OF_LISTING = "end_of_listing"      # page came back with no review nodes
    DATE_BOUNDARY = "date_boundary"        # saw a review older than the window
    WINDOW_CONSUMED = "window_consumed"    # found reviews before, none on this page
    LOAD_MORE_EXHAUSTED = "load_more_exhausted"
    MAX_PAGES = "max_pages"
    NOT_FOUND = "not_found"
    RETRIES_EXHAUSTED = "retries_exhausted"
    COMPANY_NOT_FOUND = "company_not_found"
    UNEXPECTED_ERROR = "unexpected_error"


class Review(BaseModel):
    """A single review, whatever platform it came from."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: str = ""
    description: str = ""
    date: datetime                      # UTC instant, serialized as ISO-8601
    reviewer: Optional[str] = None
    reviewer_title: Optional[str] = Field(default=None, alias="reviewerTitle")
    company_size: Optional[str] = Field(default=None, alias="companySize")
    rating: Optional[float] = None
    review_url: Optional[str] = Field(default=None, alias="reviewUrl")

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ReviewCandidate(BaseModel):
    """One review node pulled off a page, before its date is checked."""
    raw_date: str
    fields: dict = Field(default_factory=dict)


class DateWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


class ScrapeRequest(BaseModel):
    company: str
    start_date: str
    end_date: str
    source: str


class ScrapeResponse(BaseModel):
    source: Source
    company: str
    reviews: list[dict]
    total_count: int
    stop_reason: Optional[StopReason] = None
    error: Optional[str] = None
