"""
Pagination control loop.

Platforms list reviews newest-first. The controller walks pages in order,
accepts reviews that land inside the date window and stops as soon as one
of these happens:

* a page has no review nodes at all (end of listing)
* a review older than the window start shows up (nothing after it can match)
* a page has nodes but none in range, after earlier pages already matched
* the platform says the page does not exist
* the retry budget for a page runs out
* fetching or reading a page fails in some unexpected way

Nothing here raises for the last three; they come back on the result so the
caller still gets whatever was collected.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Protocol, TypeVar

from .date_filter import filter_reviews, is_after_window, is_before_window, parse_review_date
from .errors import PageNotFoundError, RetriesExhaustedError, TransientFetchError
from .models import DateWindow, Review, ReviewCandidate, StopReason

logger = logging.getLogger(__name__)

T = TypeVar("T")
FetchPage = Callable[[int], Awaitable[list[ReviewCandidate]]]
Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    delay: float = 2.0


@dataclass
class PaginationCursor:
    page_number: int = 1
    keep_fetching: bool = True
    found_any: bool = False


@dataclass
class PaginationResult:
    reviews: list[Review] = field(default_factory=list)
    pages_fetched: int = 0
    stop_reason: Optional[StopReason] = None
    error: Optional[BaseException] = None


@dataclass
class PageScan:
    accepted: list[Review] = field(default_factory=list)
    node_count: int = 0
    has_valid: bool = False
    crossed_start: bool = False


def build_review(candidate: ReviewCandidate, parsed_date) -> Review:
    return Review(date=parsed_date, **candidate.fields)


def scan_page(candidates: list[ReviewCandidate], window: DateWindow) -> PageScan:
    """Evaluate one page's nodes in order against the window.

    Stops at the first review older than the window start.
    """
    scan = PageScan(node_count=len(candidates))
    for candidate in candidates:
        parsed = parse_review_date(candidate.raw_date)
        if parsed is None:
            continue
        if is_before_window(parsed, window):
            scan.crossed_start = True
            break
        if is_after_window(parsed, window):
            continue
        scan.accepted.append(build_review(candidate, parsed))
        scan.has_valid = True
    return scan


async def fetch_with_retries(
    fetch_page: Callable[[int], Awaitable[T]],
    page_number: int,
    policy: RetryPolicy,
    sleep: Sleep = asyncio.sleep,
    label: str = "",
) -> T:
    """Fetch and extract one page, retrying transient failures.

    PageNotFoundError is passed straight through. Running out of attempts
    raises RetriesExhaustedError carrying the last failure.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await fetch_page(page_number)
        except PageNotFoundError:
            raise
        except TransientFetchError as e:
            if attempt >= policy.max_attempts:
                raise RetriesExhaustedError(page_number, attempt, e) from e
            logger.warning(f"{label}Error fetching page {page_number} (attempt {attempt}): {e}")
            logger.info(f"{label}Retrying page {page_number} in {policy.delay:g} seconds...")
            await sleep(policy.delay)


async def paginate(
    fetch_page: FetchPage,
    window: DateWindow,
    *,
    page_delay: float = 2.0,
    retry_policy: RetryPolicy = RetryPolicy(),
    max_pages: Optional[int] = None,
    sleep: Sleep = asyncio.sleep,
    label: str = "",
) -> PaginationResult:
    """Drive fetch_page(1), fetch_page(2), ... until a stop condition.

    fetch_page returns the page's review nodes in platform order.
    """
    cursor = PaginationCursor()
    result = PaginationResult()

    while cursor.keep_fetching:
        try:
            candidates = await fetch_with_retries(
                fetch_page, cursor.page_number, retry_policy, sleep=sleep, label=label
            )
            scan = scan_page(candidates, window)
        except PageNotFoundError as e:
            logger.warning(f"{label}404 encountered on page {cursor.page_number}. Stopping.")
            result.stop_reason = StopReason.NOT_FOUND
            result.error = e
            break
        except RetriesExhaustedError as e:
            logger.error(
                f"{label}Failed to fetch page {cursor.page_number} after {e.attempts} attempts. "
                f"Last error: {e.last_error}"
            )
            result.stop_reason = StopReason.RETRIES_EXHAUSTED
            result.error = e
            break
        except Exception as e:
            logger.exception(f"{label}Unexpected error on page {cursor.page_number}. Stopping.")
            result.stop_reason = StopReason.UNEXPECTED_ERROR
            result.error = e
            break

        result.pages_fetched += 1
        result.reviews.extend(scan.accepted)
        if scan.has_valid:
            cursor.found_any = True

        logger.info(
            f"{label}Page {cursor.page_number}: {scan.node_count} reviews on page, "
            f"{len(scan.accepted)} in range (kept: {len(result.reviews)})"
        )

        if scan.node_count == 0:
            result.stop_reason = StopReason.END_OF_LISTING
            break
        if scan.crossed_start:
            cursor.keep_fetching = False
            result.stop_reason = StopReason.DATE_BOUNDARY
            break
        if not scan.has_valid and cursor.found_any:
            result.stop_reason = StopReason.WINDOW_CONSUMED
            break
        if max_pages is not None and cursor.page_number >= max_pages:
            logger.warning(f"{label}Reached page limit ({max_pages}). Stopping.")
            result.stop_reason = StopReason.MAX_PAGES
            break

        cursor.page_number += 1
        await sleep(page_delay)

    return result


class LoadMoreListing(Protocol):
    """A listing that grows in place, e.g. behind a "show more" button."""

    async def loaded_candidates(self) -> list[ReviewCandidate]: ...

    async def load_more(self) -> bool: ...


def oldest_loaded_date(candidates: list[ReviewCandidate]):
    dates = [d for d in (parse_review_date(c.raw_date) for c in candidates) if d is not None]
    return min(dates) if dates else None


async def drive_load_more(
    listing: LoadMoreListing,
    window: DateWindow,
    *,
    increment_delay: float = 2.0,
    max_increments: Optional[int] = None,
    sleep: Sleep = asyncio.sleep,
    label: str = "",
) -> PaginationResult:
    """Keep pressing "load more" until the oldest loaded review predates the
    window, then extract everything once and filter it.
    """
    result = PaginationResult()
    increments = 0

    while True:
        candidates = await listing.loaded_candidates()
        oldest = oldest_loaded_date(candidates)
        if oldest is None:
            result.stop_reason = StopReason.END_OF_LISTING
            break
        if is_before_window(oldest, window):
            result.stop_reason = StopReason.DATE_BOUNDARY
            break
        if max_increments is not None and increments >= max_increments:
            logger.warning(f"{label}Reached load-more limit ({max_increments}). Stopping.")
            result.stop_reason = StopReason.MAX_PAGES
            break
        if not await listing.load_more():
            result.stop_reason = StopReason.LOAD_MORE_EXHAUSTED
            break
        increments += 1
        logger.info(f"{label}Loaded more reviews (round {increments}, oldest so far {oldest.date()})")
        await sleep(increment_delay)

    result.pages_fetched = increments + 1
    loaded = []
    for candidate in await listing.loaded_candidates():
        parsed = parse_review_date(candidate.raw_date)
        if parsed is not None:
            loaded.append(build_review(candidate, parsed))
    result.reviews = filter_reviews(loaded, window)
    logger.info(f"{label}{len(loaded)} reviews loaded, {len(result.reviews)} in range")
    return result
