"""HTML builders and fakes shared by the tests."""

from review_scraper.models import ReviewCandidate


class FakeFetcher:
    """url -> html, an exception, or a list of those consumed per call."""

    def __init__(self, responses):
        self.responses = responses
        self.urls = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True

    async def get_html(self, url):
        self.urls.append(url)
        outcome = self.responses.get(url, "<html></html>")
        if isinstance(outcome, list):
            outcome = outcome.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class SleepRecorder:
    """Stands in for asyncio.sleep and remembers every delay it was asked for."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def candidate(raw_date: str, title: str = None) -> ReviewCandidate:
    return ReviewCandidate(raw_date=raw_date, fields={"title": title or f"review {raw_date}"})


def g2_article(published: str, title: str = "Great tool", rating: str = "4.5") -> str:
    return f"""
    <div><article>
      <div itemprop="name"><h5>{title}</h5></div>
      <meta itemprop="datePublished" content="{published}">
      <meta itemprop="ratingValue" content="{rating}">
      <div itemprop="author"><h5>Jane D.</h5></div>
      <div class="elv-tracking-normal elv-font-figtree elv-text-xs">Engineering Manager</div>
      <div class="elv-tracking-normal elv-font-figtree elv-text-xs">Mid-Market (51-1000 emp.)</div>
      <span data-clipboard-text="https://www.g2.com/survey_responses/{published}"></span>
      <div itemprop="reviewBody">
        <section><p>Fast search.</p><p>Review collected by and hosted on G2.com.</p></section>
        <section><p>Pricing.</p></section>
      </div>
    </article></div>
    """


def g2_page(*dates: str) -> str:
    articles = "".join(g2_article(d, title=f"review {d}") for d in dates)
    return f'<html><body><div class="nested-ajax-loading">{articles}</div></body></html>'


def trustpilot_page(*dates: str) -> str:
    cards = "".join(
        f"""
        <div class="styles_cardWrapper__g8amG styles_show__Z8n7u">
          <article>
            <div class="styles_reviewHeader__DzoAZ" data-service-review-rating="5"></div>
            <span data-consumer-name-typography="true">Sam</span>
            <time datetime="{d}"></time>
            <h2 data-service-review-title-typography="true">review {d}</h2>
            <p data-service-review-text-typography="true">Arrived on time.</p>
          </article>
        </div>
        """
        for d in dates
    )
    return f'<html><body><section data-reviews-list-start="true">{cards}</section></body></html>'


def capterra_card(shown_date: str) -> str:
    return f"""
    <div class="e1xzmg0z c1ofrhif">
      <span class="typo-20 text-neutral-99 font-semibold">Alex P.</span>
      <h3 class="typo-20 font-semibold">review {shown_date}</h3>
      <div class="typo-0 text-neutral-90">{shown_date}</div>
      <div data-testid="rating"><span class="e1xzmg0z sr2r3oj">4.0</span></div>
      <div class="space-y-6"><p>Easy to set up.</p></div>
    </div>
    """


CAPTERRA_SUMMARY_CARD = '<div class="e1xzmg0z c1ofrhif"><p>See all alternatives</p></div>'


def capterra_page(*shown_dates: str, summary_cards: int = 2) -> str:
    cards = "".join(capterra_card(d) for d in shown_dates) + CAPTERRA_SUMMARY_CARD * summary_cards
    return f'<html><body><div data-testid="filters-sort-by"></div>{cards}</body></html>'
