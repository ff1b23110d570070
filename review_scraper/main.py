from fastapi import FastAPI, HTTPException

from .config import get_settings
from .errors import InputValidationError
from .models import ScrapeRequest, ScrapeResponse
from .scrapers import build_scraper
from .validation import validate_inputs

app = FastAPI(title="Review Scraper Service")


@app.post("/scrape", response_model=ScrapeResponse)
async def scrape(req: ScrapeRequest):
    try:
        window = validate_inputs(req.company, req.start_date, req.end_date, req.source)
    except InputValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    scraper = build_scraper(req.source, get_settings())
    outcome = await scraper.scrape(req.company, window)

    return ScrapeResponse(
        source=outcome.source,
        company=req.company,
        reviews=[r.to_json_dict() for r in outcome.reviews],
        total_count=len(outcome.reviews),
        stop_reason=outcome.stop_reason,
        error=str(outcome.error) if outcome.error else None,
    )


@app.get("/health")
def health():
    return {"status": "ok"}
