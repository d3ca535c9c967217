"""
Clearance Extraction Engine - FastAPI Application
Exposes the engine to browser workers that post a rendered page snapshot and
the responses they captured during load.
"""
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from clearance_scraper.adapters.capture_buffer import CaptureBuffer
from clearance_scraper.config import config
from clearance_scraper.exceptions import SnapshotUnavailableError
from clearance_scraper.layers.arbitration import ExtractionEngine
from clearance_scraper.layers.telemetry import StoreSummary
from clearance_scraper.utils.logger import get_logger, set_trace_id


# Initialize FastAPI app
app = FastAPI(
    title="Clearance Extraction Engine",
    description="Normalizes clearance listings from DOM tiles and captured network JSON",
    version="1.0.0",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize engine
engine = ExtractionEngine()

logger = get_logger("main")


# Request/Response models
class CaptureInput(BaseModel):
    """One response intercepted by the browser worker."""
    url: str
    body: str = ""
    content_type: str = ""
    status: Optional[int] = None
    resource_type: str = "xhr"


class ExtractRequest(BaseModel):
    """Request model for clearance extraction."""
    html: Optional[str] = None
    page_url: str = ""
    store: Optional[str] = None
    store_name: Optional[str] = None
    captures: List[CaptureInput] = Field(default_factory=list)


class ExtractResponse(BaseModel):
    """Response model for clearance extraction."""
    store: Optional[str]
    result: dict
    summary: str
    captures_retained: int
    captures_rejected: int
    trace_id: str


# API Routes
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.post("/api/extract")
async def extract_clearance(request: ExtractRequest):
    """
    Extract clearance products (discount >= threshold) for one store page.

    Captures are filtered through a bounded CaptureBuffer exactly as they would
    be during a live page load before the engine sees them.
    """
    trace_id = set_trace_id()

    logger.info(
        "extraction_request",
        page_url=request.page_url,
        store=request.store,
        captures=len(request.captures),
        trace_id=trace_id,
    )

    buffer = CaptureBuffer(**config.capture_bounds())
    for capture in request.captures:
        buffer.offer(
            url=capture.url,
            body=capture.body,
            content_type=capture.content_type,
            status=capture.status,
            resource_type=capture.resource_type,
        )

    try:
        result = engine.extract_html(
            request.html,
            page_url=request.page_url,
            captures=buffer.captures(),
            store=request.store,
            store_name=request.store_name,
        )
    except SnapshotUnavailableError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("extraction_error", error=str(e), page_url=request.page_url)
        raise HTTPException(status_code=500, detail=str(e))

    summary = StoreSummary.from_result(
        result,
        store=request.store,
        store_name=request.store_name,
        threshold=engine.threshold,
    )

    return ExtractResponse(
        store=request.store,
        result=result.model_dump(mode="json", by_alias=True),
        summary=summary.format_line(),
        captures_retained=len(buffer),
        captures_rejected=buffer.rejected_count,
        trace_id=trace_id,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
