"""FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Literal

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, StreamingResponse
from pydantic import BaseModel

from trial_scout import __version__
from trial_scout.config import get_settings
from trial_scout.constants import DEFAULT_SIMILARITY_THRESHOLD
from trial_scout.data_sources.base_client import DataSourceError
from trial_scout.models.model_search import SearchResult
from trial_scout.services.pipeline import SearchPipeline
from trial_scout.services.rendering import render_results
from trial_scout.services.similarity_graph import build_graph

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=get_settings().log_level)
    if not hasattr(app.state, "pipeline"):
        app.state.pipeline = SearchPipeline()
    logger.info("trial-scout %s ready", __version__)
    yield
    await app.state.pipeline.close()


app = FastAPI(
    title="trial-scout API",
    description="LLM-built searches over ClinicalTrials.gov and openFDA drug labels",
    version=__version__,
    lifespan=lifespan,
)


class SearchRequest(BaseModel):
    question: str
    source: Literal["studies", "drugLabeling"] = "studies"
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD


def _pipeline(request: Request) -> SearchPipeline:
    return request.app.state.pipeline


def _current(request: Request) -> SearchResult:
    result = _pipeline(request).current
    if result is None:
        raise HTTPException(status_code=404, detail="No search has completed yet")
    return result


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.post("/search")
async def search(body: SearchRequest, request: Request) -> StreamingResponse:
    """Run the pipeline, streaming one JSON PipelineEvent per line."""
    pipeline = _pipeline(request)

    async def generate():
        async for event in pipeline.run(body.question, body.source, body.threshold):
            yield event.model_dump_json() + "\n"

    return StreamingResponse(generate(), media_type="application/x-ndjson")


@app.get("/results", response_class=HTMLResponse)
async def results(request: Request, ids: str = "") -> str:
    """Result list scoped to brushed/clicked graph nodes, with those highlighted."""
    result = _current(request)
    selected = [i for i in ids.split(",") if i]
    return render_results(result.kind, result.records, highlighted=selected, subset=selected)


@app.get("/graph")
async def graph(
    request: Request,
    threshold: float = Query(DEFAULT_SIMILARITY_THRESHOLD, ge=0.0, le=1.0),
) -> dict:
    """Re-threshold the current similarity matrix without re-fetching it."""
    result = _current(request)
    if result.similarity is None:
        raise HTTPException(status_code=404, detail="No similarity matrix for this search")
    return build_graph(result, threshold).model_dump()


@app.get("/studies/{nct_id}")
async def study(nct_id: str, request: Request) -> dict:
    """Single ClinicalTrials.gov record."""
    try:
        return await _pipeline(request).clinical_trials.study(nct_id)
    except DataSourceError as e:
        raise HTTPException(
            status_code=502,
            detail={"message": str(e), "upstream_status": e.status_code},
        ) from e
