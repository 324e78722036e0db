"""
Search pipeline: question → query → records → results + graph → summary.

Stages run strictly one after another. Each run gets a generation number;
starting a new run supersedes the old one, and a superseded run stops at
its next event instead of writing into shared render targets.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

from trial_scout.constants import DEFAULT_SIMILARITY_THRESHOLD, STUDIES
from trial_scout.data_sources.base_client import DataSourceError
from trial_scout.data_sources.clinical_trials import ClinicalTrialsClient
from trial_scout.data_sources.fda import FDAClient
from trial_scout.data_sources.similarity import SimilarityClient
from trial_scout.models.model_search import PipelineEvent, PipelineStage, SearchResult
from trial_scout.services.query_synthesizer import LLMStreamError, synthesize_query
from trial_scout.services.rendering import (
    render_alert,
    render_params_table,
    render_results,
    render_spinner,
)
from trial_scout.services.similarity_graph import (
    SimilarityError,
    build_documents,
    build_graph,
    fetch_similarity,
)
from trial_scout.services.summarizer import summarize
from trial_scout.services.tool_schemas import (
    ToolArgumentError,
    get_tool,
    validate_tool_arguments,
)

logger = logging.getLogger(__name__)


class SearchPipeline:
    """Owns the API clients and the generation counter for pipeline runs."""

    def __init__(
        self,
        clinical_trials: ClinicalTrialsClient | None = None,
        fda: FDAClient | None = None,
        similarity: SimilarityClient | None = None,
    ) -> None:
        self.clinical_trials = clinical_trials or ClinicalTrialsClient()
        self.fda = fda or FDAClient()
        self.similarity = similarity or SimilarityClient()
        self._generation = 0
        self.current: SearchResult | None = None

    async def close(self) -> None:
        await self.clinical_trials.close()
        await self.fda.close()
        await self.similarity.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    # -- Generations ---------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, run_id: int) -> bool:
        return run_id == self._generation

    # -- Stages --------------------------------------------------------------

    async def fetch(
        self, run_id: int, question: str, kind: str, params: dict[str, Any]
    ) -> SearchResult:
        """Query the API for `kind` and return the records as a SearchResult."""
        if kind == STUDIES:
            data = await self.clinical_trials.studies(params)
            records = data.get("studies", [])
        else:
            data = await self.fda.drug_labeling(params)
            records = data.get("results", [])

        logger.info("Run %d fetched %d %s records", run_id, len(records), kind)
        return SearchResult(
            run_id=run_id,
            kind=kind,
            question=question,
            params=params,
            records=tuple(records),
        )

    async def run(
        self,
        question: str,
        source: str = STUDIES,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> AsyncIterator[PipelineEvent]:
        """Run every stage for one question, yielding events for the render targets."""
        self._generation += 1
        run_id = self._generation
        logger.info("Run %d started: %r (%s)", run_id, question, source)

        async with aclosing(self._stages(run_id, question, source, threshold)) as events:
            async for event in events:
                if not self.is_current(run_id):
                    logger.info("Run %d superseded; dropping %s event", run_id, event.stage)
                    return
                yield event

    async def _stages(
        self, run_id: int, question: str, source: str, threshold: float
    ) -> AsyncIterator[PipelineEvent]:
        def event(stage: PipelineStage, html: str = "", data: Any = None) -> PipelineEvent:
            return PipelineEvent(run_id=run_id, stage=stage, html=html, data=data)

        try:
            tool = get_tool(source)
            yield event("status", render_spinner("Creating the API query..."))

            params: dict[str, Any] = {}
            async for draft in synthesize_query(question, source):
                params = draft.params
                yield event("params", render_params_table(params), params)

            if source == STUDIES:
                # An omitted `fields` still gets the required modules from the client.
                params = {"fields": [], **params}
            params = validate_tool_arguments(tool, params)
            yield event("status", render_spinner("Searching..."))

            result = await self.fetch(run_id, question, source, params)
            if self.is_current(run_id):
                self.current = result
            yield event(
                "results",
                render_results(result.kind, result.records),
                {"count": len(result), "ids": result.ids},
            )
            if not result.records:
                yield event("end")
                return

            try:
                matrix = await fetch_similarity(
                    build_documents(result.kind, result.records), self.similarity
                )
            except SimilarityError as e:
                yield event("graph", render_alert(str(e)))
            else:
                result = result.model_copy(
                    update={"similarity": tuple(tuple(row) for row in matrix)}
                )
                if self.is_current(run_id):
                    self.current = result
                yield event("graph", data=build_graph(result, threshold).model_dump())

            yield event("status", render_spinner("Finding the most relevant results..."))
            async for fragment in summarize(result):
                yield event("summary", fragment)

        except (LLMStreamError, ToolArgumentError, DataSourceError) as e:
            logger.warning("Run %d failed: %s", run_id, e)
            yield event("error", render_alert(str(e)), {"message": str(e)})

        yield event("end")
