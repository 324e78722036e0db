"""
Pydantic models passed between pipeline stages.

A SearchResult is produced once by the fetch stage and handed, unchanged,
to the renderer, grapher and summarizer. Later stages derive new objects
with `model_copy(update=...)` instead of mutating it.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from trial_scout.constants import (
    DEFAULT_SIMILARITY_THRESHOLD,
    SIMILARITY_MAX,
    SIMILARITY_MIN,
    SIMILARITY_STEP,
    STUDIES,
)
from trial_scout.helpers.record_access import dig

RecordKind = Literal["studies", "drugLabeling"]

PipelineStage = Literal[
    "status", "params", "results", "graph", "summary", "error", "end"
]


def record_id(kind: str, record: dict[str, Any]) -> str:
    """NCT ID for studies, set id (or id) for drug labels."""
    if kind == STUDIES:
        return dig(record, "protocolSection.identificationModule.nctId", "")
    return dig(record, "set_id") or dig(record, "id", "")


class QueryDraft(BaseModel):
    """Best-effort tool arguments parsed from a partially streamed tool call."""

    params: dict[str, Any] = {}
    raw: str = ""
    done: bool = False


class SearchResult(BaseModel):
    """The records fetched for one pipeline run."""

    model_config = ConfigDict(frozen=True)

    run_id: int
    kind: RecordKind
    question: str
    params: dict[str, Any]
    records: tuple[dict[str, Any], ...] = ()
    similarity: tuple[tuple[float, ...], ...] | None = None

    @property
    def ids(self) -> list[str]:
        return [record_id(self.kind, r) for r in self.records]

    def __len__(self) -> int:
        return len(self.records)


class GraphNode(BaseModel):
    id: str
    label: str
    color: str


class GraphLink(BaseModel):
    source: str
    target: str
    value: float


class SliderSpec(BaseModel):
    """Range input settings for the similarity threshold."""

    min: float = SIMILARITY_MIN
    max: float = SIMILARITY_MAX
    step: float = SIMILARITY_STEP
    default: float = DEFAULT_SIMILARITY_THRESHOLD


class SimilarityGraph(BaseModel):
    """Nodes and thresholded links, ready for a force-directed layout."""

    model_config = ConfigDict(frozen=True)

    threshold: float
    nodes: list[GraphNode] = []
    links: list[GraphLink] = []
    slider: SliderSpec = SliderSpec()


class PipelineEvent(BaseModel):
    """One update emitted by a pipeline run, addressed to a render target."""

    run_id: int
    stage: PipelineStage
    html: str = ""
    data: Any = None
