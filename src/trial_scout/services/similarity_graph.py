"""
Similarity grapher: fetched records → thresholdable similarity graph.

One document string per record is sent in a single batched similarity call.
The matrix is stored on the SearchResult so moving the threshold only
re-filters edges; it never re-fetches.
"""

import logging
from typing import Any

import numpy as np

from trial_scout.config import get_settings
from trial_scout.constants import DEFAULT_SIMILARITY_THRESHOLD, STUDIES
from trial_scout.data_sources.base_client import DataSourceError
from trial_scout.data_sources.similarity import SimilarityClient
from trial_scout.helpers.record_access import dig, first
from trial_scout.models.model_clinical_trials import StudyCard
from trial_scout.models.model_fda import DrugLabelCard
from trial_scout.models.model_search import (
    GraphLink,
    GraphNode,
    SearchResult,
    SimilarityGraph,
    record_id,
)

logger = logging.getLogger(__name__)


class SimilarityError(RuntimeError):
    """The similarity matrix could not be computed."""


def build_documents(kind: str, records: list[dict[str, Any]] | tuple) -> list[str]:
    """One text per record: titles for studies, names + indications for labels."""
    if kind == STUDIES:
        return [
            "{}\n{}".format(
                dig(r, "protocolSection.identificationModule.briefTitle", ""),
                dig(r, "protocolSection.identificationModule.officialTitle", ""),
            )
            for r in records
        ]
    return [
        "\n".join(
            (
                first(dig(r, "openfda.brand_name"), ""),
                first(dig(r, "openfda.generic_name"), ""),
                first(dig(r, "indications_and_usage"), ""),
            )
        )
        for r in records
    ]


async def fetch_similarity(
    docs: list[str], client: SimilarityClient | None = None
) -> list[list[float]]:
    """Return the N×N similarity matrix for docs in one batched call.

    An empty doc list returns [] without any request.
    Raises SimilarityError on any failure, including a missing local
    embedding backend or a matrix that is not N×N numeric.
    """
    if not docs:
        return []

    try:
        if get_settings().similarity_backend == "local":
            from trial_scout.services.embeddings import local_similarity

            matrix = local_similarity(docs)
        elif client is not None:
            matrix = await client.similarity(docs)
        else:
            async with SimilarityClient() as owned:
                matrix = await owned.similarity(docs)
    except (DataSourceError, ImportError, ValueError, OSError) as e:
        logger.warning("Similarity request failed: %s", e)
        raise SimilarityError(str(e)) from e

    return _checked_matrix(matrix, len(docs))


def _checked_matrix(matrix: Any, n: int) -> list[list[float]]:
    """Coerce to an n×n float matrix or raise SimilarityError."""
    try:
        sim = np.asarray(matrix, dtype=float)
    except (TypeError, ValueError) as e:
        logger.warning("Malformed similarity matrix: %s", e)
        raise SimilarityError(f"Malformed similarity matrix: {e}") from e
    if sim.shape != (n, n):
        raise SimilarityError(
            f"Expected a {n}x{n} similarity matrix, got shape {sim.shape}"
        )
    if not np.isfinite(sim).all():
        raise SimilarityError("Similarity matrix contains non-numeric values")
    return sim.tolist()


def graph_edges(
    matrix: Any, threshold: float
) -> list[tuple[int, int, float]]:
    """Pairs (i, j, similarity) with i < j and similarity[i][j] >= threshold."""
    sim = np.asarray(matrix, dtype=float)
    if sim.size == 0:
        return []
    rows, cols = np.nonzero(np.triu(sim >= threshold, k=1))
    return [(int(i), int(j), float(sim[i, j])) for i, j in zip(rows, cols)]


def node_color(kind: str, record: dict[str, Any]) -> str:
    if kind == STUDIES:
        return StudyCard.from_record(record).color
    return DrugLabelCard.from_record(record).color


def _node_label(kind: str, record: dict[str, Any]) -> str:
    if kind == STUDIES:
        return dig(record, "protocolSection.identificationModule.briefTitle", "")
    return DrugLabelCard.from_record(record).title


def build_graph(
    result: SearchResult, threshold: float = DEFAULT_SIMILARITY_THRESHOLD
) -> SimilarityGraph:
    """Graph over result.records with edges at or above threshold.

    Node ids are record ids; a repeated or empty id gets its record index
    appended so every record keeps its own node.
    """
    nodes: list[GraphNode] = []
    seen: set[str] = set()
    for i, r in enumerate(result.records):
        node_id = record_id(result.kind, r)
        if not node_id or node_id in seen:
            node_id = f"{node_id}#{i}" if node_id else str(i)
        seen.add(node_id)
        nodes.append(
            GraphNode(
                id=node_id,
                label=_node_label(result.kind, r),
                color=node_color(result.kind, r),
            )
        )
    links = [
        GraphLink(source=nodes[i].id, target=nodes[j].id, value=value)
        for i, j, value in graph_edges(result.similarity or [], threshold)
        if i < len(nodes) and j < len(nodes)
    ]
    return SimilarityGraph(threshold=threshold, nodes=nodes, links=links)
