"""Unit tests for the similarity grapher."""

import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from trial_scout.constants import PRODUCT_TYPE_COLORS, STATUS_COLORS
from trial_scout.data_sources.base_client import DataSourceError
from trial_scout.models.model_search import SearchResult
from trial_scout.services.similarity_graph import (
    SimilarityError,
    build_documents,
    build_graph,
    fetch_similarity,
    graph_edges,
    node_color,
)

PAIR = [[1.0, 0.9], [0.9, 1.0]]


def _remote_settings():
    return patch(
        "trial_scout.services.similarity_graph.get_settings",
        return_value=MagicMock(similarity_backend="remote"),
    )


# ── graph_edges ──────────────────────────────────────────────────────────────


def test_no_edges_above_pair_similarity():
    """A threshold above every pair gives no edges."""
    assert graph_edges(PAIR, 0.95) == []


def test_exactly_one_edge_below_pair_similarity():
    """A two-record matrix gives one edge, never its mirror."""
    assert graph_edges(PAIR, 0.8) == [(0, 1, 0.9)]


def test_threshold_is_inclusive():
    """A pair exactly at the threshold is linked."""
    assert graph_edges(PAIR, 0.9) == [(0, 1, 0.9)]


def test_no_self_loops_at_zero_threshold():
    """Even at threshold 0 the diagonal is never an edge."""
    matrix = [[1.0, 0.2, 0.0], [0.2, 1.0, 0.5], [0.0, 0.5, 1.0]]

    edges = graph_edges(matrix, 0.0)

    assert [(i, j) for i, j, _ in edges] == [(0, 1), (0, 2), (1, 2)]
    assert all(i < j for i, j, _ in edges)


def test_empty_matrix_has_no_edges():
    assert graph_edges([], 0.5) == []


# ── build_documents ──────────────────────────────────────────────────────────


def test_study_documents_use_titles(sample_study, minimal_study):
    """Study documents are brief title and official title."""
    docs = build_documents("studies", [sample_study, minimal_study])

    assert docs == [
        "Inhaled Budesonide in Adult Asthma\n"
        "A Randomized Trial of Inhaled Budesonide in Adults With Asthma",
        "Minimal\n",
    ]


def test_label_documents_use_names_and_indications(sample_label):
    """Label documents are names plus indications."""
    (doc,) = build_documents("drugLabeling", [sample_label])

    assert doc.startswith("GLUCOPHAGE\nMETFORMIN HYDROCHLORIDE\nMetformin is indicated")


# ── fetch_similarity ─────────────────────────────────────────────────────────


async def test_empty_docs_make_no_request():
    """No documents means no request."""
    client = MagicMock()
    client.similarity = AsyncMock()

    assert await fetch_similarity([], client=client) == []
    client.similarity.assert_not_awaited()


async def test_single_batched_call():
    """All documents go out in one call."""
    client = MagicMock()
    client.similarity = AsyncMock(return_value=PAIR)

    with _remote_settings():
        matrix = await fetch_similarity(["a", "b"], client=client)

    assert matrix == PAIR
    client.similarity.assert_awaited_once_with(["a", "b"])


async def test_upstream_error_becomes_similarity_error():
    """Client failures are wrapped as SimilarityError."""
    client = MagicMock()
    client.similarity = AsyncMock(
        side_effect=DataSourceError("similarity", "HTTP 503: down", status_code=503)
    )

    with _remote_settings(), pytest.raises(SimilarityError, match="503"):
        await fetch_similarity(["a", "b"], client=client)


async def test_owned_client_is_closed():
    """A client created for the call is closed afterwards."""
    owned = MagicMock()
    owned.similarity = AsyncMock(return_value=PAIR)
    owned.__aenter__ = AsyncMock(return_value=owned)
    owned.__aexit__ = AsyncMock(return_value=False)

    with _remote_settings(), patch(
        "trial_scout.services.similarity_graph.SimilarityClient", return_value=owned
    ):
        assert await fetch_similarity(["a", "b"]) == PAIR

    owned.__aexit__.assert_awaited_once()


async def test_missing_local_backend_becomes_similarity_error():
    """The local backend without its optional extra fails as SimilarityError."""
    with patch(
        "trial_scout.services.similarity_graph.get_settings",
        return_value=MagicMock(similarity_backend="local"),
    ), patch.dict(sys.modules, {"trial_scout.services.embeddings": None}):
        with pytest.raises(SimilarityError):
            await fetch_similarity(["a", "b"])


@pytest.mark.parametrize(
    "matrix",
    [
        [[1.0, 0.9], [0.9]],
        [[1.0, 0.9], [0.9, "high"]],
        [[1.0, 0.9], [0.9, None]],
        [[1.0]],
        "not a matrix",
    ],
)
async def test_malformed_matrix_becomes_similarity_error(matrix):
    """Anything other than an N×N numeric matrix is rejected."""
    client = MagicMock()
    client.similarity = AsyncMock(return_value=matrix)

    with _remote_settings(), pytest.raises(SimilarityError):
        await fetch_similarity(["a", "b"], client=client)


# ── build_graph ──────────────────────────────────────────────────────────────


def test_build_graph_nodes_and_links(sample_study, minimal_study):
    """Nodes carry ids and colors; links carry similarity."""
    result = SearchResult(
        run_id=1,
        kind="studies",
        question="q",
        params={},
        records=(sample_study, minimal_study),
        similarity=((1.0, 0.9), (0.9, 1.0)),
    )

    graph = build_graph(result, 0.8)

    assert [n.id for n in graph.nodes] == ["NCT01234567", "NCT07654321"]
    assert graph.nodes[0].color == STATUS_COLORS["RECRUITING"]
    assert graph.nodes[1].color == STATUS_COLORS["COMPLETED"]
    assert len(graph.links) == 1
    assert graph.links[0].source == "NCT01234567"
    assert graph.links[0].target == "NCT07654321"
    assert graph.links[0].value == pytest.approx(0.9)
    assert graph.threshold == 0.8


def test_build_graph_refilters_without_fetching(sample_study, minimal_study):
    """The same stored matrix serves any threshold."""
    result = SearchResult(
        run_id=1,
        kind="studies",
        question="q",
        params={},
        records=(sample_study, minimal_study),
        similarity=((1.0, 0.9), (0.9, 1.0)),
    )

    assert build_graph(result, 0.95).links == []
    assert len(build_graph(result, 0.5).links) == 1


def test_label_node_color_uses_product_type(sample_label):
    """Label nodes are colored by product type."""
    assert node_color("drugLabeling", sample_label) == PRODUCT_TYPE_COLORS[
        "HUMAN PRESCRIPTION DRUG"
    ]


def test_duplicate_record_ids_get_distinct_nodes(sample_study):
    """Two records sharing an NCT ID stay two nodes, and links keep them apart."""
    result = SearchResult(
        run_id=1,
        kind="studies",
        question="q",
        params={},
        records=(sample_study, sample_study),
        similarity=((1.0, 1.0), (1.0, 1.0)),
    )

    graph = build_graph(result, 0.5)

    assert [n.id for n in graph.nodes] == ["NCT01234567", "NCT01234567#1"]
    assert graph.links[0].source != graph.links[0].target
