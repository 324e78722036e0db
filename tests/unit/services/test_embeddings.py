"""Unit tests for services/embeddings (no model loading)."""

import numpy as np
import pytest
from unittest.mock import MagicMock, patch

pytest.importorskip("sentence_transformers")

import trial_scout.services.embeddings as embeddings_module  # noqa: E402
from trial_scout.services.embeddings import (  # noqa: E402
    cosine_similarity_matrix,
    embed,
    local_similarity,
)


@pytest.fixture(autouse=True)
def reset_singleton():
    """Reset the module-level _model to None before and after each test.

    A model mocked in one test would otherwise leak into the next.
    """
    embeddings_module._model = None
    yield
    embeddings_module._model = None


def _make_mock_model(vectors) -> MagicMock:
    mock = MagicMock()
    mock.encode.return_value = np.asarray(vectors, dtype=np.float32)
    return mock


def test_embed_passes_texts_to_encode():
    """embed() batches every text into one encode() call."""
    mock_model = _make_mock_model([[1.0, 0.0], [0.0, 1.0]])
    with patch(
        "trial_scout.services.embeddings.SentenceTransformer",
        return_value=mock_model,
    ):
        result = embed(["a", "b"])

    mock_model.encode.assert_called_once_with(["a", "b"], convert_to_numpy=True)
    assert result.shape == (2, 2)


def test_model_is_loaded_once():
    """The SentenceTransformer is instantiated once and reused."""
    mock_model = _make_mock_model([[1.0, 0.0]])
    with patch(
        "trial_scout.services.embeddings.SentenceTransformer",
        return_value=mock_model,
    ) as mock_cls:
        embed(["a"])
        embed(["b"])

    mock_cls.assert_called_once()


def test_cosine_matrix_diagonal_and_orthogonal():
    """Self-similarity is 1 and orthogonal vectors score 0."""
    matrix = cosine_similarity_matrix(np.array([[1.0, 0.0], [0.0, 2.0], [1.0, 1.0]]))

    assert matrix[0][0] == pytest.approx(1.0)
    assert matrix[0][1] == pytest.approx(0.0)
    assert matrix[0][2] == pytest.approx(2**-0.5)
    assert matrix[2][0] == matrix[0][2]


def test_cosine_matrix_clips_negative_and_handles_zero_vector():
    """Negative scores clip to 0 and zero vectors give 0, not NaN."""
    matrix = cosine_similarity_matrix(np.array([[1.0, 0.0], [-1.0, 0.0], [0.0, 0.0]]))

    assert matrix[0][1] == 0.0
    assert matrix[2] == [0.0, 0.0, 0.0]


def test_local_similarity_is_plain_lists():
    """local_similarity returns JSON-friendly nested lists."""
    mock_model = _make_mock_model([[1.0, 0.0], [1.0, 0.0]])
    with patch(
        "trial_scout.services.embeddings.SentenceTransformer",
        return_value=mock_model,
    ):
        matrix = local_similarity(["x", "y"])

    assert isinstance(matrix, list)
    assert matrix[0][1] == pytest.approx(1.0)
