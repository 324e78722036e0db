"""Local sentence-embedding similarity.

Used when `similarity_backend == "local"` to compute the pairwise similarity
matrix in-process instead of calling the remote similarity endpoint. The
default model is BioLORD-2023, a biomedical sentence embedding model that
does well on clinical sentence similarity benchmarks.

The model is lazy-loaded on first use and reused for the lifetime of the
process; loading takes several seconds and a few hundred MB of RAM.
"""

import logging

import numpy as np
from sentence_transformers import SentenceTransformer

from trial_scout.config import get_settings

logger = logging.getLogger(__name__)

# Module-level singleton. None until the first call to embed().
_model: SentenceTransformer | None = None


def _get_model() -> SentenceTransformer:
    """Return the singleton model, instantiating it on first call."""
    global _model
    if _model is None:
        model_name = get_settings().embedding_model
        logger.info("Loading embedding model %s", model_name)
        _model = SentenceTransformer(model_name)
    return _model


def embed(texts: list[str]) -> np.ndarray:
    """Embed all texts in one batch. Returns an (N, dim) array."""
    return _get_model().encode(texts, convert_to_numpy=True)


def cosine_similarity_matrix(vectors: np.ndarray) -> list[list[float]]:
    """Pairwise cosine similarity, clipped to [0, 1].

    Zero vectors get similarity 0 with everything rather than NaN.
    """
    norms = np.linalg.norm(vectors, axis=1, keepdims=True)
    unit = np.divide(vectors, norms, out=np.zeros_like(vectors, dtype=float), where=norms != 0)
    return np.clip(unit @ unit.T, 0.0, 1.0).tolist()


def local_similarity(docs: list[str]) -> list[list[float]]:
    """Embed docs locally and return their similarity matrix."""
    return cosine_similarity_matrix(embed(docs))
