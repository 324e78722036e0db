"""Client for the batched embedding-similarity endpoint."""

from __future__ import annotations

from trial_scout.config import get_settings
from trial_scout.data_sources.base_client import (
    BaseClient,
    ClientConfig,
    DataSourceError,
    RequestContext,
)


class SimilarityClient(BaseClient):
    """POSTs {model, docs} and returns the pairwise similarity matrix."""

    def __init__(
        self,
        url: str | None = None,
        model: str | None = None,
        api_key: str | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        super().__init__(config)
        settings = get_settings()
        self.url = url or settings.similarity_url
        self.model = model or settings.similarity_model
        self._api_key = api_key if api_key is not None else settings.similarity_api_key

    @property
    def _source_name(self) -> str:
        return "similarity"

    async def similarity(
        self, docs: list[str], model: str | None = None
    ) -> list[list[float]]:
        """Return an N×N similarity matrix for the given documents."""
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else None
        data = await self._post_json(
            self.url,
            {"model": model or self.model, "docs": docs},
            headers=headers,
            context=RequestContext(
                source=self._source_name,
                method="similarity",
                params={"n_docs": len(docs)},
            ),
        )
        if not isinstance(data, dict) or "similarity" not in data:
            raise DataSourceError(self._source_name, "Response has no 'similarity' matrix")
        return data["similarity"]
