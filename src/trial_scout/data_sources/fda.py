"""
openFDA drug label client.

One method:
  1. drug_labeling: search SPL drug labels (indications, warnings, dosage…)
"""

from __future__ import annotations

import logging
from typing import Any

from trial_scout.config import get_settings
from trial_scout.constants import (
    OPENFDA_DEFAULT_LIMIT,
    OPENFDA_LABEL_URL,
    OPENFDA_MAX_LIMIT,
)
from trial_scout.data_sources.base_client import BaseClient, ClientConfig, RequestContext

logger = logging.getLogger("trial_scout.data_sources.fda")


class FDAClient(BaseClient):
    """Client for querying the openFDA Drug Label API."""

    def __init__(
        self, api_key: str | None = None, config: ClientConfig | None = None
    ) -> None:
        super().__init__(config)
        self._api_key = api_key if api_key is not None else get_settings().openfda_api_key

    @property
    def _source_name(self) -> str:
        return "openfda"

    # -- Public methods -------------------------------------------------------

    async def drug_labeling(self, params: dict[str, Any]) -> dict[str, Any]:
        """Search drug labels. Returns the raw response ({"results": [...], ...})."""
        query = self._build_params(params)
        context = RequestContext(
            source=self._source_name, method="drug_labeling", params=query
        )
        return await self._rest_get(OPENFDA_LABEL_URL, query, context=context)

    # -- Private helpers ------------------------------------------------------

    def _build_params(self, params: dict[str, Any]) -> dict[str, str]:
        """Build query parameters for the label endpoint.

        `search` wins over `searches`; a list of searches is AND-combined.
        """
        search = params.get("search")
        if not search and params.get("searches"):
            search = " AND ".join(s for s in params["searches"] if s)

        limit = params.get("limit") or OPENFDA_DEFAULT_LIMIT
        query: dict[str, str] = {"limit": str(min(int(limit), OPENFDA_MAX_LIMIT))}
        if search:
            query["search"] = search
        if self._api_key:
            query["api_key"] = self._api_key
        return query
