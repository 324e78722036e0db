"""
ClinicalTrials.gov REST API v2 client.

  1. studies       : search, always returning identification + status modules
  2. study         : a single record by NCT ID
  3. metadata/enums: data model and enumeration lookups
  4. stats_*       : size and field-value statistics
"""

from __future__ import annotations

from typing import Any

from trial_scout.constants import (
    CLINICAL_TRIALS_BASE_URL,
    CLINICAL_TRIALS_PAGE_SIZE,
    REQUIRED_STUDY_FIELDS,
)
from trial_scout.data_sources.base_client import BaseClient, RequestContext


def with_required_fields(params: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of params whose `fields` includes the required modules.

    Caller-supplied fields keep their order; missing required modules are
    appended and nothing is duplicated. A comma-separated string is
    accepted as well as a list.
    """
    fields = params.get("fields") or []
    if isinstance(fields, str):
        fields = [f.strip() for f in fields.split(",") if f.strip()]

    merged = list(dict.fromkeys(fields))
    for field in REQUIRED_STUDY_FIELDS:
        if field not in merged:
            merged.append(field)

    return {**params, "fields": merged}


class ClinicalTrialsClient(BaseClient):
    BASE_URL = CLINICAL_TRIALS_BASE_URL
    PAGE_SIZE = CLINICAL_TRIALS_PAGE_SIZE

    @property
    def _source_name(self) -> str:
        return "clinical_trials"

    async def _run(self, path: str, params: dict[str, Any] | None = None) -> Any:
        context = RequestContext(
            source=self._source_name, method=path, params=params or {}
        )
        return await self._rest_get(f"{self.BASE_URL}{path}", params, context=context)

    # ------------------------------------------------------------------
    # Studies
    # ------------------------------------------------------------------

    async def studies(self, params: dict[str, Any]) -> dict[str, Any]:
        """Search studies. Returns the raw response ({"studies": [...], ...})."""
        return await self._run(
            "/studies",
            {"pageSize": self.PAGE_SIZE, **with_required_fields(params)},
        )

    async def study(self, nct_id: str) -> dict[str, Any]:
        """Fetch a single study by NCT ID."""
        return await self._run(f"/studies/{nct_id}")

    async def studies_metadata(self) -> Any:
        return await self._run("/studies/metadata")

    async def studies_search_areas(self) -> Any:
        return await self._run("/studies/search-areas")

    async def studies_enums(self) -> Any:
        return await self._run("/studies/enums")

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    async def stats_size(self, params: dict[str, Any] | None = None) -> Any:
        return await self._run("/stats/size", params)

    async def stats_field_values(self, params: dict[str, Any] | None = None) -> Any:
        return await self._run("/stats/field/values", params)

    async def stats_field_sizes(self, params: dict[str, Any] | None = None) -> Any:
        return await self._run("/stats/field/sizes", params)
