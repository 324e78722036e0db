"""Unit tests for ClinicalTrialsClient."""

from unittest.mock import AsyncMock, patch

import pytest

from trial_scout.constants import REQUIRED_STUDY_FIELDS
from trial_scout.data_sources.base_client import ClientConfig
from trial_scout.data_sources.clinical_trials import (
    ClinicalTrialsClient,
    with_required_fields,
)

BASE = "https://clinicaltrials.gov/api/v2"


class TestWithRequiredFields:
    def test_adds_both_modules_when_fields_missing(self):
        """No fields at all still yields the two required modules."""
        result = with_required_fields({"query.cond": "asthma"})

        assert result["fields"] == list(REQUIRED_STUDY_FIELDS)
        assert result["query.cond"] == "asthma"

    def test_keeps_caller_order_and_appends_missing(self):
        """Caller modules keep their order; missing required ones are appended."""
        result = with_required_fields(
            {"fields": ["protocolSection.eligibilityModule"]}
        )

        assert result["fields"] == [
            "protocolSection.eligibilityModule",
            "protocolSection.identificationModule",
            "protocolSection.statusModule",
        ]

    def test_does_not_duplicate_present_field(self):
        """A required module the caller already asked for is not repeated."""
        result = with_required_fields(
            {"fields": ["protocolSection.statusModule", "protocolSection.designModule"]}
        )

        assert result["fields"].count("protocolSection.statusModule") == 1
        assert result["fields"] == [
            "protocolSection.statusModule",
            "protocolSection.designModule",
            "protocolSection.identificationModule",
        ]

    def test_does_not_mutate_input(self):
        """The caller's params dict is left untouched."""
        params = {"fields": ["protocolSection.designModule"]}

        with_required_fields(params)

        assert params == {"fields": ["protocolSection.designModule"]}

    def test_accepts_comma_separated_string(self):
        """A comma-separated fields string is split before merging."""
        result = with_required_fields(
            {"fields": "protocolSection.identificationModule, protocolSection.designModule"}
        )

        assert result["fields"] == [
            "protocolSection.identificationModule",
            "protocolSection.designModule",
            "protocolSection.statusModule",
        ]


@pytest.mark.asyncio
class TestEndpoints:
    async def test_studies_injects_page_size_and_fields(self):
        """studies() sends pageSize=10 and the required modules."""
        client = ClinicalTrialsClient(ClientConfig())
        mock_get = AsyncMock(return_value={"studies": []})

        with patch.object(client, "_rest_get", mock_get):
            await client.studies({"query.cond": "asthma"})

        url, params = mock_get.call_args.args
        assert url == f"{BASE}/studies"
        assert params["pageSize"] == 10
        assert params["query.cond"] == "asthma"
        for field in REQUIRED_STUDY_FIELDS:
            assert field in params["fields"]

    async def test_studies_caller_page_size_wins(self):
        """An explicit pageSize overrides the default."""
        client = ClinicalTrialsClient(ClientConfig())
        mock_get = AsyncMock(return_value={"studies": []})

        with patch.object(client, "_rest_get", mock_get):
            await client.studies({"pageSize": 50, "fields": []})

        _, params = mock_get.call_args.args
        assert params["pageSize"] == 50

    async def test_study_path(self):
        """study() requests /studies/{nctId}."""
        client = ClinicalTrialsClient(ClientConfig())
        mock_get = AsyncMock(return_value={"protocolSection": {}})

        with patch.object(client, "_rest_get", mock_get):
            await client.study("NCT01234567")

        assert mock_get.call_args.args[0] == f"{BASE}/studies/NCT01234567"

    @pytest.mark.parametrize(
        "method,path",
        [
            ("studies_metadata", "/studies/metadata"),
            ("studies_search_areas", "/studies/search-areas"),
            ("studies_enums", "/studies/enums"),
            ("stats_size", "/stats/size"),
            ("stats_field_values", "/stats/field/values"),
            ("stats_field_sizes", "/stats/field/sizes"),
        ],
    )
    async def test_sibling_endpoints(self, method, path):
        """Metadata, enum and stats wrappers hit their own paths."""
        client = ClinicalTrialsClient(ClientConfig())
        mock_get = AsyncMock(return_value={})

        with patch.object(client, "_rest_get", mock_get):
            await getattr(client, method)()

        assert mock_get.call_args.args[0] == f"{BASE}{path}"
