"""Shared fixtures for integration tests.

These tests hit the live ClinicalTrials.gov and openFDA APIs. Run them
explicitly with `pytest tests/integration`.
"""

import pytest

from trial_scout.data_sources.clinical_trials import ClinicalTrialsClient
from trial_scout.data_sources.fda import FDAClient


@pytest.fixture
async def clinical_trials_client():
    client = ClinicalTrialsClient()
    yield client
    await client.close()


@pytest.fixture
async def fda_client():
    client = FDAClient()
    yield client
    await client.close()
