"""Pytest configuration and fixtures."""

import pytest


@pytest.fixture
def sample_study() -> dict:
    """A ClinicalTrials.gov v2 study record with every rendered module present."""
    return {
        "protocolSection": {
            "identificationModule": {
                "nctId": "NCT01234567",
                "briefTitle": "Inhaled Budesonide in Adult Asthma",
                "officialTitle": "A Randomized Trial of Inhaled Budesonide in Adults With Asthma",
            },
            "statusModule": {
                "overallStatus": "RECRUITING",
                "startDateStruct": {"date": "2023-01-15"},
                "primaryCompletionDateStruct": {"date": "2025-06"},
            },
            "designModule": {"studyType": "INTERVENTIONAL"},
            "conditionsModule": {"conditions": ["Asthma", "Bronchospasm"]},
            "armsInterventionsModule": {
                "armGroups": [
                    {"label": "Budesonide", "description": "400 mcg twice daily"},
                    {"label": "Placebo", "description": "Matching inhaler"},
                ]
            },
            "eligibilityModule": {
                "eligibilityCriteria": "Inclusion Criteria:\n\n* Adults with asthma\n* Non-smokers"
            },
            "outcomesModule": {
                "primaryOutcomes": [
                    {
                        "measure": "FEV1 change",
                        "description": "Change from baseline",
                        "timeFrame": "12 weeks",
                    }
                ],
                "secondaryOutcomes": [
                    {"measure": "Exacerbations", "timeFrame": "52 weeks"}
                ],
            },
        }
    }


@pytest.fixture
def minimal_study() -> dict:
    """A study returned with only the two required field modules."""
    return {
        "protocolSection": {
            "identificationModule": {"nctId": "NCT07654321", "briefTitle": "Minimal"},
            "statusModule": {"overallStatus": "COMPLETED"},
        }
    }


@pytest.fixture
def sample_label() -> dict:
    """An openFDA drug label result."""
    return {
        "id": "a1b2c3",
        "set_id": "0f1e2d3c-0000-1111-2222-333344445555",
        "effective_time": "20230401",
        "indications_and_usage": ["Metformin is indicated for type 2 diabetes mellitus."],
        "warnings": ["Lactic acidosis may occur."],
        "dosage_and_administration": ["Start at 500 mg twice daily."],
        "openfda": {
            "brand_name": ["GLUCOPHAGE"],
            "generic_name": ["METFORMIN HYDROCHLORIDE"],
            "manufacturer_name": ["Bristol-Myers Squibb"],
            "product_type": ["HUMAN PRESCRIPTION DRUG"],
            "route": ["ORAL"],
        },
    }
