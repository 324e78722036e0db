"""
Pydantic view models for ClinicalTrials.gov study records.

The renderer and grapher receive these models; they never index raw
API responses. Sections whose module is absent from the record are None
so they can be omitted rather than shown empty.
"""

from typing import Any

from pydantic import BaseModel

from trial_scout.constants import CLINICAL_TRIALS_STUDY_URL, NEUTRAL_COLOR, STATUS_COLORS
from trial_scout.helpers.record_access import dig

_OUTCOME_KINDS: tuple[str, ...] = ("primaryOutcomes", "secondaryOutcomes", "otherOutcomes")


def status_color(status: str | None) -> str:
    """Color for an overall status; unrecognized statuses get the neutral color."""
    return STATUS_COLORS.get(status or "", NEUTRAL_COLOR)


# ------------------------------------------------------------------
# Section models
# ------------------------------------------------------------------


class ArmGroup(BaseModel):
    """An arm group from armsInterventionsModule."""

    label: str = ""
    description: str = ""

    def __str__(self) -> str:
        return f"[{self.label}]: {self.description}"


class OutcomeMeasure(BaseModel):
    """A primary, secondary or other outcome measure."""

    kind: str  # "primaryOutcomes", "secondaryOutcomes", "otherOutcomes"
    measure: str = ""
    description: str = ""
    time_frame: str = ""


# ------------------------------------------------------------------
# Study card
# ------------------------------------------------------------------


class StudyCard(BaseModel):
    """Everything the result list shows for one study."""

    nct_id: str = ""
    title: str = ""
    official_title: str = ""
    study_type: str = ""
    overall_status: str = ""
    start_date: str = ""
    primary_completion_date: str = ""
    conditions: list[str] | None = None
    interventions: list[ArmGroup] | None = None
    eligibility: str | None = None
    outcomes: list[OutcomeMeasure] | None = None

    @property
    def url(self) -> str:
        return f"{CLINICAL_TRIALS_STUDY_URL}/{self.nct_id}"

    @property
    def color(self) -> str:
        return status_color(self.overall_status)

    @classmethod
    def from_record(cls, study: dict[str, Any]) -> "StudyCard":
        """Build a StudyCard from a raw v2 study record."""
        proto = dig(study, "protocolSection", {})

        conditions = None
        if dig(proto, "conditionsModule") is not None:
            conditions = list(dig(proto, "conditionsModule.conditions", []))

        interventions = None
        if dig(proto, "armsInterventionsModule") is not None:
            interventions = [
                ArmGroup(
                    label=dig(g, "label", ""),
                    description=dig(g, "description", ""),
                )
                for g in dig(proto, "armsInterventionsModule.armGroups", [])
            ]

        eligibility = None
        if dig(proto, "eligibilityModule") is not None:
            eligibility = dig(proto, "eligibilityModule.eligibilityCriteria", "")

        outcomes = None
        if dig(proto, "outcomesModule") is not None:
            outcomes = [
                OutcomeMeasure(
                    kind=kind,
                    measure=dig(o, "measure", ""),
                    description=dig(o, "description", ""),
                    time_frame=dig(o, "timeFrame", ""),
                )
                for kind in _OUTCOME_KINDS
                for o in dig(proto, f"outcomesModule.{kind}", [])
            ]

        return cls(
            nct_id=dig(proto, "identificationModule.nctId", ""),
            title=dig(proto, "identificationModule.briefTitle", ""),
            official_title=dig(proto, "identificationModule.officialTitle", ""),
            study_type=dig(proto, "designModule.studyType", ""),
            overall_status=dig(proto, "statusModule.overallStatus", ""),
            start_date=dig(proto, "statusModule.startDateStruct.date", ""),
            primary_completion_date=dig(
                proto, "statusModule.primaryCompletionDateStruct.date", ""
            ),
            conditions=conditions,
            interventions=interventions,
            eligibility=eligibility,
            outcomes=outcomes,
        )
