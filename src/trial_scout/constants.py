"""Project-wide constants."""

# -- ClinicalTrials.gov -----------------------------------------------------
CLINICAL_TRIALS_BASE_URL: str = "https://clinicaltrials.gov/api/v2"
CLINICAL_TRIALS_STUDY_URL: str = "https://clinicaltrials.gov/study"
CLINICAL_TRIALS_PAGE_SIZE: int = 10

# Modules every studies() request returns, whatever the caller asked for.
REQUIRED_STUDY_FIELDS: tuple[str, ...] = (
    "protocolSection.identificationModule",
    "protocolSection.statusModule",
)

STUDY_FIELD_MODULES: tuple[str, ...] = (
    "protocolSection.identificationModule",
    "protocolSection.statusModule",
    "protocolSection.sponsorCollaboratorsModule",
    "protocolSection.oversightModule",
    "protocolSection.descriptionModule",
    "protocolSection.designModule",
    "protocolSection.eligibilityModule",
    "protocolSection.ipdSharingStatementModule",
)

# -- openFDA ----------------------------------------------------------------
OPENFDA_LABEL_URL: str = "https://api.fda.gov/drug/label.json"
OPENFDA_DEFAULT_LIMIT: int = 10
OPENFDA_MAX_LIMIT: int = 1000
DAILYMED_SETID_URL: str = "https://dailymed.nlm.nih.gov/dailymed/drugInfo.cfm?setid="

# -- Record kinds -----------------------------------------------------------
STUDIES: str = "studies"
DRUG_LABELING: str = "drugLabeling"

# -- Rendering --------------------------------------------------------------
MAX_RENDERED_RECORDS: int = 10
NEUTRAL_COLOR: str = "#888"

# Overall status → node / bullet color.
STATUS_COLORS: dict[str, str] = {
    "ACTIVE_NOT_RECRUITING": "#17a2b8",
    "COMPLETED": "#007bff",
    "ENROLLING_BY_INVITATION": "#6f42c1",
    "NOT_YET_RECRUITING": "#ffc107",
    "RECRUITING": "#28a745",
    "SUSPENDED": "#fd7e14",
    "TERMINATED": "#dc3545",
    "WITHDRAWN": "#b22222",
    "AVAILABLE": "#20c997",
    "NO_LONGER_AVAILABLE": "#adb5bd",
    "TEMPORARILY_NOT_AVAILABLE": "#ff7f50",
    "APPROVED_FOR_MARKETING": "#663399",
    "WITHHELD": "#e83e8c",
    "UNKNOWN": "#6c757d",
}

OVERALL_STATUSES: tuple[str, ...] = tuple(STATUS_COLORS)

PRODUCT_TYPE_COLORS: dict[str, str] = {
    "HUMAN PRESCRIPTION DRUG": "#007bff",
    "HUMAN OTC DRUG": "#28a745",
}

# -- Similarity graph -------------------------------------------------------
SIMILARITY_MIN: float = 0.0
SIMILARITY_MAX: float = 1.0
SIMILARITY_STEP: float = 0.01
DEFAULT_SIMILARITY_THRESHOLD: float = 0.7

# -- Summarizer -------------------------------------------------------------
SUMMARY_RECORD_COUNT: int = 10
SUMMARY_CHAR_BUDGET: dict[str, int] = {
    STUDIES: 500_000,
    DRUG_LABELING: 300_000,
}
