"""trial-scout: LLM-built searches over ClinicalTrials.gov and openFDA drug labels."""

__version__ = "0.1.0"
