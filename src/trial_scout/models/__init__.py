"""Data models for trial-scout."""

from trial_scout.models.model_clinical_trials import StudyCard
from trial_scout.models.model_fda import DrugLabelCard
from trial_scout.models.model_search import PipelineEvent, SearchResult, SimilarityGraph

__all__ = ["StudyCard", "DrugLabelCard", "PipelineEvent", "SearchResult", "SimilarityGraph"]
