"""
Assessment Logic Module

Deterministic scoring and validation for the RIASEC assessment, plus the
data contracts shared with the generation layer.
"""

from .contracts import (
    CategoryScores,
    MajorRecommendation,
    RecommendationResult,
    ValidationResult,
    CaseStudy,
    AssessmentOutcome,
)
from .errors import (
    AdvisorError,
    InputShapeError,
    ExternalServiceError,
    MalformedResponseError,
    NotFoundError,
    AuthorizationError,
)
from .scoring import normalize_scores, round_half_up
from .validator import validate_assessment, validate_satisfaction_survey
from .constants import MAJOR_CATALOG, QUESTIONS, QUESTION_CATEGORY_MAP

__all__ = [
    # Scoring & validation
    "normalize_scores",
    "round_half_up",
    "validate_assessment",
    "validate_satisfaction_survey",

    # Contracts
    "CategoryScores",
    "MajorRecommendation",
    "RecommendationResult",
    "ValidationResult",
    "CaseStudy",
    "AssessmentOutcome",

    # Errors
    "AdvisorError",
    "InputShapeError",
    "ExternalServiceError",
    "MalformedResponseError",
    "NotFoundError",
    "AuthorizationError",

    # Reference data
    "MAJOR_CATALOG",
    "QUESTIONS",
    "QUESTION_CATEGORY_MAP",
]
