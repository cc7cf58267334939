"""
Data Contracts for the RIASEC Assessment Pipeline

Pydantic models for normalized scores (input to the recommender), the
recommender's structured output, validation results and similar cases.
"""

from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from .constants import RIASEC_CATEGORIES


# =============================================================================
# SCORES
# =============================================================================

class CategoryScores(BaseModel):
    """
    Normalized 0-100 score per RIASEC category.

    No range constraints here: out-of-range responses must still produce a
    score object so the validator can report them.
    """
    realistic: int = 0
    investigative: int = 0
    artistic: int = 0
    social: int = 0
    enterprising: int = 0
    conventional: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {category: getattr(self, category) for category in RIASEC_CATEGORIES}

    def top_categories(self, top_k: int = 2) -> List[Tuple[str, int]]:
        """Strongest categories, highest first. Ties keep RIASEC order."""
        ranked = sorted(self.as_dict().items(), key=lambda item: item[1], reverse=True)
        return ranked[:top_k]


# =============================================================================
# RECOMMENDER OUTPUT
# =============================================================================

class MajorRecommendation(BaseModel):
    """Single major suggested by the generator."""
    model_config = ConfigDict(populate_by_name=True)

    major: StrictStr
    match_rate: StrictInt = Field(..., alias="matchRate", ge=0, le=100)
    reason: StrictStr

    def to_dict(self) -> Dict[str, object]:
        return {"major": self.major, "match_rate": self.match_rate, "reason": self.reason}


class RecommendationResult(BaseModel):
    """
    Schema of the generator's JSON payload.

    Every field is required and strictly typed; a payload that does not match
    (a quoted "85" or 85.0 for matchRate included) is rejected as malformed
    rather than coerced or filled with defaults.
    """
    recommendations: List[MajorRecommendation]
    explanation: StrictStr

    def ranked(self) -> "RecommendationResult":
        # sorted() is stable, so ties keep the generator's order
        ordered = sorted(self.recommendations, key=lambda rec: rec.match_rate, reverse=True)
        return RecommendationResult(recommendations=ordered, explanation=self.explanation)

    @property
    def majors(self) -> List[str]:
        return [rec.major for rec in self.recommendations]


# =============================================================================
# VALIDATION
# =============================================================================

class ValidationResult(BaseModel):
    is_valid: bool
    issues: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)


# =============================================================================
# SIMILAR CASES
# =============================================================================

class CaseStudy(BaseModel):
    """Prior student outcome stored in the similarity index (scores on the 0-100 scale)."""
    id: str
    scores: CategoryScores
    selected_major: str
    satisfaction_rating: int = Field(..., ge=1, le=5)
    narrative: str = ""
    graduation_year: Optional[int] = None
    career_path: Optional[str] = None
    similarity: Optional[float] = None


# =============================================================================
# PIPELINE OUTPUT
# =============================================================================

class AssessmentOutcome(BaseModel):
    """What a completed submission returns to the HTTP layer."""
    assessment_id: str
    scores: CategoryScores
    recommendations: List[MajorRecommendation]
    explanation: str
    similar_cases_feedback: Optional[str] = None
    validation_warnings: List[str] = Field(default_factory=list)

    def to_response(self) -> Dict[str, object]:
        response: Dict[str, object] = {
            "assessment_id": self.assessment_id,
            "scores": self.scores.as_dict(),
            "recommendations": [rec.to_dict() for rec in self.recommendations],
            "explanation": self.explanation,
            "similar_cases_feedback": self.similar_cases_feedback,
        }
        if self.validation_warnings:
            response["validation_warnings"] = self.validation_warnings
        return response
