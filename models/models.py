import uuid
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, constr
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from db import Base
from assessment.logic.contracts import CategoryScores


def _new_id() -> str:
    return str(uuid.uuid4())


class Assessment(Base):
    __tablename__ = "assessments"
    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    responses = Column(JSON, nullable=False)
    riasec_scores = Column(JSON, nullable=False)
    recommended_majors = Column(JSON, nullable=False)
    recommendations = Column(JSON, nullable=False, default=list)
    explanation = Column(Text, nullable=False)
    similar_cases_feedback = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "responses": self.responses,
            "scores": self.riasec_scores,
            "recommended_majors": self.recommended_majors,
            "recommendations": self.recommendations,
            "explanation": self.explanation,
            "similar_cases_feedback": self.similar_cases_feedback,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class SatisfactionSurvey(Base):
    __tablename__ = "satisfaction_surveys"
    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    assessment_id = Column(String(36), ForeignKey("assessments.id"), index=True, nullable=False)
    overall_satisfaction = Column(Integer, nullable=False)
    recommendation_accuracy = Column(Integer, nullable=False)
    system_usability = Column(Integer, nullable=False)
    would_recommend = Column(Boolean, nullable=False)
    feedback = Column(Text, nullable=True)
    selected_major = Column(String(128), nullable=True)
    major_satisfaction = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "assessment_id": self.assessment_id,
            "overall_satisfaction": self.overall_satisfaction,
            "recommendation_accuracy": self.recommendation_accuracy,
            "system_usability": self.system_usability,
            "would_recommend": self.would_recommend,
            "feedback": self.feedback,
            "selected_major": self.selected_major,
            "major_satisfaction": self.major_satisfaction,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class BookmarkedMajor(Base):
    __tablename__ = "bookmarked_majors"
    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    major_name = Column(String(128), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "major_name": self.major_name,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class ChatSession(Base):
    __tablename__ = "chat_sessions"
    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    messages = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ChatProfile(Base):
    """Per-user counseling state when the assistant runs with the database store."""
    __tablename__ = "chat_profiles"
    user_id = Column(String(36), primary_key=True)
    profile = Column(JSON, nullable=False, default=dict)
    message_count = Column(Integer, nullable=False, default=0)
    window_reset_at = Column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=False), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class SurveyCreate(BaseModel):
    assessment_id: str
    overall_satisfaction: int = Field(..., ge=1, le=5)
    recommendation_accuracy: int = Field(..., ge=1, le=5)
    system_usability: int = Field(..., ge=1, le=5)
    would_recommend: bool
    feedback: Optional[str] = None
    selected_major: Optional[str] = None
    major_satisfaction: Optional[int] = Field(default=None, ge=1, le=5)


class BookmarkCreate(BaseModel):
    major_name: constr(min_length=1)
    notes: Optional[str] = None


class SimilarCasesRequest(BaseModel):
    scores: CategoryScores
    top_k: int = Field(default=5, ge=1, le=20)


class CaseStudyIn(BaseModel):
    scores: CategoryScores
    selected_major: constr(min_length=1)
    satisfaction_rating: int = Field(..., ge=1, le=5)
    narrative: Optional[str] = None
    graduation_year: Optional[int] = None
    career_path: Optional[str] = None
