import math
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select
from models.models import Assessment, SatisfactionSurvey, BookmarkedMajor, ChatSession
from assessment.logic.contracts import CategoryScores, MajorRecommendation


# =============================================================================
# ASSESSMENTS
# =============================================================================

def _json_safe(value: Any) -> Any:
    # NaN and Infinity are not valid in a JSON column or a JSON response
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def create_assessment(
    db: Session,
    *,
    user_id: str,
    responses: Mapping[Any, Any],
    scores: CategoryScores,
    recommendations: List[MajorRecommendation],
    explanation: str,
    similar_cases_feedback: Optional[str] = None,
) -> Assessment:
    """Insert one assessment row. The caller's session commits it."""
    assessment = Assessment(
        user_id=user_id,
        # JSON object keys are always strings once stored
        responses={str(key): _json_safe(value) for key, value in responses.items()},
        riasec_scores=scores.as_dict(),
        recommended_majors=[rec.major for rec in recommendations],
        recommendations=[rec.to_dict() for rec in recommendations],
        explanation=explanation,
        similar_cases_feedback=similar_cases_feedback,
    )
    db.add(assessment)
    db.flush()
    return assessment

def get_assessment(db: Session, assessment_id: str) -> Assessment | None:
    return db.get(Assessment, assessment_id)

def list_assessments_by_user(db: Session, user_id: str) -> List[Assessment]:
    stmt = (
        select(Assessment)
        .where(Assessment.user_id == user_id)
        .order_by(Assessment.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())

def get_latest_assessment(db: Session, user_id: str) -> Assessment | None:
    stmt = (
        select(Assessment)
        .where(Assessment.user_id == user_id)
        .order_by(Assessment.created_at.desc())
        .limit(1)
    )
    return db.execute(stmt).scalar_one_or_none()


# =============================================================================
# SATISFACTION SURVEYS
# =============================================================================

def create_survey(db: Session, *, user_id: str, data: Dict[str, Any]) -> SatisfactionSurvey:
    survey = SatisfactionSurvey(user_id=user_id, **data)
    db.add(survey)
    db.flush()
    return survey

def list_surveys_by_user(db: Session, user_id: str) -> List[SatisfactionSurvey]:
    stmt = (
        select(SatisfactionSurvey)
        .where(SatisfactionSurvey.user_id == user_id)
        .order_by(SatisfactionSurvey.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())

def get_survey_by_assessment(db: Session, assessment_id: str) -> SatisfactionSurvey | None:
    stmt = (
        select(SatisfactionSurvey)
        .where(SatisfactionSurvey.assessment_id == assessment_id)
        .order_by(SatisfactionSurvey.created_at.desc())
        .limit(1)
    )
    return db.execute(stmt).scalar_one_or_none()


# =============================================================================
# BOOKMARKS
# =============================================================================

def create_bookmark(db: Session, *, user_id: str, major_name: str, notes: Optional[str] = None) -> BookmarkedMajor:
    bookmark = BookmarkedMajor(user_id=user_id, major_name=major_name, notes=notes)
    db.add(bookmark)
    db.flush()
    return bookmark

def list_bookmarks_by_user(db: Session, user_id: str) -> List[BookmarkedMajor]:
    stmt = (
        select(BookmarkedMajor)
        .where(BookmarkedMajor.user_id == user_id)
        .order_by(BookmarkedMajor.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())

def get_bookmark(db: Session, bookmark_id: str) -> BookmarkedMajor | None:
    return db.get(BookmarkedMajor, bookmark_id)

def delete_bookmark(db: Session, bookmark: BookmarkedMajor) -> None:
    db.delete(bookmark)
    db.flush()


# =============================================================================
# CHAT SESSIONS
# =============================================================================

def get_chat_session(db: Session, session_id: str) -> ChatSession | None:
    return db.get(ChatSession, session_id)

def create_chat_session(db: Session, *, user_id: str) -> ChatSession:
    chat_session = ChatSession(user_id=user_id, messages=[])
    db.add(chat_session)
    db.flush()
    return chat_session

def append_chat_messages(db: Session, chat_session: ChatSession, messages: List[Dict[str, str]]) -> ChatSession:
    """Append {role, content} entries with a timestamp each."""
    now = datetime.utcnow().isoformat()
    stamped = [{"role": m["role"], "content": m["content"], "timestamp": now} for m in messages]
    # reassign so the JSON column is flagged dirty
    chat_session.messages = list(chat_session.messages or []) + stamped
    chat_session.updated_at = datetime.utcnow()
    db.flush()
    return chat_session
