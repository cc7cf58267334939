"""
Assessment API Routes

RIASEC assessment submission and history, satisfaction surveys, major
bookmarks and the similar-case endpoints. Every route requires a bearer token.
"""

import logging
from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from db import get_session
from models.models import BookmarkCreate, CaseStudyIn, SimilarCasesRequest, SurveyCreate
from models.schemas_user import UserOut
from utils.auth_utils import auth_user
from utils import crud_assessment as crud
from .logic.constants import ANSWER_OPTIONS, MAJOR_CATALOG, MAJOR_PROFILES, QUESTIONS
from .logic.contracts import AssessmentOutcome, CaseStudy, CategoryScores
from .logic.errors import ExternalServiceError, InputShapeError
from .logic.runner import run_assessment, run_recommendation
from .logic.validator import validate_satisfaction_survey
from .ai.recommender import MajorRecommender, recommender
from .ai.similar_cases import SimilarCaseRetriever, case_retriever, new_case_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["assessment"])

GENERIC_ERROR = "Something went wrong while processing your request. Please try again."


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_recommender() -> MajorRecommender:
    return recommender


def get_case_retriever() -> SimilarCaseRetriever:
    return case_retriever


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


def _owned_assessment(db: Session, assessment_id: str, user_id: str):
    assessment = crud.get_assessment(db, assessment_id)
    if not assessment:
        raise HTTPException(status_code=404, detail="Assessment not found")
    if assessment.user_id != user_id:
        raise HTTPException(status_code=403, detail="Not authorized")
    return assessment


def _pipeline_response(db: Session, run, user_id: str, label: str):
    """Map a runner call to the HTTP response shared by both recommendation routes."""
    try:
        outcome: AssessmentOutcome = run()
        return outcome.to_response()
    except InputShapeError as e:
        return _error(400, str(e))
    except ExternalServiceError as e:
        logger.error(f"Recommendation failed for user {user_id}: {e}")
        return _error(500, GENERIC_ERROR)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error in {label}: {e}")
        db.rollback()
        return _error(500, GENERIC_ERROR)


# =============================================================================
# REFERENCE DATA
# =============================================================================

@router.get("/questions", summary="RIASEC questions and answer options")
def list_questions(current: UserOut = Depends(auth_user)):
    return {"questions": QUESTIONS, "answer_options": ANSWER_OPTIONS}


@router.get("/majors", summary="Major catalog")
def list_majors(current: UserOut = Depends(auth_user)):
    return {"majors": MAJOR_PROFILES}


# =============================================================================
# ASSESSMENTS
# =============================================================================

@router.post("/analyze-riasec", summary="Score an assessment and recommend majors")
def analyze_riasec(
    payload: Dict[str, Any] = Body(...),
    current: UserOut = Depends(auth_user),
    db: Session = Depends(get_session),
    major_recommender: MajorRecommender = Depends(get_recommender),
    retriever: SimilarCaseRetriever = Depends(get_case_retriever),
):
    """
    **Request Body:**
    - `responses`: object of question id -> Likert answer (1-5)

    **Response:**
    - Normalized scores, top 3 majors, overall explanation, similar-case
      feedback and, when the round trip looked off, `validation_warnings`
    """
    return _pipeline_response(
        db,
        lambda: run_assessment(db, current.id, payload.get("responses"), major_recommender, retriever),
        current.id,
        "analyze-riasec",
    )


@router.post("/recommend-majors", summary="Recommend majors for given RIASEC scores")
def recommend_majors(
    payload: Dict[str, Any] = Body(...),
    current: UserOut = Depends(auth_user),
    db: Session = Depends(get_session),
    major_recommender: MajorRecommender = Depends(get_recommender),
    retriever: SimilarCaseRetriever = Depends(get_case_retriever),
):
    """
    **Request Body:**
    - `riasec_scores`: object of category -> 0-100 score

    **Response:**
    - Same shape as /analyze-riasec; the stored assessment has no raw responses
    """
    return _pipeline_response(
        db,
        lambda: run_recommendation(db, current.id, payload.get("riasec_scores"), major_recommender, retriever),
        current.id,
        "recommend-majors",
    )


@router.get("/assessments", summary="Current user's assessments, newest first")
def list_assessments(current: UserOut = Depends(auth_user), db: Session = Depends(get_session)):
    return [a.to_dict() for a in crud.list_assessments_by_user(db, current.id)]


@router.get("/assessments/{assessment_id}", summary="Single assessment")
def get_assessment(assessment_id: str, current: UserOut = Depends(auth_user), db: Session = Depends(get_session)):
    return _owned_assessment(db, assessment_id, current.id).to_dict()


# =============================================================================
# SATISFACTION SURVEYS
# =============================================================================

@router.post("/satisfaction-surveys", status_code=201, summary="Submit a satisfaction survey")
def create_satisfaction_survey(
    payload: SurveyCreate,
    current: UserOut = Depends(auth_user),
    db: Session = Depends(get_session),
    retriever: SimilarCaseRetriever = Depends(get_case_retriever),
):
    try:
        assessment = _owned_assessment(db, payload.assessment_id, current.id)

        validation = validate_satisfaction_survey(
            payload.overall_satisfaction,
            payload.recommendation_accuracy,
            payload.system_usability,
            selected_major=payload.selected_major,
            major_satisfaction=payload.major_satisfaction,
        )
        if not validation.is_valid:
            logger.warning(f"Survey validation issues for user {current.id}: {validation.issues}")

        survey = crud.create_survey(db, user_id=current.id, data=payload.model_dump())
        response: Dict[str, Any] = {"survey": survey.to_dict()}
        if not validation.is_valid:
            response["validation_warnings"] = validation.issues

        # best effort: a chosen major becomes a new reference case
        if payload.selected_major:
            retriever.store_case(CaseStudy(
                id=f"survey-{survey.id}",
                scores=CategoryScores(**assessment.riasec_scores),
                selected_major=payload.selected_major,
                satisfaction_rating=payload.major_satisfaction or payload.overall_satisfaction,
                narrative=payload.feedback or "",
            ))
        return response
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to save satisfaction survey: {e}")
        db.rollback()
        return _error(500, GENERIC_ERROR)


@router.get("/satisfaction-surveys", summary="Current user's surveys")
def list_satisfaction_surveys(current: UserOut = Depends(auth_user), db: Session = Depends(get_session)):
    return [s.to_dict() for s in crud.list_surveys_by_user(db, current.id)]


@router.get("/satisfaction-surveys/assessment/{assessment_id}", summary="Survey for an assessment")
def get_survey_for_assessment(assessment_id: str, current: UserOut = Depends(auth_user), db: Session = Depends(get_session)):
    survey = crud.get_survey_by_assessment(db, assessment_id)
    if not survey:
        raise HTTPException(status_code=404, detail="Survey not found")
    if survey.user_id != current.id:
        raise HTTPException(status_code=403, detail="Not authorized")
    return survey.to_dict()


# =============================================================================
# BOOKMARKS
# =============================================================================

@router.post("/bookmarks", status_code=201, summary="Bookmark a major")
def create_bookmark(payload: BookmarkCreate, current: UserOut = Depends(auth_user), db: Session = Depends(get_session)):
    if payload.major_name not in MAJOR_CATALOG:
        raise HTTPException(status_code=400, detail=f"Unknown major: {payload.major_name}")
    bookmark = crud.create_bookmark(db, user_id=current.id, major_name=payload.major_name, notes=payload.notes)
    return bookmark.to_dict()


@router.get("/bookmarks", summary="Current user's bookmarks")
def list_bookmarks(current: UserOut = Depends(auth_user), db: Session = Depends(get_session)):
    return [b.to_dict() for b in crud.list_bookmarks_by_user(db, current.id)]


@router.delete("/bookmarks/{bookmark_id}", summary="Remove a bookmark")
def delete_bookmark(bookmark_id: str, current: UserOut = Depends(auth_user), db: Session = Depends(get_session)):
    bookmark = crud.get_bookmark(db, bookmark_id)
    if not bookmark:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    if bookmark.user_id != current.id:
        raise HTTPException(status_code=403, detail="Not authorized")
    crud.delete_bookmark(db, bookmark)
    return {"status": "deleted", "id": bookmark_id}




# =============================================================================
# SIMILAR CASES
# =============================================================================

@router.post("/similar-cases", summary="Nearest reference cases for a profile")
def similar_cases(
    payload: SimilarCasesRequest,
    current: UserOut = Depends(auth_user),
    retriever: SimilarCaseRetriever = Depends(get_case_retriever),
):
    cases = retriever.find_similar(payload.scores, k=payload.top_k)
    return {"similar_cases": [case.model_dump() for case in cases]}


@router.post("/store-case-study", status_code=201, summary="Contribute a case study")
def store_case_study(
    payload: CaseStudyIn,
    current: UserOut = Depends(auth_user),
    retriever: SimilarCaseRetriever = Depends(get_case_retriever),
):
    case = CaseStudy(
        id=new_case_id(),
        scores=payload.scores,
        selected_major=payload.selected_major,
        satisfaction_rating=payload.satisfaction_rating,
        narrative=payload.narrative or "",
        graduation_year=payload.graduation_year,
        career_path=payload.career_path,
    )
    if not retriever.store_case(case):
        return _error(503, "Case study could not be stored right now")
    return {"status": "stored", "case_id": case.id}
