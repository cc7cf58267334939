"""
Assessment Runner

Orchestrates one submission:
1. Normalizes raw responses to category scores
2. Builds the major-match prompt and calls the recommender (one strict retry on a malformed answer)
3. Validates the round trip (advisory)
4. Adds the similar-case narrative (best effort)
5. Persists the assessment

Scoring, prompt text and validation rules live in their own modules; this is
orchestration only.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from utils.crud_assessment import create_assessment
from .constants import MAJOR_CATALOG
from .contracts import AssessmentOutcome, CategoryScores, RecommendationResult
from .errors import InputShapeError, MalformedResponseError
from .scoring import normalize_scores
from .validator import validate_assessment
from ..ai.prompt_builder import build_major_prompt
from ..ai.recommender import MajorRecommender
from ..ai.similar_cases import FALLBACK_ERROR, SimilarCaseRetriever

logger = logging.getLogger(__name__)


def request_recommendations(recommender: MajorRecommender, scores: CategoryScores) -> RecommendationResult:
    """
    Ask for recommendations, retrying once with the strict prompt if the
    first answer does not parse. A second malformed answer propagates.
    """
    try:
        return recommender.recommend(build_major_prompt(scores, MAJOR_CATALOG))
    except MalformedResponseError as e:
        logger.warning(f"Malformed recommendation response, retrying with strict prompt: {e}")
        return recommender.recommend(build_major_prompt(scores, MAJOR_CATALOG, strict=True))


def run_assessment(
    db: Session,
    user_id: str,
    responses: Any,
    recommender: MajorRecommender,
    retriever: SimilarCaseRetriever,
) -> AssessmentOutcome:
    """
    Run the full pipeline for one submission.

    Args:
        db: open session; the caller commits
        user_id: owner of the new assessment
        responses: question id -> Likert value
        recommender: major recommender
        retriever: similar-case retriever used for the narrative

    Returns:
        AssessmentOutcome for the HTTP layer

    Raises:
        InputShapeError: responses is not a mapping
        ExternalServiceError: recommendation failed (nothing is persisted)
    """
    if not isinstance(responses, Mapping):
        raise InputShapeError("responses must be an object of question id -> answer")

    return _recommend_and_store(db, user_id, responses, normalize_scores(responses), recommender, retriever)


def run_recommendation(
    db: Session,
    user_id: str,
    scores: Any,
    recommender: MajorRecommender,
    retriever: SimilarCaseRetriever,
) -> AssessmentOutcome:
    """
    Re-run major matching for already normalized scores. The stored
    assessment has no raw responses.

    Raises:
        InputShapeError: scores is not an object of category -> integer score
        ExternalServiceError: recommendation failed (nothing is persisted)
    """
    if not isinstance(scores, Mapping):
        raise InputShapeError("riasec_scores must be an object of category -> score")
    try:
        category_scores = CategoryScores.model_validate(dict(scores))
    except ValidationError as e:
        raise InputShapeError(f"riasec_scores is not a valid score object: {e.error_count()} errors") from e

    return _recommend_and_store(db, user_id, {}, category_scores, recommender, retriever)


def _recommend_and_store(
    db: Session,
    user_id: str,
    responses: Mapping[Any, Any],
    scores: CategoryScores,
    recommender: MajorRecommender,
    retriever: SimilarCaseRetriever,
) -> AssessmentOutcome:
    result = request_recommendations(recommender, scores)

    validation = validate_assessment(responses, scores, result.majors)
    if not validation.is_valid:
        for issue in validation.issues:
            logger.warning(f"Assessment validation issue for user {user_id}: {issue}")

    try:
        feedback = retriever.narrate(scores, result.majors)
    except Exception as e:
        logger.error(f"Similar-case narrative failed: {e}")
        feedback = FALLBACK_ERROR

    assessment = create_assessment(
        db,
        user_id=user_id,
        responses=responses,
        scores=scores,
        recommendations=result.recommendations,
        explanation=result.explanation,
        similar_cases_feedback=feedback,
    )
    logger.info(f"Assessment {assessment.id} stored for user {user_id}: {', '.join(result.majors)}")

    return AssessmentOutcome(
        assessment_id=assessment.id,
        scores=scores,
        recommendations=result.recommendations,
        explanation=result.explanation,
        similar_cases_feedback=feedback,
        validation_warnings=[] if validation.is_valid else validation.issues,
    )
