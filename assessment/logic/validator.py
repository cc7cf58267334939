"""
Result Validator

Deterministic range and catalog checks on a completed assessment round trip.
Results are advisory: callers attach them as warnings and never block on them.
"""

from numbers import Real
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .constants import (
    LIKERT_MAX,
    LIKERT_MIN,
    MAJOR_CATALOG,
    MAX_RECOMMENDATIONS,
    MIN_RECOMMENDATIONS,
    SCORE_MAX,
    SCORE_MIN,
    VALIDATION_CONFIDENCE,
)
from .contracts import CategoryScores, ValidationResult


def _in_range(value: Any, low: float, high: float) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return low <= value <= high


def validate_assessment(
    responses: Mapping[Any, Any],
    scores: CategoryScores,
    recommended_majors: Sequence[str],
    catalog: Iterable[str] = MAJOR_CATALOG,
) -> ValidationResult:
    """
    Check raw responses, normalized scores and recommended majors.

    Args:
        responses: raw question id -> Likert value mapping
        scores: normalized category scores
        recommended_majors: major names in recommendation order
        catalog: closed set of valid major names

    Returns:
        ValidationResult; is_valid is True only when no issue was found.
    """
    issues: List[str] = []
    suggestions: List[str] = []
    catalog_set = set(catalog)

    # (a) raw responses on the Likert scale
    bad_responses = [
        str(key) for key, value in responses.items()
        if not _in_range(value, LIKERT_MIN, LIKERT_MAX)
    ]
    if bad_responses:
        issues.append(
            f"Responses outside the {LIKERT_MIN}-{LIKERT_MAX} range for questions: {', '.join(bad_responses)}"
        )
        suggestions.append("Retake the assessment and answer every question on the 1-5 scale.")

    # (b) normalized scores
    bad_scores = [
        category for category, value in scores.as_dict().items()
        if not _in_range(value, SCORE_MIN, SCORE_MAX)
    ]
    if bad_scores:
        issues.append(
            f"RIASEC scores outside the {SCORE_MIN}-{SCORE_MAX} range: {', '.join(bad_scores)}"
        )
        suggestions.append("Treat the affected category scores with caution.")

    # (c) catalog membership
    unknown_majors = [major for major in recommended_majors if major not in catalog_set]
    if unknown_majors:
        issues.append(f"Recommended majors not in the catalog: {', '.join(unknown_majors)}")
        suggestions.append("Only consider majors offered in the catalog; ask an advisor about the others.")

    # (d) recommendation count
    count = len(recommended_majors)
    if count < MIN_RECOMMENDATIONS or count > MAX_RECOMMENDATIONS:
        issues.append(
            f"Expected {MIN_RECOMMENDATIONS}-{MAX_RECOMMENDATIONS} recommendations, got {count}"
        )
        suggestions.append("Submit the assessment again to get a complete recommendation.")

    # (e) uniqueness
    duplicates = sorted({major for major in recommended_majors if recommended_majors.count(major) > 1})
    if duplicates:
        issues.append(f"Majors recommended more than once: {', '.join(duplicates)}")
        suggestions.append("Submit the assessment again to get distinct recommendations.")

    return ValidationResult(
        is_valid=not issues,
        issues=issues,
        suggestions=suggestions,
        confidence=VALIDATION_CONFIDENCE,
    )


def validate_satisfaction_survey(
    overall_satisfaction: Any,
    recommendation_accuracy: Any,
    system_usability: Any,
    selected_major: Optional[str] = None,
    major_satisfaction: Any = None,
    catalog: Iterable[str] = MAJOR_CATALOG,
) -> ValidationResult:
    """Range checks for a satisfaction survey. Advisory, like validate_assessment."""
    issues: List[str] = []
    suggestions: List[str] = []

    ratings = {
        "overall satisfaction": overall_satisfaction,
        "recommendation accuracy": recommendation_accuracy,
        "system usability": system_usability,
    }
    if major_satisfaction is not None:
        ratings["major satisfaction"] = major_satisfaction

    for label, value in ratings.items():
        if not _in_range(value, LIKERT_MIN, LIKERT_MAX):
            issues.append(f"The {label} rating is outside the {LIKERT_MIN}-{LIKERT_MAX} range")

    if selected_major and selected_major not in set(catalog):
        issues.append(f"Selected major is not in the catalog: {selected_major}")
        suggestions.append("Pick the selected major from the catalog list.")

    return ValidationResult(
        is_valid=not issues,
        issues=issues,
        suggestions=suggestions,
        confidence=VALIDATION_CONFIDENCE,
    )
