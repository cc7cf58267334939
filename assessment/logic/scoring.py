"""
Score Normalizer

Turns raw Likert responses into six independent 0-100 RIASEC scores:

    score = round_half_up(raw_sum / (questions_in_category * LIKERT_MAX) * 100)

`questions_in_category` comes from the question table, not from the
responses, so a partially answered category is scored against its full
maximum. Range checking belongs to the validator; values are summed as given.
"""

import math
from collections import Counter
from numbers import Real
from typing import Any, Dict, Mapping, Optional

from .constants import LIKERT_MAX, QUESTION_CATEGORY_MAP, RIASEC_CATEGORIES
from .contracts import CategoryScores


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (built-in round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def _question_id(key: Any) -> Optional[int]:
    """Question ids arrive as JSON object keys, so accept ints and numeric strings."""
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, str):
        try:
            return int(key.strip())
        except ValueError:
            return None
    return None


def _is_number(value: Any) -> bool:
    # NaN and Infinity are valid JSON for the request parser but cannot be scored
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def sum_by_category(
    responses: Mapping[Any, Any],
    category_table: Mapping[int, str] = QUESTION_CATEGORY_MAP,
) -> Dict[str, Dict[str, float]]:
    """
    Sum raw values per category.

    Returns:
        {category: {"sum": float, "answered": int}}. Unknown question ids and
        non-numeric or non-finite values are skipped.
    """
    totals: Dict[str, Dict[str, float]] = {
        category: {"sum": 0, "answered": 0} for category in RIASEC_CATEGORIES
    }

    for key, value in responses.items():
        question_id = _question_id(key)
        category = category_table.get(question_id) if question_id is not None else None
        if category is None or category not in totals or not _is_number(value):
            continue
        totals[category]["sum"] += value
        totals[category]["answered"] += 1

    return totals


def normalize_scores(
    responses: Mapping[Any, Any],
    category_table: Mapping[int, str] = QUESTION_CATEGORY_MAP,
    likert_max: int = LIKERT_MAX,
) -> CategoryScores:
    """
    Normalize raw responses to a CategoryScores object.

    Args:
        responses: question id -> Likert value
        category_table: question id -> category name
        likert_max: top of the Likert scale

    Returns:
        CategoryScores. A category with no answered question, or with no
        question in the table, scores 0.
    """
    questions_per_category = Counter(category_table.values())
    totals = sum_by_category(responses, category_table)

    scores: Dict[str, int] = {}
    for category in RIASEC_CATEGORIES:
        question_count = questions_per_category.get(category, 0)
        if question_count == 0 or totals[category]["answered"] == 0:
            scores[category] = 0
            continue
        max_total = question_count * likert_max
        percent = totals[category]["sum"] / max_total * 100
        # a sum of huge finite values can still overflow
        scores[category] = round_half_up(percent) if math.isfinite(percent) else 0

    return CategoryScores(**scores)
