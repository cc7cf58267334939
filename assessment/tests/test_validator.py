"""
Deterministic validator tests.
"""

from assessment.logic import CategoryScores, validate_assessment, validate_satisfaction_survey

GOOD_RESPONSES = {qid: 3 for qid in range(1, 19)}
GOOD_SCORES = CategoryScores(realistic=60, investigative=60, artistic=60, social=60, enterprising=60, conventional=60)
GOOD_MAJORS = ["Computer Engineering", "Software Engineering", "Architecture"]


def test_valid_round_trip():
    result = validate_assessment(GOOD_RESPONSES, GOOD_SCORES, GOOD_MAJORS)
    assert result.is_valid
    assert result.issues == []
    assert result.confidence == 0.95


def test_out_of_range_score_is_reported_not_raised():
    scores = GOOD_SCORES.model_copy(update={"realistic": 150})
    result = validate_assessment(GOOD_RESPONSES, scores, GOOD_MAJORS)
    assert result.is_valid is False
    assert result.issues
    assert any("realistic" in issue for issue in result.issues)


def test_out_of_range_and_non_numeric_responses():
    responses = dict(GOOD_RESPONSES)
    responses[1] = 0
    responses[2] = "x"
    result = validate_assessment(responses, GOOD_SCORES, GOOD_MAJORS)
    assert not result.is_valid
    assert "1" in result.issues[0] and "2" in result.issues[0]


def test_major_outside_catalog():
    result = validate_assessment(GOOD_RESPONSES, GOOD_SCORES, ["Computer Engineering", "Astrology"])
    assert not result.is_valid
    assert any("Astrology" in issue for issue in result.issues)


def test_recommendation_count_bounds():
    assert not validate_assessment(GOOD_RESPONSES, GOOD_SCORES, []).is_valid
    four = GOOD_MAJORS + ["Urban Planning"]
    assert not validate_assessment(GOOD_RESPONSES, GOOD_SCORES, four).is_valid


def test_duplicate_major():
    result = validate_assessment(GOOD_RESPONSES, GOOD_SCORES, ["Architecture", "Architecture"])
    assert not result.is_valid
    assert any("more than once" in issue for issue in result.issues)


def test_every_issue_has_a_suggestion():
    scores = GOOD_SCORES.model_copy(update={"social": -5})
    result = validate_assessment({1: 9}, scores, ["Nope", "Nope", "Nope", "Nope"])
    assert len(result.issues) == 5
    assert len(result.suggestions) == len(result.issues)


def test_survey_validation():
    assert validate_satisfaction_survey(5, 4, 3).is_valid
    assert validate_satisfaction_survey(5, 4, 3, selected_major="Architecture", major_satisfaction=5).is_valid

    result = validate_satisfaction_survey(6, 4, 0, selected_major="Astrology")
    assert not result.is_valid
    assert len(result.issues) == 3
