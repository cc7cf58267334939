"""
Prompt building, response parsing and the submission runner.
"""

import pytest

from conftest import FakeLLM, FakeCollection, VALID_RECOMMENDATION
from db import get_db, init_db
from assessment.logic import (
    CategoryScores,
    ExternalServiceError,
    InputShapeError,
    MAJOR_CATALOG,
    MalformedResponseError,
    normalize_scores,
)
from assessment.logic.runner import run_assessment
from assessment.ai.prompt_builder import build_major_prompt, build_system_prompt
from assessment.ai.recommender import MajorRecommender
from assessment.ai.similar_cases import FALLBACK_NOT_CONFIGURED, SimilarCaseRetriever
from models.models import Assessment
from models.models_user import User


@pytest.fixture(scope="module")
def user_id():
    init_db()
    with get_db() as db:
        user = User(student_id="202300001", username="runner_user", password_hash="x")
        db.add(user)
        db.flush()
        return user.id


def test_major_prompt_embeds_compact_scores_and_catalog():
    scores = normalize_scores({qid: 3 for qid in range(1, 19)})
    prompt = build_major_prompt(scores, MAJOR_CATALOG)
    assert '"realistic":60' in prompt
    for major in MAJOR_CATALOG:
        assert f"- {major}" in prompt
    assert "matchRate" in prompt


def test_strict_prompt_adds_reminder():
    scores = CategoryScores()
    assert len(build_major_prompt(scores, MAJOR_CATALOG, strict=True)) > len(build_major_prompt(scores, MAJOR_CATALOG))


def test_system_prompt_lists_rules():
    assert "RULES" in build_system_prompt()


def test_recommend_sorts_by_match_rate():
    llm = FakeLLM(json_responses=[VALID_RECOMMENDATION])
    result = MajorRecommender(llm).recommend("prompt")
    assert [rec.match_rate for rec in result.recommendations] == [90, 82, 75]
    assert result.majors[0] == "Computer Engineering"
    assert llm.calls[0]["temperature"] == 0.5
    assert llm.calls[0]["system"]


def test_recommend_keeps_generator_order_on_ties():
    payload = {
        "recommendations": [
            {"major": "Architecture", "matchRate": 80, "reason": "a"},
            {"major": "Urban Planning", "matchRate": 80, "reason": "b"},
        ],
        "explanation": "e",
    }
    result = MajorRecommender(FakeLLM(json_responses=[payload])).recommend("prompt")
    assert result.majors == ["Architecture", "Urban Planning"]


@pytest.mark.parametrize("payload", [
    {"explanation": "missing recommendations"},
    {"recommendations": []},
    {"recommendations": [{"major": "Architecture", "reason": "no rate"}], "explanation": "e"},
    {"recommendations": [{"major": "Architecture", "matchRate": 140, "reason": "r"}], "explanation": "e"},
    {"recommendations": [{"major": "Architecture", "matchRate": "high", "reason": "r"}], "explanation": "e"},
    {"recommendations": [{"major": "Architecture", "matchRate": "85", "reason": "r"}], "explanation": "e"},
    {"recommendations": [{"major": "Architecture", "matchRate": 85.0, "reason": "r"}], "explanation": "e"},
    {"recommendations": [{"major": "Architecture", "matchRate": True, "reason": "r"}], "explanation": "e"},
    {"recommendations": [{"major": 7, "matchRate": 85, "reason": "r"}], "explanation": "e"},
    {"recommendations": [{"major": "Architecture", "matchRate": 85, "reason": "r"}], "explanation": None},
])
def test_recommend_fails_closed_on_schema_violations(payload):
    with pytest.raises(MalformedResponseError):
        MajorRecommender(FakeLLM(json_responses=[payload])).recommend("prompt")


def test_end_to_end_all_threes(user_id):
    llm = FakeLLM(json_responses=[VALID_RECOMMENDATION])
    retriever = SimilarCaseRetriever(llm)
    responses = {qid: 3 for qid in range(1, 19)}

    with get_db() as db:
        outcome = run_assessment(db, user_id, responses, MajorRecommender(llm), retriever)

    assert set(outcome.scores.as_dict().values()) == {60}
    assert '"realistic":60' in llm.calls[0]["user"]
    assert all(rec.major in MAJOR_CATALOG for rec in outcome.recommendations)
    assert outcome.validation_warnings == []
    assert outcome.similar_cases_feedback == FALLBACK_NOT_CONFIGURED

    with get_db() as db:
        stored = db.get(Assessment, outcome.assessment_id)
        assert stored.riasec_scores["realistic"] == 60
        assert stored.recommended_majors[0] == "Computer Engineering"


def test_runner_retries_once_with_strict_prompt(user_id):
    llm = FakeLLM(json_responses=[MalformedResponseError("bad json"), VALID_RECOMMENDATION])
    with get_db() as db:
        outcome = run_assessment(db, user_id, {1: 5}, MajorRecommender(llm), SimilarCaseRetriever(llm))
    assert len(outcome.recommendations) == 3
    json_calls = [call for call in llm.calls if call["kind"] == "json"]
    assert len(json_calls) == 2
    assert "could not be parsed" in json_calls[1]["user"]


def test_runner_gives_up_after_second_malformed_answer(user_id):
    llm = FakeLLM(json_responses=[{"nope": 1}, {"nope": 2}])
    with pytest.raises(MalformedResponseError):
        with get_db() as db:
            run_assessment(db, user_id, {1: 5}, MajorRecommender(llm), SimilarCaseRetriever(llm))


def test_runner_propagates_service_failure_and_persists_nothing(user_id):
    llm = FakeLLM(error=ExternalServiceError("timeout"))
    with get_db() as db:
        before = db.query(Assessment).count()
    with pytest.raises(ExternalServiceError):
        with get_db() as db:
            run_assessment(db, user_id, {1: 5}, MajorRecommender(llm), SimilarCaseRetriever(llm))
    with get_db() as db:
        assert db.query(Assessment).count() == before


def test_runner_rejects_non_mapping_before_any_call(user_id):
    llm = FakeLLM(json_responses=[VALID_RECOMMENDATION])
    with pytest.raises(InputShapeError):
        with get_db() as db:
            run_assessment(db, user_id, [3, 3, 3], MajorRecommender(llm), SimilarCaseRetriever(llm))
    assert llm.calls == []


def test_runner_attaches_validation_warnings(user_id):
    payload = {
        "recommendations": [{"major": "Astrology", "matchRate": 70, "reason": "r"}],
        "explanation": "e",
    }
    llm = FakeLLM(json_responses=[payload])
    with get_db() as db:
        outcome = run_assessment(db, user_id, {1: 7}, MajorRecommender(llm), SimilarCaseRetriever(llm))
    assert len(outcome.validation_warnings) == 2
    assert "validation_warnings" in outcome.to_response()


def test_runner_uses_similar_case_narrative(user_id):
    llm = FakeLLM(json_responses=[VALID_RECOMMENDATION], text="Students like you loved Computer Engineering.")
    retriever = SimilarCaseRetriever(llm, collection=FakeCollection())
    retriever.seed_reference_cases()
    with get_db() as db:
        outcome = run_assessment(db, user_id, {qid: 4 for qid in range(1, 19)}, MajorRecommender(llm), retriever)
    assert outcome.similar_cases_feedback == "Students like you loved Computer Engineering."
