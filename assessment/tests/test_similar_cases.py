"""
Similar-case retriever: seeding, storage, search and narrative fallbacks.
"""

from conftest import FakeLLM, FakeCollection
from assessment.logic import CaseStudy, CategoryScores, ExternalServiceError
from assessment.ai.case_corpus import REFERENCE_CASES, scores_from_fractions
from assessment.ai import similar_cases
from assessment.ai.similar_cases import (
    FALLBACK_EMPTY,
    FALLBACK_ERROR,
    FALLBACK_NO_CASES,
    FALLBACK_NOT_CONFIGURED,
    SimilarCaseRetriever,
    describe_scores,
)

PROFILE = CategoryScores(realistic=80, investigative=90, artistic=30, social=40, enterprising=20, conventional=60)


def test_reference_corpus_is_on_the_0_100_scale():
    assert len(REFERENCE_CASES) == 8
    assert len({case.id for case in REFERENCE_CASES}) == 8
    first = REFERENCE_CASES[0]
    assert first.scores.realistic == 80
    assert first.scores.investigative == 90
    for case in REFERENCE_CASES:
        assert all(0 <= value <= 100 for value in case.scores.as_dict().values())


def test_fraction_conversion_rounds_half_up():
    assert scores_from_fractions({"realistic": 0.125}).realistic == 13
    assert scores_from_fractions({}).social == 0


def test_seeding_is_idempotent():
    collection = FakeCollection()
    retriever = SimilarCaseRetriever(FakeLLM(), collection=collection)

    assert retriever.seed_reference_cases() == 8
    assert collection.count() == 8
    assert retriever.seed_reference_cases() == 0
    assert collection.count() == 8
    assert collection.upsert_calls == 1


def test_initialize_respects_disabled_flag(monkeypatch):
    monkeypatch.setattr(similar_cases, "SIMILAR_CASES_ENABLED", False)
    collection = FakeCollection()
    retriever = SimilarCaseRetriever(FakeLLM(), collection=collection)
    assert retriever.initialize() is False
    assert collection.count() == 0


def test_initialize_seeds_existing_collection(monkeypatch):
    monkeypatch.setattr(similar_cases, "SIMILAR_CASES_ENABLED", True)
    collection = FakeCollection()
    retriever = SimilarCaseRetriever(FakeLLM(), collection=collection)
    assert retriever.initialize() is True
    assert collection.count() == 8


def test_initialize_without_embedding_client(monkeypatch):
    monkeypatch.setattr(similar_cases, "SIMILAR_CASES_ENABLED", True)
    retriever = SimilarCaseRetriever(FakeLLM(configured=False))
    assert retriever.initialize() is False
    assert retriever.is_available is False


def test_find_similar_maps_metadata_back():
    retriever = SimilarCaseRetriever(FakeLLM(), collection=FakeCollection())
    retriever.seed_reference_cases()

    cases = retriever.find_similar(PROFILE, k=3)
    assert len(cases) == 3
    assert cases[0].id == "case-001"
    assert cases[0].selected_major == "Computer Engineering"
    assert cases[0].scores.investigative == 90
    assert cases[0].graduation_year == 2023
    assert abs(cases[0].similarity - 0.9) < 1e-9


def test_find_similar_never_raises():
    failing_embed = SimilarCaseRetriever(FakeLLM(embed_error=ExternalServiceError("down")), collection=FakeCollection())
    assert failing_embed.find_similar(PROFILE) == []

    failing_query = SimilarCaseRetriever(FakeLLM(), collection=FakeCollection(fail_query=True))
    assert failing_query.find_similar(PROFILE) == []

    not_configured = SimilarCaseRetriever(FakeLLM())
    assert not_configured.find_similar(PROFILE) == []


def test_store_case_round_trip_without_optional_fields():
    collection = FakeCollection()
    retriever = SimilarCaseRetriever(FakeLLM(), collection=collection)
    case = CaseStudy(id="case-x", scores=PROFILE, selected_major="Architecture", satisfaction_rating=4)

    assert retriever.store_case(case) is True
    metadata = collection.records["case-x"]["metadata"]
    assert metadata["graduation_year"] == 0
    assert metadata["career_path"] == ""

    found = retriever.find_similar(PROFILE, k=1)[0]
    assert found.graduation_year is None
    assert found.career_path is None


def test_store_case_reports_failure():
    retriever = SimilarCaseRetriever(FakeLLM(embed_error=ExternalServiceError("down")), collection=FakeCollection())
    case = CaseStudy(id="case-y", scores=PROFILE, selected_major="Architecture", satisfaction_rating=4)
    assert retriever.store_case(case) is False
    assert SimilarCaseRetriever(FakeLLM()).store_case(case) is False


def test_narrate_fallbacks():
    assert SimilarCaseRetriever(FakeLLM()).narrate(PROFILE, []) == FALLBACK_NOT_CONFIGURED
    assert SimilarCaseRetriever(FakeLLM(), collection=FakeCollection()).narrate(PROFILE, []) == FALLBACK_NO_CASES

    llm = FakeLLM(text="   ")
    retriever = SimilarCaseRetriever(llm, collection=FakeCollection())
    retriever.seed_reference_cases()
    assert retriever.narrate(PROFILE, ["Architecture"]) == FALLBACK_EMPTY


def test_narrate_generation_failure():
    llm = FakeLLM()
    retriever = SimilarCaseRetriever(llm, collection=FakeCollection())
    retriever.seed_reference_cases()
    llm.error = ExternalServiceError("timeout")
    assert retriever.narrate(PROFILE, ["Architecture"]) == FALLBACK_ERROR


def test_narrate_uses_three_cases_and_bounded_completion():
    llm = FakeLLM(text="Seniors with your profile were very satisfied.")
    retriever = SimilarCaseRetriever(llm, collection=FakeCollection())
    retriever.seed_reference_cases()

    assert retriever.narrate(PROFILE, ["Computer Engineering"]) == "Seniors with your profile were very satisfied."
    text_call = [call for call in llm.calls if call["kind"] == "text"][0]
    assert text_call["temperature"] == 0.7
    assert text_call["max_tokens"] == 300
    assert "Case 3" in text_call["user"]
    assert "Case 4" not in text_call["user"]


def test_describe_scores_mentions_strongest_categories():
    text = describe_scores(PROFILE)
    assert "Investigative (I): 90" in text
    assert "Strongest interests: Investigative, Realistic" in text
