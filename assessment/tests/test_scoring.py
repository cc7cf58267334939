"""
Score normalization tests.
"""

import json

from assessment.logic import normalize_scores, round_half_up, QUESTION_CATEGORY_MAP


def test_all_fives_in_one_category_is_100():
    scores = normalize_scores({1: 5, 2: 5, 3: 5})
    assert scores.realistic == 100


def test_all_ones_in_one_category_is_20():
    scores = normalize_scores({1: 1, 2: 1, 3: 1})
    assert scores.realistic == 20


def test_unanswered_categories_score_zero():
    scores = normalize_scores({1: 5, 2: 5, 3: 5})
    assert scores.investigative == 0
    assert scores.artistic == 0
    assert scores.social == 0
    assert scores.enterprising == 0
    assert scores.conventional == 0


def test_all_threes_is_60_everywhere():
    responses = {qid: 3 for qid in range(1, 19)}
    scores = normalize_scores(responses)
    assert set(scores.as_dict().values()) == {60}


def test_scores_stay_in_range_for_valid_answers():
    for value in range(1, 6):
        scores = normalize_scores({qid: value for qid in range(1, 19)})
        for score in scores.as_dict().values():
            assert 0 <= score <= 100


def test_partial_category_uses_full_question_count():
    # 5 / 15 * 100 = 33.33
    scores = normalize_scores({4: 5})
    assert scores.investigative == 33


def test_string_keys_are_accepted():
    scores = normalize_scores({"1": 5, "2": 5, "3": 5})
    assert scores.realistic == 100


def test_unknown_keys_and_non_numeric_values_are_ignored():
    scores = normalize_scores({"abc": 5, 99: 5, 1: "five", 2: True, 3: 5})
    # only question 3 counts: 5 / 15 * 100
    assert scores.realistic == 33


def test_out_of_range_values_are_summed_not_rejected():
    scores = normalize_scores({1: 10, 2: 10, 3: 10})
    assert scores.realistic == 200


def test_category_missing_from_table_scores_zero():
    table = {qid: cat for qid, cat in QUESTION_CATEGORY_MAP.items() if cat != "artistic"}
    scores = normalize_scores({qid: 5 for qid in range(1, 19)}, category_table=table)
    assert scores.artistic == 0
    assert scores.realistic == 100


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(66.666) == 67
    assert round_half_up(46.6) == 47
    assert round_half_up(0.49) == 0


def test_fractional_scores_round_to_nearest():
    # 7 / 15 * 100 = 46.67, 8 / 15 * 100 = 53.33
    assert normalize_scores({1: 3, 2: 2, 3: 2}).realistic == 47
    assert normalize_scores({1: 3, 2: 3, 3: 2}).realistic == 53


def test_non_finite_values_are_skipped():
    # the request parser accepts NaN, Infinity and 1e400
    responses = json.loads('{"1": NaN, "2": 3, "3": Infinity, "4": 1e400, "5": 4}')
    scores = normalize_scores(responses)
    assert scores.realistic == 20
    assert scores.investigative == 27


def test_overflowing_sum_scores_zero():
    scores = normalize_scores({1: 1e308, 2: 1e308, 3: 3})
    assert scores.realistic == 0
