from __future__ import annotations

import json

from curious_minds.records import AssessmentItem
from curious_minds.scoring import (
    build_dictation_result,
    build_drill_result,
    percentage,
    score_dictation_attempt,
    score_drill_attempt,
)


def _item(item_id: str, index: int, answer: str, sub: str = "") -> AssessmentItem:
    return AssessmentItem(id=item_id, level="competent", set_id="1", item_index=index, sub_index=sub, prompt="?", answer=answer)


def test_percentage_rounds_half_up() -> None:
    assert percentage(2, 3) == 67
    assert percentage(1, 8) == 13
    assert percentage(0, 0) == 0


def test_simple_drill_scoring_trims_answers() -> None:
    items = [_item("a", 1, "4"), _item("b", 2, "9"), _item("c", 3, "16")]

    score = score_drill_attempt(items, {"a": " 4 ", "b": "8", "c": "16"})

    assert (score.correct, score.total, score.percentage) == (2, 3, 67)


def test_sub_parts_score_as_one_unit() -> None:
    items = [
        _item("q1a", 1, "2", "a"),
        _item("q1b", 1, "4", "b"),
        _item("q1c", 1, "6", "c"),
        _item("q2a", 2, "3", "a"),
        _item("q2b", 2, "6", "b"),
        _item("q2c", 2, "9", "c"),
    ]
    answers = {"q1a": "2", "q1b": "4", "q1c": "6", "q2a": "3", "q2b": "6", "q2c": "10"}

    score = score_drill_attempt(items, answers)

    assert (score.correct, score.total, score.percentage) == (1, 2, 50)


def test_dictation_marks_map_to_word_scores() -> None:
    items = [_item("w1", 1, "x"), _item("w2", 2, "y"), _item("w3", 3, "z")]

    score = score_dictation_attempt(items, {"w1": "1", "w2": "0", "w3": "?"})

    assert score.word_scores == [1, 0, "-"]
    assert (score.correct, score.total, score.percentage) == (1, 3, 33)


def test_results_carry_an_answer_snapshot() -> None:
    items = [_item("a", 1, "4"), _item("b", 2, "9")]

    drill = build_drill_result("u1", "Competent", "1", items, {"a": "4"}, duration_minutes=5, time_taken_seconds=42)
    dictation = build_dictation_result("u1", "stage-2", "3", items, {"a": "1", "b": "1"}, speed_gap="5")

    snapshot = json.loads(drill.raw_answers_snapshot)
    assert snapshot[0] == {"id": "a", "prompt": "?", "answer": "4", "response": "4"}
    assert snapshot[1]["response"] == ""
    assert drill.level == "competent"
    assert drill.score_percentage == 50
    assert drill.word_scores is None
    assert dictation.word_scores == [1, 1]
    assert dictation.is_vocabulary
    assert dictation.speed_gap == "5"
