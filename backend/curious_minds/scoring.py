"""Scoring of drill and dictation attempts into append-only test results."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from .records import AssessmentItem, TestResult, WordScore


@dataclass(frozen=True)
class AttemptScore:
    correct: int
    total: int
    percentage: int
    word_scores: Optional[List[WordScore]] = None


def percentage(correct: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(math.floor(correct * 100 / total + 0.5))


def _is_correct(item: AssessmentItem, answers: Mapping[str, str]) -> bool:
    return str(answers.get(item.id, "")).strip() == item.answer.strip()


def score_drill_attempt(items: Sequence[AssessmentItem], answers: Mapping[str, str]) -> AttemptScore:
    """Items with sub-parts pass as a unit only when every part is right."""
    if any(item.sub_index for item in items):
        groups: Dict[int, List[AssessmentItem]] = {}
        for item in items:
            groups.setdefault(item.item_index, []).append(item)
        correct = sum(1 for parts in groups.values() if all(_is_correct(part, answers) for part in parts))
        total = len(groups)
    else:
        correct = sum(1 for item in items if _is_correct(item, answers))
        total = len(items)
    return AttemptScore(correct=correct, total=total, percentage=percentage(correct, total))


def score_dictation_attempt(items: Sequence[AssessmentItem], marks: Mapping[str, str]) -> AttemptScore:
    """Per-word marks are ``"1"`` or ``"0"``; anything else is unmarked and scores ``"-"``."""
    word_scores: List[WordScore] = []
    for item in items:
        mark = str(marks.get(item.id, "")).strip()
        if mark == "1":
            word_scores.append(1)
        elif mark == "0":
            word_scores.append(0)
        else:
            word_scores.append("-")
    correct = sum(1 for score in word_scores if score == 1)
    total = len(items)
    return AttemptScore(correct=correct, total=total, percentage=percentage(correct, total), word_scores=word_scores)


def _snapshot(items: Sequence[AssessmentItem], responses: Mapping[str, str]) -> str:
    return json.dumps(
        [
            {
                "id": item.id,
                "prompt": item.prompt,
                "answer": item.answer,
                "response": responses.get(item.id, ""),
            }
            for item in items
        ]
    )


def build_drill_result(
    user_id: str,
    level: str,
    set_id: str,
    items: Sequence[AssessmentItem],
    answers: Mapping[str, str],
    *,
    duration_minutes: Optional[int] = None,
    time_taken_seconds: int = 0,
    completed: bool = True,
) -> TestResult:
    score = score_drill_attempt(items, answers)
    return TestResult(
        user_id=user_id,
        level=level,
        set_id=set_id,
        duration_minutes=duration_minutes,
        correct_answers=score.correct,
        total_questions=score.total,
        score_percentage=score.percentage,
        time_taken_seconds=time_taken_seconds,
        completed=completed,
        raw_answers_snapshot=_snapshot(items, answers),
    )


def build_dictation_result(
    user_id: str,
    stage: str,
    set_id: str,
    items: Sequence[AssessmentItem],
    marks: Mapping[str, str],
    *,
    speed_gap: Optional[str] = None,
    time_taken_seconds: int = 0,
) -> TestResult:
    score = score_dictation_attempt(items, marks)
    return TestResult(
        user_id=user_id,
        level=stage,
        set_id=set_id,
        speed_gap=speed_gap,
        correct_answers=score.correct,
        total_questions=score.total,
        score_percentage=score.percentage,
        time_taken_seconds=time_taken_seconds,
        completed=True,
        raw_answers_snapshot=_snapshot(items, marks),
        word_scores=score.word_scores,
    )


__all__ = [
    "AttemptScore",
    "build_dictation_result",
    "build_drill_result",
    "percentage",
    "score_dictation_attempt",
    "score_drill_attempt",
]
