"""Adapters between remote table rows and the typed cache records.

Remote payloads arrive in more than one shape (camelCase columns written by
older clients, snake_case columns from the SQL console). Each adapter reads a
field through a fixed precedence list and returns one canonical record, so no
ambiguous shape travels past this module.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .records import AssessmentItem, RegistryWord, TestResult, registry_word_id
from .user_profile import UserProfile

Row = Mapping[str, Any]


def _first(row: Row, keys: Sequence[str], default: Any = None) -> Any:
    for key in keys:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return default


def _text(row: Row, keys: Sequence[str], default: Optional[str] = None) -> Optional[str]:
    value = _first(row, keys)
    if value is None:
        return default
    return str(value)


def _module_list(value: Any) -> List[str]:
    if isinstance(value, list):
        return [str(entry) for entry in value if str(entry).strip()]
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            return []
        if isinstance(decoded, list):
            return [str(entry) for entry in decoded if str(entry).strip()]
    return []


def _allowed_modules(row: Row) -> List[str]:
    # Arrays win over JSON-encoded strings; snake_case wins over camelCase.
    for key in ("allowed_modules", "allowedModules"):
        value = row.get(key)
        if isinstance(value, list) and value:
            return _module_list(value)
    for key in ("allowed_modules", "allowedModules"):
        value = row.get(key)
        if isinstance(value, str):
            modules = _module_list(value)
            if modules:
                return modules
    return []


def user_from_row(row: Row) -> UserProfile:
    active = row.get("active")
    return UserProfile(
        id=str(row["id"]),
        username=str(_first(row, ("username",), "")),
        full_name=_text(row, ("fullName", "full_name"), "User") or "User",
        role=_text(row, ("role",), "student") or "student",
        active=True if active is None else bool(active),
        allowed_modules=_allowed_modules(row),
        institute=_text(row, ("institute", "institute_name")),
        school=_text(row, ("school", "school_branch")),
        assigned_teacher_id=_text(row, ("assignedTeacherId", "assigned_teacher_id")),
        teacher_notes=_text(row, ("teacherNotes", "teacher_notes")),
        avatar_url=_text(row, ("avatarUrl", "avatar_url")),
        email=_text(row, ("email",)),
        phone=_text(row, ("phone",)),
        grade=_text(row, ("grade",)),
        curriculum=_text(row, ("curriculum",)),
        password=_text(row, ("password",)),
    )


def _or_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


def user_to_row(profile: UserProfile) -> Dict[str, Any]:
    return {
        "id": profile.id,
        "username": profile.username,
        "role": profile.role,
        "fullName": profile.full_name,
        "email": _or_none(profile.email),
        "password": _or_none(profile.password),
        "active": profile.active,
        "allowed_modules": list(profile.allowed_modules),
        "institute": _or_none(profile.institute),
        "school": _or_none(profile.school),
        "assigned_teacher_id": _or_none(profile.assigned_teacher_id),
        "teacher_notes": _or_none(profile.teacher_notes),
        "avatar_url": _or_none(profile.avatar_url),
    }


def item_from_row(row: Row) -> AssessmentItem:
    return AssessmentItem(
        id=str(row["id"]),
        level=str(row["level"]),
        set_id=str(_first(row, ("testId", "test_id", "set_id"), "")),
        item_index=int(_first(row, ("questionNum", "question_num", "item_index"), 0)),
        sub_index=_text(row, ("subQuestion", "sub_question", "sub_index"), "") or "",
        prompt=_text(row, ("text", "prompt"), "") or "",
        answer=str(_first(row, ("answer",), "")),
        aux_definition=_text(row, ("definition", "aux_definition")),
        aux_context=_text(row, ("context", "aux_context")),
    )


def item_to_row(item: AssessmentItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "level": item.level,
        "testId": item.set_id,
        "questionNum": item.item_index,
        "subQuestion": item.sub_index,
        "text": item.prompt,
        "answer": item.answer,
        "definition": item.aux_definition,
        "context": item.aux_context,
    }


def word_from_row(row: Row) -> RegistryWord:
    return RegistryWord(
        id=str(row["id"]),
        stage=str(row["stage"]),
        native_text=str(_first(row, ("telugu", "native_text"), "")),
        english_gloss=_text(row, ("english", "english_gloss"), "") or "",
        secondary_gloss=_text(row, ("hindi", "secondary_gloss"), "") or "",
    )


def word_to_row(word: RegistryWord) -> Dict[str, Any]:
    return {
        "id": word.id,
        "stage": word.stage,
        "telugu": word.native_text,
        "english": word.english_gloss,
        "hindi": word.secondary_gloss,
    }


def word_from_registry_entry(stage: str, ordinal: int, entry: Row) -> RegistryWord:
    """Build a registry word from one entry of the external registry fetch."""
    return RegistryWord(
        id=registry_word_id(stage, ordinal),
        stage=stage,
        native_text=str(_first(entry, ("text",), "")),
        english_gloss=_text(entry, ("definition", "english"), "") or "",
        secondary_gloss=_text(entry, ("context", "hindi"), "") or "",
    )


def result_to_row(result: TestResult) -> Dict[str, Any]:
    return {
        "id": result.id,
        "userId": result.user_id,
        "level": result.level,
        "testId": result.set_id,
        "duration": result.duration_minutes,
        "speedGap": result.speed_gap,
        "correctAnswers": result.correct_answers,
        "totalQuestions": result.total_questions,
        "scorePercentage": result.score_percentage,
        "timestamp": result.timestamp.isoformat(),
        "timeTakenSeconds": result.time_taken_seconds,
        "completed": result.completed,
        "questionsJson": result.raw_answers_snapshot,
        "wordScores": result.word_scores,
    }


def result_from_row(row: Row) -> TestResult:
    timestamp = _first(row, ("timestamp", "created_at"))
    if isinstance(timestamp, str):
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    elif isinstance(timestamp, datetime):
        parsed = timestamp
    else:
        parsed = datetime.now(timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    snapshot = _first(row, ("questionsJson", "questions_json", "raw_answers_snapshot"), "[]")
    if not isinstance(snapshot, str):
        snapshot = json.dumps(snapshot)
    return TestResult(
        id=str(row["id"]),
        user_id=str(_first(row, ("userId", "user_id"), "")),
        level=str(row["level"]),
        set_id=str(_first(row, ("testId", "test_id", "set_id"), "")),
        duration_minutes=_first(row, ("duration", "duration_minutes")),
        speed_gap=_text(row, ("speedGap", "speed_gap")),
        correct_answers=int(_first(row, ("correctAnswers", "correct_answers"), 0)),
        total_questions=int(_first(row, ("totalQuestions", "total_questions"), 0)),
        score_percentage=int(_first(row, ("scorePercentage", "score_percentage"), 0)),
        time_taken_seconds=int(_first(row, ("timeTakenSeconds", "time_taken_seconds"), 0)),
        completed=bool(_first(row, ("completed",), True)),
        raw_answers_snapshot=snapshot,
        word_scores=_first(row, ("wordScores", "word_scores")),
        timestamp=parsed,
    )


__all__ = [
    "item_from_row",
    "item_to_row",
    "result_from_row",
    "result_to_row",
    "user_from_row",
    "user_to_row",
    "word_from_registry_entry",
    "word_from_row",
    "word_to_row",
]
