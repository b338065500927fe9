"""Endpoints that score attempts and record append-only results."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from .content_routes import require_known_key
from .errors import ResultAlreadyRecordedError
from .records import AssessmentItem, TestResult
from .scoring import build_dictation_result, build_drill_result
from .services import get_offline_store

router = APIRouter(prefix="/api/results", tags=["results"])
logger = logging.getLogger(__name__)


class DrillSubmission(BaseModel):
    user_id: str = Field(..., min_length=1)
    level: str
    set_id: str
    answers: Dict[str, str] = Field(default_factory=dict)
    duration_minutes: Optional[int] = Field(default=None, ge=1)
    time_taken_seconds: int = Field(default=0, ge=0)
    completed: bool = True


class DictationSubmission(BaseModel):
    user_id: str = Field(..., min_length=1)
    stage: str
    set_id: str
    marks: Dict[str, str] = Field(default_factory=dict)
    speed_gap: Optional[str] = None
    time_taken_seconds: int = Field(default=0, ge=0)


def _set_items(group_key: str, set_id: str) -> List[AssessmentItem]:
    key = require_known_key(group_key)
    items = [item for item in get_offline_store().get_questions(key) if item.set_id == set_id]
    if not items:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No cached items for {key} set {set_id}.",
        )
    return sorted(items, key=lambda item: (item.item_index, item.sub_index))


def _record(result: TestResult) -> TestResult:
    store = get_offline_store()
    try:
        return store.save_result(result, store.get_user(result.user_id))
    except ResultAlreadyRecordedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.post("/drill", response_model=TestResult, status_code=status.HTTP_201_CREATED)
def submit_drill(payload: DrillSubmission) -> TestResult:
    items = _set_items(payload.level, payload.set_id)
    result = build_drill_result(
        payload.user_id,
        payload.level,
        payload.set_id,
        items,
        payload.answers,
        duration_minutes=payload.duration_minutes,
        time_taken_seconds=payload.time_taken_seconds,
        completed=payload.completed,
    )
    return _record(result)


@router.post("/dictation", response_model=TestResult, status_code=status.HTTP_201_CREATED)
def submit_dictation(payload: DictationSubmission) -> TestResult:
    items = _set_items(payload.stage, payload.set_id)
    result = build_dictation_result(
        payload.user_id,
        payload.stage,
        payload.set_id,
        items,
        payload.marks,
        speed_gap=payload.speed_gap,
        time_taken_seconds=payload.time_taken_seconds,
    )
    return _record(result)


@router.get("", response_model=List[TestResult])
def list_results(user_id: Optional[str] = Query(default=None)) -> List[TestResult]:
    return get_offline_store().get_results(user_id)


__all__ = ["router"]
