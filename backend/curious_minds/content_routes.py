"""Read-only content endpoints consumed by the learner-facing UI."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from .constants import math_level, vocabulary_stage
from .content_admin import LevelSummary
from .records import AssessmentItem, RegistryWord
from .services import get_content_admin, get_offline_store

router = APIRouter(prefix="/api/content", tags=["content"])
logger = logging.getLogger(__name__)


@router.get("/questions", response_model=List[AssessmentItem])
def list_questions(
    level: Optional[str] = Query(default=None, description="Grouping key; omit to list every cached item."),
    set_id: Optional[str] = Query(default=None),
) -> List[AssessmentItem]:
    items = get_offline_store().get_questions(level)
    if set_id is not None:
        items = [item for item in items if item.set_id == set_id]
    return items


@router.get("/registry/{stage}", response_model=List[RegistryWord])
def list_registry_words(stage: str) -> List[RegistryWord]:
    if vocabulary_stage(stage) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown stage '{stage}'.")
    return get_offline_store().get_registry_words(stage)


@router.get("/summary", response_model=List[LevelSummary])
def content_summary() -> List[LevelSummary]:
    return get_content_admin().level_summary()


def require_known_key(key: str) -> str:
    if math_level(key) is None and vocabulary_stage(key) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown level '{key}'.")
    return key.strip().lower()


__all__ = ["require_known_key", "router"]
