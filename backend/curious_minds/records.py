"""Typed records cached on the device: assessment items, registry words and test results."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

WordScore = Union[int, str]
ResourceFileType = Literal["pdf", "video", "doc", "image", "zip", "link"]


def _normalize_group(value: str) -> str:
    normalized = value.strip().lower()
    if not normalized:
        raise ValueError("Grouping key cannot be empty.")
    return normalized


class AssessmentItem(BaseModel):
    """One question or word slot inside a generated set."""

    id: str = Field(..., min_length=1)
    level: str
    set_id: str
    item_index: int = Field(..., ge=1)
    sub_index: str = ""
    prompt: str
    answer: str
    aux_definition: Optional[str] = None
    aux_context: Optional[str] = None

    @field_validator("level")
    @classmethod
    def _lower_level(cls, value: str) -> str:
        return _normalize_group(value)


class RegistryWord(BaseModel):
    """A raw vocabulary entry from the master registry."""

    id: str = Field(..., min_length=1)
    stage: str
    native_text: str
    english_gloss: str = ""
    secondary_gloss: str = ""

    @field_validator("stage")
    @classmethod
    def _lower_stage(cls, value: str) -> str:
        return _normalize_group(value)


def registry_word_id(stage: str, ordinal: int) -> str:
    return f"{_normalize_group(stage)}-{ordinal:03d}"


class TestResult(BaseModel):
    """A completed attempt at one set. Results are append-only."""

    __test__ = False

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    level: str
    set_id: str
    duration_minutes: Optional[int] = None
    speed_gap: Optional[str] = None
    correct_answers: int = Field(..., ge=0)
    total_questions: int = Field(..., ge=0)
    score_percentage: int = Field(..., ge=0, le=100)
    time_taken_seconds: int = Field(default=0, ge=0)
    completed: bool = True
    raw_answers_snapshot: str = "[]"
    word_scores: Optional[List[WordScore]] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("level")
    @classmethod
    def _lower_level(cls, value: str) -> str:
        return _normalize_group(value)

    @property
    def is_vocabulary(self) -> bool:
        return self.level.startswith("stage-")


class LearningResource(BaseModel):
    """A free study resource kept only on this device."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:9], min_length=1)
    title: str
    description: str = ""
    file_type: ResourceFileType = "pdf"
    url: str
    category: str = "General"
    size: str = "N/A"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("title", "url")
    @classmethod
    def _require_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Title and url cannot be blank.")
        return stripped

    def matches(self, search: str) -> bool:
        needle = search.strip().lower()
        return needle in self.title.lower() or needle in self.description.lower()


__all__ = [
    "AssessmentItem",
    "LearningResource",
    "ResourceFileType",
    "RegistryWord",
    "TestResult",
    "WordScore",
    "registry_word_id",
]
