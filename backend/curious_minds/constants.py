"""Static catalog of math levels, vocabulary stages and generation defaults."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple

StageCategory = Literal["Foundation", "Progressive", "Advanced", "Achiever", "Expert", "Mastery"]


@dataclass(frozen=True)
class MathLevel:
    id: str
    name: str
    questions_count: int
    sub_questions: int
    pass_requirement: int
    unlock_requirement: Optional[str] = None

    @property
    def advanced(self) -> bool:
        return self.sub_questions > 1


@dataclass(frozen=True)
class VocabularyStage:
    id: str
    category: StageCategory
    name: str

    @property
    def number(self) -> int:
        return int(self.id.split("-", 1)[1])


MATH_LEVELS: Tuple[MathLevel, ...] = (
    MathLevel("novice", "Novice", 15, 1, 93),
    MathLevel("awareness", "Awareness", 30, 1, 90, "novice"),
    MathLevel("beginner", "Beginner", 45, 1, 91, "awareness"),
    MathLevel("competent", "Competent", 20, 3, 90, "beginner"),
    MathLevel("development", "Development", 30, 3, 90, "competent"),
    MathLevel("expert", "Expert", 40, 3, 90, "development"),
)

_STAGE_CATEGORIES: Tuple[StageCategory, ...] = (
    "Foundation",
    "Progressive",
    "Advanced",
    "Achiever",
    "Expert",
    "Mastery",
)

VOCABULARY_STAGES: Tuple[VocabularyStage, ...] = tuple(
    VocabularyStage(f"stage-{number}", _STAGE_CATEGORIES[(number - 1) // 3], f"Stage {number}")
    for number in range(1, 19)
)

MATH_LEVEL_IDS: Tuple[str, ...] = tuple(level.id for level in MATH_LEVELS)
STAGE_IDS: Tuple[str, ...] = tuple(stage.id for stage in VOCABULARY_STAGES)
ADVANCED_LEVEL_IDS = frozenset(level.id for level in MATH_LEVELS if level.advanced)

# Every grouping key a full pull walks through.
KNOWN_GROUPING_KEYS: Tuple[str, ...] = MATH_LEVEL_IDS + STAGE_IDS

DEFAULT_SET_COUNT = 10
DEFAULT_SET_LIMIT = 50

MULTIPLIER_RANGE = (2, 9)
VOCABULARY_SET_COUNT = 50
VOCABULARY_BLOCK_COUNT = 40
VOCABULARY_BLOCK_SIZE = 5

MATH_BASE_PRESETS: Dict[str, str] = {
    "novice": "1, 10, 100, 5, 50",
    "awareness": "1, 10, 100, 11, 101, 5, 50, 105, 15, 55",
    "beginner": "1, 10, 100, 101, 11, 5, 50, 105, 15, 55, 95, 45, 99, 9, 49",
    "competent": "1, 10, 100, 101, 11, 9, 99, 2, 20, 12, 102, 5, 50, 15, 51, 49, 55, 45, 105, 95",
    "development": (
        "1, 10, 100, 101, 11, 9, 99, 2, 12, 20, 19, 21, 18, 22, 102, 98, 5, 50, 51, 49, "
        "52, 48, 15, 25, 55, 45, 105, 95, 125, 75"
    ),
    "expert": (
        "1, 10, 100, 101, 11, 5, 50, 105, 15, 99, 9, 49, 95, 55, 45, 51, 2, 20, 12, 102, "
        "98, 22, 25, 52, 48, 18, 125, 75, 19, 103, 53, 13, 23, 97, 47, 7, 6, 4, 17, 8"
    ),
}


def math_level(level_id: str) -> Optional[MathLevel]:
    key = level_id.strip().lower()
    for level in MATH_LEVELS:
        if level.id == key:
            return level
    return None


def vocabulary_stage(stage_id: str) -> Optional[VocabularyStage]:
    key = stage_id.strip().lower()
    for stage in VOCABULARY_STAGES:
        if stage.id == key:
            return stage
    return None


__all__ = [
    "ADVANCED_LEVEL_IDS",
    "DEFAULT_SET_COUNT",
    "DEFAULT_SET_LIMIT",
    "KNOWN_GROUPING_KEYS",
    "MATH_BASE_PRESETS",
    "MATH_LEVELS",
    "MATH_LEVEL_IDS",
    "MULTIPLIER_RANGE",
    "MathLevel",
    "STAGE_IDS",
    "VOCABULARY_BLOCK_COUNT",
    "VOCABULARY_BLOCK_SIZE",
    "VOCABULARY_SET_COUNT",
    "VOCABULARY_STAGES",
    "VocabularyStage",
    "math_level",
    "vocabulary_stage",
]
