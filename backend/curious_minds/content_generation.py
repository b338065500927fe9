"""Builders that expand small registries into full assessment item banks.

Item ids depend only on the slot (grouping key, set, index, sub-part), never
on the randomly drawn content, so regenerating a bank reproduces the same id
set and a re-put overwrites instead of duplicating.
"""

from __future__ import annotations

import random
from typing import Iterable, List, Literal, Optional, Sequence, Union

from .constants import (
    ADVANCED_LEVEL_IDS,
    MULTIPLIER_RANGE,
    VOCABULARY_BLOCK_COUNT,
    VOCABULARY_BLOCK_SIZE,
    VOCABULARY_SET_COUNT,
)
from .errors import GenerationValidationError
from .records import AssessmentItem, RegistryWord

DrillTier = Literal["simple", "advanced"]

SUB_PARTS = ("a", "b", "c")
SIMPLE_SUB_TAG = "main"


def drill_item_id(level: str, set_number: int, item_index: int, sub_index: str = "") -> str:
    return f"{level}-t{set_number}-q{item_index}-{sub_index or SIMPLE_SUB_TAG}"


def vocabulary_item_id(stage: str, set_number: int, block_index: int) -> str:
    return f"telugu-{stage}-t{set_number}-q{block_index + 1}"


def _normalize_key(value: str, label: str) -> str:
    normalized = value.strip().lower()
    if not normalized:
        raise GenerationValidationError(f"{label} cannot be empty.")
    return normalized


def parse_base_numbers(raw: Union[str, Iterable[object]]) -> List[int]:
    """Parse a comma separated list (or a sequence) of integer base numbers."""
    tokens: Iterable[object] = raw.split(",") if isinstance(raw, str) else raw
    numbers: List[int] = []
    for token in tokens:
        if isinstance(token, bool):
            raise GenerationValidationError(f"Invalid base number: {token!r}")
        if isinstance(token, int):
            numbers.append(token)
            continue
        text = str(token).strip()
        if not text:
            continue
        try:
            numbers.append(int(text))
        except ValueError:
            raise GenerationValidationError(f"Invalid base number: {text!r}") from None
    if not numbers:
        raise GenerationValidationError("Provide at least one base number to generate a question bank.")
    return numbers


def resolve_tier(level: str) -> DrillTier:
    return "advanced" if level.strip().lower() in ADVANCED_LEVEL_IDS else "simple"


def generate_drill_bank(
    level: str,
    base_numbers: Union[str, Sequence[object]],
    set_count: int,
    *,
    tier: Optional[DrillTier] = None,
    rng: Optional[random.Random] = None,
) -> List[AssessmentItem]:
    """Build ``set_count`` sets with three derived items per base number."""
    level_key = _normalize_key(level, "Level")
    numbers = parse_base_numbers(base_numbers)
    if isinstance(set_count, bool) or not isinstance(set_count, int) or set_count < 1:
        raise GenerationValidationError("Set count must be a positive integer.")
    layout = tier or resolve_tier(level_key)
    draw = rng or random.Random()
    low, high = MULTIPLIER_RANGE

    items: List[AssessmentItem] = []
    for set_number in range(1, set_count + 1):
        for position, base in enumerate(numbers):
            multipliers = draw.sample(range(low, high + 1), 3)
            prompts = (
                f"{base} added {multipliers[0]} times",
                f"{base} + {base} + ... ({multipliers[1]} times)",
                f"{base} X {multipliers[2]}",
            )
            for part, (prompt, multiplier) in enumerate(zip(prompts, multipliers)):
                if layout == "advanced":
                    item_index = position + 1
                    sub_index = SUB_PARTS[part]
                else:
                    item_index = position * 3 + part + 1
                    sub_index = ""
                items.append(
                    AssessmentItem(
                        id=drill_item_id(level_key, set_number, item_index, sub_index),
                        level=level_key,
                        set_id=str(set_number),
                        item_index=item_index,
                        sub_index=sub_index,
                        prompt=prompt,
                        answer=str(base * multiplier),
                    )
                )
    return items


def partition_registry(words: Sequence[RegistryWord]) -> List[List[RegistryWord]]:
    """Split words, sorted by id, into fixed consecutive blocks."""
    ordered = sorted(words, key=lambda word: word.id)
    return [
        ordered[block * VOCABULARY_BLOCK_SIZE : (block + 1) * VOCABULARY_BLOCK_SIZE]
        for block in range(VOCABULARY_BLOCK_COUNT)
    ]


def _vocabulary_prompt(word: RegistryWord) -> str:
    english = word.english_gloss.strip()
    secondary = word.secondary_gloss.strip()
    if not english:
        english = "No Prompt"
    if secondary:
        return f"{english} - {secondary}"
    return english


def generate_vocabulary_sets(
    stage: str,
    words: Sequence[RegistryWord],
    *,
    set_count: int = VOCABULARY_SET_COUNT,
    rng: Optional[random.Random] = None,
) -> List[AssessmentItem]:
    """Draw one word per block for every set; blocks never change membership."""
    stage_key = _normalize_key(stage, "Stage")
    if not words:
        raise GenerationValidationError(
            f"No master registry data for {stage_key}. Sync the registry before generating sets."
        )
    blocks = partition_registry(words)
    draw = rng or random.Random()

    items: List[AssessmentItem] = []
    for set_number in range(1, set_count + 1):
        for block_index, block in enumerate(blocks):
            if not block:
                continue
            word = draw.choice(block)
            items.append(
                AssessmentItem(
                    id=vocabulary_item_id(stage_key, set_number, block_index),
                    level=stage_key,
                    set_id=str(set_number),
                    item_index=block_index + 1,
                    prompt=_vocabulary_prompt(word),
                    answer=word.native_text,
                    aux_definition=word.english_gloss,
                    aux_context=word.secondary_gloss,
                )
            )
    return items


__all__ = [
    "DrillTier",
    "drill_item_id",
    "generate_drill_bank",
    "generate_vocabulary_sets",
    "parse_base_numbers",
    "partition_registry",
    "resolve_tier",
    "vocabulary_item_id",
]
