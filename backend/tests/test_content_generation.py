from __future__ import annotations

import random
import re

import pytest

from curious_minds.content_generation import (
    generate_drill_bank,
    generate_vocabulary_sets,
    parse_base_numbers,
    partition_registry,
)
from curious_minds.errors import GenerationValidationError
from curious_minds.local_store import LocalStore
from curious_minds.records import RegistryWord, registry_word_id


def _words(stage: str, count: int) -> list[RegistryWord]:
    return [
        RegistryWord(
            id=registry_word_id(stage, ordinal),
            stage=stage,
            native_text=f"w{ordinal}",
            english_gloss=f"english {ordinal}",
            secondary_gloss=f"hindi {ordinal}",
        )
        for ordinal in range(1, count + 1)
    ]


def test_novice_bank_has_three_items_per_base() -> None:
    items = generate_drill_bank("novice", [1, 10, 100], 2, rng=random.Random(7))

    assert len(items) == 18
    assert {item.set_id for item in items} == {"1", "2"}
    assert all(item.id.startswith(("novice-t1-", "novice-t2-")) for item in items)
    assert sorted({item.item_index for item in items}) == list(range(1, 10))
    for item in items:
        numbers = [int(value) for value in re.findall(r"\d+", item.prompt)]
        base, multiplier = numbers[0], numbers[-1]
        assert base in (1, 10, 100)
        assert 2 <= multiplier <= 9
        assert item.answer == str(base * multiplier)
        assert item.sub_index == ""


def test_multipliers_are_distinct_per_base() -> None:
    items = generate_drill_bank("novice", [5], 1, rng=random.Random(3))

    multipliers = [int(re.findall(r"\d+", item.prompt)[-1]) for item in items]
    assert len(set(multipliers)) == 3


def test_regeneration_reproduces_the_id_set(local_store: LocalStore) -> None:
    first = generate_drill_bank("novice", "1, 10, 100", 2, rng=random.Random(1))
    second = generate_drill_bank("novice", "1, 10, 100", 2, rng=random.Random(2))

    assert {item.id for item in first} == {item.id for item in second}

    local_store.items.put_many(first)
    local_store.items.put_many(second)
    assert local_store.items.count() == 18


def test_advanced_levels_use_sub_parts() -> None:
    items = generate_drill_bank("competent", [2, 5], 1, rng=random.Random(11))

    assert len(items) == 6
    assert {item.item_index for item in items} == {1, 2}
    assert sorted(item.sub_index for item in items if item.item_index == 1) == ["a", "b", "c"]
    assert "competent-t1-q2-b" in {item.id for item in items}


def test_base_number_parsing() -> None:
    assert parse_base_numbers("1, , 10,100") == [1, 10, 100]
    assert parse_base_numbers([3, "4"]) == [3, 4]

    for raw in ("", " , ", "1, x", "2.5", [True]):
        with pytest.raises(GenerationValidationError):
            parse_base_numbers(raw)


def test_invalid_generation_input_is_rejected() -> None:
    with pytest.raises(GenerationValidationError):
        generate_drill_bank("novice", "1, 10", 0)
    with pytest.raises(GenerationValidationError):
        generate_drill_bank("  ", "1, 10", 1)
    with pytest.raises(GenerationValidationError):
        generate_vocabulary_sets("stage-1", [])


def test_vocabulary_blocks_are_stable() -> None:
    words = _words("stage-3", 200)
    shuffled = list(words)
    random.Random(5).shuffle(shuffled)

    assert partition_registry(shuffled) == partition_registry(words)

    items = generate_vocabulary_sets("stage-3", shuffled, rng=random.Random(9))

    assert len(items) == 2000
    assert len({item.id for item in items}) == 2000
    for item in items:
        ordinal = int(item.answer[1:])
        assert (ordinal - 1) // 5 == item.item_index - 1
        assert item.prompt == f"english {ordinal} - hindi {ordinal}"
        assert item.id == f"telugu-stage-3-t{item.set_id}-q{item.item_index}"


def test_short_registry_skips_empty_blocks() -> None:
    items = generate_vocabulary_sets("stage-1", _words("stage-1", 7), set_count=3, rng=random.Random(2))

    assert len(items) == 6
    assert {item.item_index for item in items} == {1, 2}
