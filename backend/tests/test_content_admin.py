from __future__ import annotations

import random
from typing import List

import httpx
import pytest

from curious_minds.content_admin import ContentAdmin, StageSyncSummary
from curious_minds.errors import GenerationValidationError, RegistryError
from curious_minds.local_store import LocalStore
from curious_minds.offline_first import OfflineFirstStore


def _registry_handler(available_stages: List[str], words_per_stage: int = 12):
    def handler(request: httpx.Request) -> httpx.Response:
        stage = request.url.params["stage"]
        if stage not in available_stages:
            return httpx.Response(200, json={"error": f"no sheet for stage {stage}"})
        questions = [
            {"text": f"s{stage}w{n}", "definition": f"meaning {n}", "context": f"context {n}"}
            for n in range(1, words_per_stage + 1)
        ]
        return httpx.Response(200, json={"questions": questions})

    return handler


def _admin(local_store: LocalStore, remote, handler=None) -> ContentAdmin:
    client = httpx.Client(transport=httpx.MockTransport(handler)) if handler else None
    return ContentAdmin(OfflineFirstStore(local_store, remote), registry_client=client, rng=random.Random(4))


def test_generation_replaces_the_previous_bank(local_store: LocalStore, remote) -> None:
    admin = _admin(local_store, remote)
    admin.generate_drill_bank("novice", "1, 2", 2)
    assert local_store.items.count() == 12

    admin.generate_drill_bank("novice", "7", 1)

    assert local_store.items.count() == 3
    assert len(remote.rows("questions")) == 3


def test_invalid_generation_keeps_existing_items(local_store: LocalStore, remote) -> None:
    admin = _admin(local_store, remote)
    admin.generate_drill_bank("awareness", "1, 10", 1)

    with pytest.raises(GenerationValidationError):
        admin.generate_drill_bank("awareness", "ten", 1)

    assert local_store.items.count() == 6


def test_stage_sync_fetches_and_rebuilds(local_store: LocalStore, remote) -> None:
    admin = _admin(local_store, remote, _registry_handler(["1"]))

    summary = admin.sync_stage_from_registry("stage-1")

    assert summary == StageSyncSummary(stage="stage-1", words=12, items=150)
    assert len(local_store.words.get_by_group("stage-1")) == 12
    assert len(local_store.items.get_by_group("stage-1")) == 150
    assert len(remote.rows("master_words")) == 12


def test_master_sync_skips_failing_stages(local_store: LocalStore, remote) -> None:
    admin = _admin(local_store, remote, _registry_handler(["1", "5"], words_per_stage=3))
    visited: List[str] = []

    assert admin.sync_master_registry(progress=visited.append) == 6
    assert len(visited) == 18
    assert local_store.registry_word_counts() == {"stage-1": 3, "stage-5": 3}

    rebuilt = admin.rebuild_all_vocabulary_sets()
    assert rebuilt == {"stage-1": 50, "stage-5": 50}


def test_master_sync_with_nothing_fetched_fails(local_store: LocalStore, remote) -> None:
    admin = _admin(local_store, remote, _registry_handler([]))

    with pytest.raises(RegistryError):
        admin.sync_master_registry()


def test_level_summary_counts_sets(local_store: LocalStore, remote) -> None:
    admin = _admin(local_store, remote)
    admin.generate_drill_bank("beginner", "3", 4)

    summary = {entry.key: entry for entry in admin.level_summary()}

    assert summary["beginner"].sets == 4
    assert summary["novice"].sets == 0
    assert summary["stage-18"].kind == "vocabulary"
    assert len(summary) == 24
