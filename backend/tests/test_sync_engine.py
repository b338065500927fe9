from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from curious_minds.errors import SyncFailedError
from curious_minds.local_store import LocalStore
from curious_minds.records import AssessmentItem, RegistryWord
from curious_minds.remote_rows import item_to_row, word_to_row
from curious_minds.remote_store import OfflineRemoteStore
from curious_minds.sync_engine import PullReport, SyncEngine, SyncState

NOW = datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc)


def _remote_items(level: str, count: int, answer: str = "4") -> List[dict]:
    return [
        item_to_row(
            AssessmentItem(
                id=f"{level}-t1-q{index:03d}-main",
                level=level,
                set_id="1",
                item_index=index,
                prompt=f"2 X {index}",
                answer=answer,
            )
        )
        for index in range(1, count + 1)
    ]


def _engine(local_store: LocalStore, remote, clock=lambda: NOW, **kwargs) -> SyncEngine:
    kwargs.setdefault("grouping_keys", ("novice", "stage-1"))
    return SyncEngine(local_store, remote, clock=clock, **kwargs)


def test_pull_pages_until_a_short_page(local_store: LocalStore, remote) -> None:
    remote.seed("questions", _remote_items("novice", 25))
    engine = _engine(local_store, remote, page_size=10)

    report = engine.try_pull(force=True)

    assert report.succeeded
    assert report.pulled["questions:novice"] == 25
    assert local_store.items.count() == 25
    novice_ranges = [(start, end) for table, filters, start, end in remote.requests if filters == {"level": "novice"}]
    assert novice_ranges == [(0, 9), (10, 19), (20, 29)]
    assert local_store.last_pull_at() == NOW
    assert engine.state is SyncState.IDLE


def test_repeated_pull_overwrites_without_duplicates(local_store: LocalStore, remote) -> None:
    remote.seed("questions", _remote_items("novice", 12))
    engine = _engine(local_store, remote, page_size=5)
    engine.try_pull(force=True)

    remote.seed("questions", _remote_items("novice", 12, answer="8"))
    engine.try_pull(force=True)

    items = local_store.items.get_by_group("novice")
    assert len(items) == 12
    assert {item.answer for item in items} == {"8"}


def test_registry_words_are_pulled_for_stage_keys(local_store: LocalStore, remote) -> None:
    remote.seed(
        "master_words",
        [word_to_row(RegistryWord(id="stage-1-001", stage="stage-1", native_text="అ", english_gloss="a"))],
    )
    engine = _engine(local_store, remote)

    report = engine.try_pull(force=True)

    assert report.pulled["master_words:stage-1"] == 1
    assert "master_words:novice" not in report.pulled
    assert local_store.words.get_by_group("stage-1")[0].native_text == "అ"


def test_fresh_cache_skips_remote_reads(local_store: LocalStore, remote) -> None:
    remote.seed("questions", _remote_items("novice", 150))
    now = [NOW]
    engine = _engine(local_store, remote, clock=lambda: now[0])
    engine.try_pull(force=True)
    remote.calls["select_paged"] = 0

    now[0] = NOW + timedelta(hours=23)
    report = engine.refresh_if_stale()

    assert report.proceeded is False
    assert report.skipped_reason == "fresh"
    assert remote.calls["select_paged"] == 0

    now[0] = NOW + timedelta(hours=25)
    assert engine.refresh_if_stale().proceeded is True
    assert remote.calls["select_paged"] > 0


def test_small_cache_is_refreshed_even_when_recent(local_store: LocalStore, remote) -> None:
    remote.seed("questions", _remote_items("novice", 100))
    engine = _engine(local_store, remote)
    engine.try_pull(force=True)

    report = engine.refresh_if_stale()

    assert report.proceeded is True


def test_pull_requested_during_a_cycle_is_ignored(local_store: LocalStore, remote) -> None:
    remote.seed("questions", _remote_items("novice", 3))
    engine = _engine(local_store, remote)
    nested: List[PullReport] = []
    remote.on_select = lambda: nested.append(engine.try_pull(force=True)) if not nested else None

    report = engine.try_pull(force=True)

    assert report.proceeded is True
    assert nested[0].proceeded is False
    assert nested[0].skipped_reason == "in_progress"
    assert local_store.items.count() == 3


def test_failed_key_does_not_mark_the_pull(local_store: LocalStore, remote) -> None:
    remote.seed("questions", _remote_items("novice", 4))
    remote.failing_keys = {"stage-1"}
    engine = _engine(local_store, remote)

    report = engine.try_pull(force=True)

    assert report.proceeded is True
    assert report.succeeded is False
    assert set(report.failed) == {"questions:stage-1", "master_words:stage-1"}
    assert report.pulled["questions:novice"] == 4
    assert local_store.items.count() == 4
    assert local_store.last_pull_at() is None


def test_force_pull_surfaces_failures(local_store: LocalStore, remote) -> None:
    remote.failing_keys = {"novice"}
    engine = _engine(local_store, remote)

    with pytest.raises(SyncFailedError) as excinfo:
        engine.force_pull()

    assert "questions:novice" in excinfo.value.failed_keys


def test_malformed_rows_are_skipped(local_store: LocalStore, remote) -> None:
    rows = _remote_items("novice", 2)
    rows.append({"id": "novice-broken", "level": "novice", "questionNum": 0, "text": "?", "answer": "1"})
    remote.seed("questions", rows)
    engine = _engine(local_store, remote)

    report = engine.try_pull(force=True)

    assert report.succeeded
    assert report.pulled["questions:novice"] == 2
    assert local_store.items.count() == 2


def test_offline_remote_leaves_the_cache_untouched(local_store: LocalStore) -> None:
    engine = _engine(local_store, OfflineRemoteStore())

    report = engine.try_pull(force=True)

    assert report.pulled == {}
    assert len(report.failed) == 3
    assert local_store.last_pull_at() is None


def test_bootstrap_only_runs_on_an_empty_cache(local_store: LocalStore, remote) -> None:
    remote.seed("questions", _remote_items("novice", 2))
    engine = _engine(local_store, remote)

    first = engine.ensure_bootstrapped()
    assert first is not None and first.proceeded
    assert engine.ensure_bootstrapped() is None
