"""Admin flows that generate or refresh content through the offline-first store."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Union

import httpx

from .constants import DEFAULT_SET_COUNT, MATH_LEVEL_IDS, STAGE_IDS
from .content_generation import generate_drill_bank, generate_vocabulary_sets
from .errors import RegistryError
from .offline_first import OfflineFirstStore
from .records import AssessmentItem, RegistryWord
from .registry_client import RegistryClient
from .telemetry import emit_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageSyncSummary:
    stage: str
    words: int
    items: int


@dataclass(frozen=True)
class LevelSummary:
    key: str
    kind: str
    sets: int
    registry_words: int = 0


class ContentAdmin:
    def __init__(
        self,
        store: OfflineFirstStore,
        *,
        registry_timeout_seconds: float = 15.0,
        registry_client: Optional[httpx.Client] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._store = store
        self._registry_timeout = registry_timeout_seconds
        self._registry_http = registry_client
        self._rng = rng

    def _registry(self) -> RegistryClient:
        config = self._store.get_config()
        return RegistryClient(
            config.google_sheets_url,
            timeout_seconds=self._registry_timeout,
            client=self._registry_http,
        )

    def generate_drill_bank(
        self,
        level: str,
        base_numbers: Union[str, Sequence[object]],
        set_count: int = DEFAULT_SET_COUNT,
    ) -> List[AssessmentItem]:
        # Generation validates its input before anything is cleared.
        items = generate_drill_bank(level, base_numbers, set_count, rng=self._rng)
        level_key = items[0].level
        self._store.clear_level(level_key)
        self._store.save_questions(items)
        emit_event("question_bank_generated", level=level_key, sets=set_count, items=len(items))
        return items

    def rebuild_vocabulary_sets(self, stage: str) -> List[AssessmentItem]:
        words = self._store.get_registry_words(stage)
        items = generate_vocabulary_sets(stage, words, rng=self._rng)
        stage_key = items[0].level
        self._store.clear_level(stage_key)
        self._store.save_questions(items)
        emit_event("question_bank_generated", level=stage_key, sets=len({i.set_id for i in items}), items=len(items))
        return items

    def sync_stage_from_registry(self, stage: str) -> StageSyncSummary:
        """Refresh one stage from the external registry and rebuild its sets."""
        stage_key = stage.strip().lower()
        words = self._registry().fetch_stage(stage_key)
        if not words:
            raise RegistryError(f"Registry returned no words for {stage_key}.")
        self._store.replace_registry_stage(stage_key, words)
        items = self.rebuild_vocabulary_sets(stage_key)
        emit_event("registry_synced", stages=[stage_key], words=len(words))
        return StageSyncSummary(stage=stage_key, words=len(words), items=len(items))

    def sync_master_registry(self, progress: Optional[Callable[[str], None]] = None) -> int:
        """Fetch every stage; stages that fail are skipped, all failing is an error."""
        registry = self._registry()
        collected: List[RegistryWord] = []
        synced: List[str] = []
        for stage in STAGE_IDS:
            if progress is not None:
                progress(stage)
            try:
                words = registry.fetch_stage(stage)
            except RegistryError as exc:
                logger.warning("Skipping %s during master registry sync: %s", stage, exc)
                continue
            if words:
                collected.extend(words)
                synced.append(stage)
        if not collected:
            raise RegistryError("Could not fetch any words from Registry.")
        self._store.save_registry_words(collected)
        emit_event("registry_synced", stages=synced, words=len(collected))
        return len(collected)

    def rebuild_all_vocabulary_sets(self) -> Dict[str, int]:
        counts = self._store.local.registry_word_counts()
        rebuilt: Dict[str, int] = {}
        for stage in STAGE_IDS:
            if counts.get(stage, 0) > 0:
                rebuilt[stage] = len(self.rebuild_vocabulary_sets(stage))
        return rebuilt

    def level_summary(self) -> List[LevelSummary]:
        sets = self._store.local.item_set_counts()
        words = self._store.local.registry_word_counts()
        summary = [LevelSummary(key=level, kind="math", sets=sets.get(level, 0)) for level in MATH_LEVEL_IDS]
        summary.extend(
            LevelSummary(key=stage, kind="vocabulary", sets=sets.get(stage, 0), registry_words=words.get(stage, 0))
            for stage in STAGE_IDS
        )
        return summary


__all__ = ["ContentAdmin", "LevelSummary", "StageSyncSummary"]
