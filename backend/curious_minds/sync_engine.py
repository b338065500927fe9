"""Pull-sync from the remote store into the local cache.

A cycle walks every known grouping key, pages through the matching remote
rows and writes them into the local store with overwrite-by-id semantics.
Only one cycle runs at a time; a request that arrives while a cycle is in
flight returns immediately without queueing.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from .constants import KNOWN_GROUPING_KEYS, STAGE_IDS
from .db.base import utcnow
from .errors import SyncFailedError
from .local_store import GroupedCollection, LocalStore
from .remote_rows import item_from_row, word_from_row
from .remote_store import RemoteError, RemoteOk, RemoteResult, RemoteStore
from .telemetry import emit_event

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    IDLE = "idle"
    PULLING = "pulling"
    MERGING = "merging"


@dataclass
class PullReport:
    proceeded: bool
    skipped_reason: Optional[str] = None
    pulled: Dict[str, int] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    completed_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.proceeded and not self.failed


@dataclass(frozen=True)
class _PullTarget:
    table: str
    group_column: str
    group_key: str
    adapt: Callable[[Mapping[str, Any]], Any]
    collection: GroupedCollection

    @property
    def label(self) -> str:
        return f"{self.table}:{self.group_key}"


class SyncEngine:
    def __init__(
        self,
        local: LocalStore,
        remote: RemoteStore,
        *,
        page_size: int = 1000,
        freshness_window: timedelta = timedelta(hours=24),
        min_local_items: int = 100,
        grouping_keys: Sequence[str] = KNOWN_GROUPING_KEYS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._local = local
        self._remote = remote
        self._page_size = page_size
        self._freshness_window = freshness_window
        self._min_local_items = min_local_items
        self._grouping_keys = tuple(key.strip().lower() for key in grouping_keys)
        self._clock = clock
        self._lock = threading.Lock()
        self._state = SyncState.IDLE

    @property
    def state(self) -> SyncState:
        return self._state

    def try_pull(self, *, force: bool = False) -> PullReport:
        """Run one pull cycle unless another is running or the cache is fresh."""
        if not self._lock.acquire(blocking=False):
            logger.info("Pull requested while a sync cycle is in progress; ignoring.")
            return PullReport(proceeded=False, skipped_reason="in_progress")
        try:
            if not force and self._is_fresh():
                logger.debug("Local cache is fresh; skipping pull.")
                return PullReport(proceeded=False, skipped_reason="fresh")
            return self._run_cycle(forced=force)
        finally:
            self._state = SyncState.IDLE
            self._lock.release()

    def refresh_if_stale(self) -> PullReport:
        return self.try_pull(force=False)

    def force_pull(self) -> PullReport:
        """Admin-initiated pull; grouping keys that failed are raised."""
        report = self.try_pull(force=True)
        if report.failed:
            raise SyncFailedError(report.failed)
        return report

    def ensure_bootstrapped(self) -> Optional[PullReport]:
        if self._local.items.count() > 0:
            return None
        logger.info("Local item cache is empty; running bootstrap pull.")
        return self.try_pull(force=True)

    def _is_fresh(self) -> bool:
        last_pull = self._local.last_pull_at()
        if last_pull is None:
            return False
        if self._clock() - last_pull >= self._freshness_window:
            return False
        return self._local.items.count() > self._min_local_items

    def _targets(self) -> List[_PullTarget]:
        targets = [
            _PullTarget("questions", "level", key, item_from_row, self._local.items)
            for key in self._grouping_keys
        ]
        targets.extend(
            _PullTarget("master_words", "stage", key, word_from_row, self._local.words)
            for key in self._grouping_keys
            if key in STAGE_IDS
        )
        return targets

    def _run_cycle(self, *, forced: bool) -> PullReport:
        report = PullReport(proceeded=True)
        for target in self._targets():
            self._state = SyncState.PULLING
            outcome = self._fetch_all(target)
            if isinstance(outcome, RemoteError):
                logger.warning("Pull for %s aborted: %s", target.label, outcome.reason)
                report.failed[target.label] = outcome.reason
                continue

            self._state = SyncState.MERGING
            records = []
            for row in outcome.value:
                try:
                    records.append(target.adapt(row))
                except (KeyError, TypeError, ValueError, ValidationError) as exc:
                    logger.warning("Skipping malformed %s row %s: %s", target.table, row.get("id"), exc)
            target.collection.put_many(records)
            report.pulled[target.label] = len(records)

        if not report.failed:
            report.completed_at = self._local.mark_pulled(self._clock())
        emit_event(
            "sync_cycle_completed",
            forced=forced,
            pulled=sum(report.pulled.values()),
            failed=sorted(report.failed),
        )
        return report

    def _fetch_all(self, target: _PullTarget) -> RemoteResult[List[Dict[str, Any]]]:
        rows: List[Dict[str, Any]] = []
        start = 0
        while True:
            outcome = self._remote.select_paged(
                target.table,
                {target.group_column: target.group_key},
                start,
                start + self._page_size - 1,
            )
            if isinstance(outcome, RemoteError):
                return outcome
            page = outcome.value
            rows.extend(page)
            if len(page) < self._page_size:
                return RemoteOk(rows)
            start += self._page_size


__all__ = ["PullReport", "SyncEngine", "SyncState"]
