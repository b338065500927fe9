from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

import pytest

from curious_minds import services
from curious_minds.cache import ItemSetCache
from curious_minds.config import get_settings
from curious_minds.db.session import dispose_engine
from curious_minds.local_store import LocalStore
from curious_minds.remote_store import RemoteError, RemoteOk


class FakeRemoteStore:
    """In-memory tables that answer like the hosted store."""

    def __init__(self) -> None:
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: Dict[str, int] = {"select_paged": 0, "upsert": 0, "delete_where": 0}
        self.requests: List[Tuple[str, Dict[str, Any], int, int]] = []
        self.offline = False
        self.failing_keys: Set[str] = set()
        self.failing_operations: Set[str] = set()
        self.on_select: Optional[Callable[[], None]] = None

    def seed(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        target = self.tables.setdefault(table, {})
        for row in rows:
            target[str(row["id"])] = dict(row)

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return [self.tables.get(table, {})[key] for key in sorted(self.tables.get(table, {}))]

    def _failure(self, operation: str, filters: Mapping[str, Any]) -> Optional[RemoteError]:
        if self.offline:
            return RemoteError("remote unreachable")
        if operation in self.failing_operations:
            return RemoteError(f"{operation} rejected", status_code=500)
        if any(str(value) in self.failing_keys for value in filters.values()):
            return RemoteError("statement timeout", status_code=500)
        return None

    @staticmethod
    def _matches(row: Mapping[str, Any], filters: Mapping[str, Any], match_any: bool) -> bool:
        if not filters:
            return True
        checks = [row.get(column) == value for column, value in filters.items()]
        return any(checks) if match_any else all(checks)

    def select_paged(
        self,
        table: str,
        filters: Mapping[str, Any],
        range_start: int,
        range_end: int,
        *,
        match_any: bool = False,
    ):
        self.calls["select_paged"] += 1
        self.requests.append((table, dict(filters), range_start, range_end))
        if self.on_select is not None:
            self.on_select()
        failure = self._failure("select_paged", filters)
        if failure is not None:
            return failure
        matching = [row for row in self.rows(table) if self._matches(row, filters, match_any)]
        return RemoteOk([dict(row) for row in matching[range_start : range_end + 1]])

    def upsert(self, table: str, rows: Sequence[Mapping[str, Any]], *, ignore_duplicates: bool = False):
        self.calls["upsert"] += 1
        failure = self._failure("upsert", {})
        if failure is not None:
            return failure
        target = self.tables.setdefault(table, {})
        for row in rows:
            key = str(row["id"])
            if key in target and ignore_duplicates:
                continue
            target[key] = {**target.get(key, {}), **dict(row)}
        return RemoteOk(len(rows))

    def delete_where(self, table: str, filters: Mapping[str, Any]):
        self.calls["delete_where"] += 1
        failure = self._failure("delete_where", filters)
        if failure is not None:
            return failure
        target = self.tables.get(table, {})
        for key in [key for key, row in target.items() if self._matches(row, filters, False)]:
            del target[key]
        return RemoteOk(None)


def _reset_process_state() -> None:
    get_settings.cache_clear()
    dispose_engine()
    services.reset_services()


@pytest.fixture
def cache_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    db_path = tmp_path / "cache" / "curious_minds.db"
    monkeypatch.setenv("CURIOUS_LOCAL_DATABASE_URL", f"sqlite:///{db_path}")
    monkeypatch.delenv("CURIOUS_SUPABASE_URL", raising=False)
    monkeypatch.delenv("CURIOUS_SUPABASE_ANON_KEY", raising=False)
    _reset_process_state()
    yield db_path
    _reset_process_state()


@pytest.fixture
def local_store(cache_db: Path) -> LocalStore:
    return LocalStore(cache=ItemSetCache()).open()


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()
