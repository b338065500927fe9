"""Durable on-device store for cached content, profiles, results and sync bookkeeping."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Generator, Generic, Iterable, List, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from .cache import ItemSetCache, item_set_cache
from .db.base import Base, utcnow
from .db.session import get_engine, session_scope
from .errors import LocalStoreUnavailableError
from .records import AssessmentItem, LearningResource, RegistryWord, TestResult
from .repositories.accounts import system_configs, test_results, user_profiles
from .repositories.cache_state import (
    ACTIVE_SESSION_KEY,
    LAST_PULL_KEY,
    AuditEvent,
    audit_events,
    cache_state,
)
from .repositories.content import assessment_items, registry_words
from .repositories.resources import learning_resources
from .system_config import SystemConfig, merge_with_defaults
from .user_profile import UserProfile

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", AssessmentItem, RegistryWord)


class GroupedCollection(Generic[RecordT]):
    """One indexed collection. Each call commits as a single transaction."""

    def __init__(self, store: "LocalStore", repository: Any, cache: Optional[ItemSetCache] = None) -> None:
        self._store = store
        self._repository = repository
        self._cache = cache

    def put_many(self, records: Iterable[RecordT]) -> int:
        batch = list(records)
        if not batch:
            return 0
        with self._store.scope() as session:
            stored = self._repository.put_many(session, batch)
        self._invalidate({getattr(record, self._repository.group_column) for record in batch})
        return stored

    def get_by_group(self, group_key: str) -> List[RecordT]:
        if self._cache is None:
            with self._store.scope(commit=False) as session:
                return self._repository.get_by_group(session, group_key)
        cached = self._cache.get(group_key)
        if cached is not None:
            return cached  # type: ignore[return-value]
        generation = self._cache.generation(group_key)
        with self._store.scope(commit=False) as session:
            records = self._repository.get_by_group(session, group_key)
        if not self._cache.set(group_key, records, generation=generation):
            logger.debug("Dropped cache fill for %s; a write landed during the read", group_key)
        return records

    def get_all(self) -> List[RecordT]:
        with self._store.scope(commit=False) as session:
            return self._repository.get_all(session)

    def delete_by_group(self, group_key: str) -> int:
        with self._store.scope() as session:
            removed = self._repository.delete_by_group(session, group_key)
        self._invalidate({group_key})
        return removed

    def replace_group(self, group_key: str, records: Iterable[RecordT]) -> int:
        """Delete a group and store its replacement in one transaction."""
        batch = list(records)
        with self._store.scope() as session:
            self._repository.delete_by_group(session, group_key)
            stored = self._repository.put_many(session, batch)
        self._invalidate({group_key, *(getattr(record, self._repository.group_column) for record in batch)})
        return stored

    def count(self) -> int:
        with self._store.scope(commit=False) as session:
            return self._repository.count(session)

    def _invalidate(self, group_keys: Iterable[str]) -> None:
        if self._cache is None:
            return
        for key in group_keys:
            self._cache.invalidate(key)


class LocalStore:
    """Facade over the SQLite cache.

    Opening the store is the only point where a missing or unwritable
    database is detected; :class:`LocalStoreUnavailableError` raised from
    here is fatal for the application.
    """

    def __init__(self, cache: Optional[ItemSetCache] = None) -> None:
        self._cache = cache if cache is not None else item_set_cache
        self.items: GroupedCollection[AssessmentItem] = GroupedCollection(self, assessment_items, self._cache)
        self.words: GroupedCollection[RegistryWord] = GroupedCollection(self, registry_words)
        self._opened = False

    def open(self) -> "LocalStore":
        try:
            engine = get_engine()
            Base.metadata.create_all(engine)
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("Unable to open the local cache")
            raise LocalStoreUnavailableError(f"Local store could not be opened: {exc}") from exc
        self._cache.clear()
        self._opened = True
        return self

    @contextmanager
    def scope(self, *, commit: bool = True) -> Generator[Session, None, None]:
        if not self._opened:
            self.open()
        try:
            with session_scope(commit=commit) as session:
                yield session
        except OperationalError as exc:
            raise LocalStoreUnavailableError(f"Local store operation failed: {exc}") from exc

    def ping(self) -> None:
        with self.scope(commit=False) as session:
            session.execute(text("SELECT 1"))

    # Users

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        with self.scope(commit=False) as session:
            return user_profiles.get(session, user_id)

    def get_user_by_username(self, username: str) -> Optional[UserProfile]:
        with self.scope(commit=False) as session:
            return user_profiles.get_by_username(session, username)

    def list_users(self) -> List[UserProfile]:
        with self.scope(commit=False) as session:
            return user_profiles.list(session)

    def save_user(self, profile: UserProfile) -> UserProfile:
        with self.scope() as session:
            return user_profiles.upsert(session, profile)

    def delete_user(self, user_id: str) -> bool:
        with self.scope() as session:
            return user_profiles.delete(session, user_id)

    # Results

    def append_result(self, result: TestResult) -> TestResult:
        with self.scope() as session:
            return test_results.append(session, result)

    def result_exists(self, result_id: str) -> bool:
        with self.scope(commit=False) as session:
            return test_results.exists(session, result_id)

    def list_results(self, user_id: Optional[str] = None) -> List[TestResult]:
        with self.scope(commit=False) as session:
            return test_results.list(session, user_id)

    # Resources

    def list_resources(self) -> List[LearningResource]:
        with self.scope(commit=False) as session:
            return learning_resources.list(session)

    def get_resource(self, resource_id: str) -> Optional[LearningResource]:
        with self.scope(commit=False) as session:
            return learning_resources.get(session, resource_id)

    def save_resource(self, resource: LearningResource) -> LearningResource:
        with self.scope() as session:
            return learning_resources.upsert(session, resource)

    def delete_resource(self, resource_id: str) -> bool:
        with self.scope() as session:
            return learning_resources.delete(session, resource_id)

    # Config

    def load_config(self) -> SystemConfig:
        with self.scope(commit=False) as session:
            stored = system_configs.get_payload(session)
        return merge_with_defaults(stored)

    def save_config(self, config: SystemConfig) -> SystemConfig:
        with self.scope() as session:
            system_configs.save(session, config)
        return merge_with_defaults(config.to_payload())

    # Sync bookkeeping

    def last_pull_at(self) -> Optional[datetime]:
        with self.scope(commit=False) as session:
            return cache_state.get_timestamp(session, LAST_PULL_KEY)

    def mark_pulled(self, when: Optional[datetime] = None) -> datetime:
        completed_at = when or utcnow()
        with self.scope() as session:
            cache_state.set_timestamp(session, LAST_PULL_KEY, completed_at)
        return completed_at

    # Active session

    def read_active_session(self) -> Optional[str]:
        with self.scope(commit=False) as session:
            return cache_state.get(session, ACTIVE_SESSION_KEY)

    def write_active_session(self, raw_payload: str) -> None:
        with self.scope() as session:
            cache_state.set(session, ACTIVE_SESSION_KEY, raw_payload)

    def clear_active_session(self) -> None:
        with self.scope() as session:
            cache_state.delete(session, ACTIVE_SESSION_KEY)

    # Audit and summaries

    def record_audit_event(self, event_type: str, payload: Dict[str, Any]) -> None:
        with self.scope() as session:
            audit_events.record(session, event_type, payload)

    def recent_audit_events(self, limit: int = 50) -> List[AuditEvent]:
        with self.scope(commit=False) as session:
            return audit_events.recent(session, limit)

    def item_set_counts(self) -> Dict[str, int]:
        with self.scope(commit=False) as session:
            return assessment_items.set_counts(session)

    def registry_word_counts(self) -> Dict[str, int]:
        with self.scope(commit=False) as session:
            return registry_words.word_counts(session)


__all__ = ["GroupedCollection", "LocalStore"]
