"""Offline-first read/write facade over the local and remote stores.

Writes land in the local store first and are then propagated to the remote
store. Remote failures are logged and reported through telemetry, and the
local write stands. The exceptions are admin-only destructive deletes, where
a remote failure is raised so the operator knows the stores may disagree.
Level clears stay non-fatal but report the remote outcome to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from .errors import DestructiveOperationError, DuplicateIdentityError, ResultAlreadyRecordedError
from .local_store import LocalStore
from .records import AssessmentItem, RegistryWord, TestResult
from .remote_rows import item_to_row, result_to_row, user_from_row, user_to_row, word_to_row
from .remote_store import RemoteError, RemoteStore
from .result_webhook import post_vocabulary_result
from .system_config import SYSTEM_CONFIG_ID, SystemConfig
from .telemetry import emit_event
from .user_profile import UserProfile

logger = logging.getLogger(__name__)

_USER_PAGE_SIZE = 1000


@dataclass(frozen=True)
class LevelClearOutcome:
    """Local removal count plus whether the remote copy was cleared too."""

    level: str
    removed: int
    remote_ok: bool
    remote_error: Optional[str] = None


class OfflineFirstStore:
    def __init__(
        self,
        local: LocalStore,
        remote: RemoteStore,
        *,
        question_batch_size: int = 1000,
        registry_batch_size: int = 500,
        webhook_timeout_seconds: float = 15.0,
        webhook_client: Optional[httpx.Client] = None,
    ) -> None:
        self._local = local
        self._remote = remote
        self._question_batch_size = question_batch_size
        self._registry_batch_size = registry_batch_size
        self._webhook_timeout = webhook_timeout_seconds
        self._webhook_client = webhook_client

    @property
    def local(self) -> LocalStore:
        return self._local

    # Reads

    def get_questions(self, level: Optional[str] = None) -> List[AssessmentItem]:
        if level:
            return self._local.items.get_by_group(level)
        return self._local.items.get_all()

    def get_registry_words(self, stage: str) -> List[RegistryWord]:
        return self._local.words.get_by_group(stage)

    def get_results(self, user_id: Optional[str] = None) -> List[TestResult]:
        return self._local.list_results(user_id)

    def get_users(self) -> List[UserProfile]:
        return self._local.list_users()

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        return self._local.get_user(user_id)

    def get_config(self) -> SystemConfig:
        return self._local.load_config()

    def list_users(self) -> List[UserProfile]:
        """Remote users merged with locally cached ones; remote wins per id."""
        merged: Dict[str, UserProfile] = {}
        remote_users = self._fetch_remote_users()
        if remote_users is not None:
            for profile in remote_users:
                merged[profile.id] = profile
        for profile in self._local.list_users():
            merged.setdefault(profile.id, profile)
        return sorted(merged.values(), key=lambda profile: (profile.full_name.lower(), profile.id))

    # Writes

    def save_questions(self, items: Iterable[AssessmentItem]) -> int:
        batch = list(items)
        if not batch:
            return 0
        stored = self._local.items.put_many(batch)
        self._push_batches("questions", [item_to_row(item) for item in batch], self._question_batch_size)
        return stored

    def save_registry_words(self, words: Iterable[RegistryWord]) -> int:
        batch = list(words)
        if not batch:
            return 0
        stored = self._local.words.put_many(batch)
        self._push_batches("master_words", [word_to_row(word) for word in batch], self._registry_batch_size)
        return stored

    def replace_registry_stage(self, stage: str, words: Sequence[RegistryWord]) -> int:
        """Swap one stage's registry words for a fresh fetch."""
        stored = self._local.words.replace_group(stage, words)
        outcome = self._remote.delete_where("master_words", {"stage": stage.strip().lower()})
        if isinstance(outcome, RemoteError):
            self._remote_failed("replace_registry_stage", outcome)
        self._push_batches("master_words", [word_to_row(word) for word in words], self._registry_batch_size)
        return stored

    def save_result(self, result: TestResult, user: Optional[UserProfile] = None) -> TestResult:
        if self._local.result_exists(result.id):
            raise ResultAlreadyRecordedError(f"Test result {result.id} has already been recorded.")
        stored = self._local.append_result(result)
        outcome = self._remote.upsert("test_results", [result_to_row(stored)], ignore_duplicates=True)
        if isinstance(outcome, RemoteError):
            self._remote_failed("save_result", outcome)
        if stored.is_vocabulary and stored.word_scores:
            config = self._local.load_config()
            post_vocabulary_result(
                config.google_sheets_url,
                stored,
                user,
                timeout_seconds=self._webhook_timeout,
                client=self._webhook_client,
            )
        return stored

    def save_user(self, profile: UserProfile) -> UserProfile:
        existing = self._local.get_user_by_username(profile.username)
        if existing is not None and existing.id != profile.id:
            raise DuplicateIdentityError(profile.username, existing.id)
        self._check_remote_username(profile)

        stored = self._local.save_user(profile)
        outcome = self._remote.upsert("users", [user_to_row(stored)])
        if isinstance(outcome, RemoteError):
            self._remote_failed("save_user", outcome)
        return stored

    def update_config(self, config: SystemConfig) -> SystemConfig:
        stored = self._local.save_config(config)
        outcome = self._remote.upsert("system_config", [{"id": SYSTEM_CONFIG_ID, **config.to_payload()}])
        if isinstance(outcome, RemoteError):
            self._remote_failed("update_config", outcome)
        return stored

    def clear_level(self, level: str) -> LevelClearOutcome:
        level_key = level.strip().lower()
        removed = self._local.items.delete_by_group(level_key)
        outcome = self._remote.delete_where("questions", {"level": level_key})
        remote_error = None
        if isinstance(outcome, RemoteError):
            self._remote_failed("clear_level", outcome)
            remote_error = outcome.reason
        emit_event("level_cleared", level=level_key, removed=removed, remote_ok=remote_error is None)
        return LevelClearOutcome(level_key, removed, remote_error is None, remote_error)

    def delete_user(self, user_id: str) -> bool:
        removed = self._local.delete_user(user_id)
        outcome = self._remote.delete_where("users", {"id": user_id})
        if isinstance(outcome, RemoteError):
            logger.error("Remote delete for user %s failed: %s", user_id, outcome.reason)
            raise DestructiveOperationError(
                f"User {user_id} was removed locally but the remote delete failed: {outcome.reason}"
            )
        emit_event("user_deleted", user_id=user_id, removed_locally=removed)
        return removed

    # Helpers

    def _push_batches(self, table: str, rows: List[Dict[str, Any]], batch_size: int) -> None:
        for start in range(0, len(rows), batch_size):
            outcome = self._remote.upsert(table, rows[start : start + batch_size])
            if isinstance(outcome, RemoteError):
                self._remote_failed(f"push_{table}", outcome)
                return

    def _fetch_remote_users(self) -> Optional[List[UserProfile]]:
        profiles: List[UserProfile] = []
        start = 0
        while True:
            outcome = self._remote.select_paged("users", {}, start, start + _USER_PAGE_SIZE - 1)
            if isinstance(outcome, RemoteError):
                logger.warning("Remote user listing failed; showing cached users only: %s", outcome.reason)
                return None
            profiles.extend(self._adapt_users(outcome.value))
            if len(outcome.value) < _USER_PAGE_SIZE:
                return profiles
            start += _USER_PAGE_SIZE

    def _check_remote_username(self, profile: UserProfile) -> None:
        outcome = self._remote.select_paged("users", {"username": profile.username}, 0, 0)
        if isinstance(outcome, RemoteError):
            logger.warning("Remote username check skipped for %s: %s", profile.username, outcome.reason)
            return
        for remote_profile in self._adapt_users(outcome.value):
            if remote_profile.id != profile.id:
                raise DuplicateIdentityError(profile.username, remote_profile.id)

    @staticmethod
    def _adapt_users(rows: Iterable[Dict[str, Any]]) -> List[UserProfile]:
        profiles: List[UserProfile] = []
        for row in rows:
            try:
                profiles.append(user_from_row(row))
            except (KeyError, ValueError, ValidationError) as exc:
                logger.warning("Skipping malformed remote user row %s: %s", row.get("id"), exc)
        return profiles

    def _remote_failed(self, operation: str, error: RemoteError) -> None:
        logger.warning("Remote %s failed; keeping local copy: %s", operation, error.reason)
        emit_event("remote_write_failed", operation=operation, reason=error.reason)


__all__ = ["LevelClearOutcome", "OfflineFirstStore"]
