"""Session refresh: reconcile the cached profile with the remote copy."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .errors import DuplicateIdentityError
from .local_store import LocalStore
from .remote_rows import user_from_row
from .remote_store import RemoteError, RemoteStore
from .user_profile import UserProfile

logger = logging.getLogger(__name__)


def merge_profiles(local: UserProfile, remote: UserProfile) -> UserProfile:
    """Remote fields override local ones, except entitlements never revert to empty.

    Fields the remote copy leaves unset keep their local value.
    """
    payload: Dict[str, Any] = local.model_dump()
    for name, value in remote.model_dump().items():
        if value is not None:
            payload[name] = value
    if remote.allowed_modules:
        payload["allowed_modules"] = list(remote.allowed_modules)
    elif local.allowed_modules:
        payload["allowed_modules"] = list(local.allowed_modules)
    else:
        payload["allowed_modules"] = []
    return UserProfile.model_validate(payload)


def _matching_row(local: UserProfile, rows: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Pick the remote row for this profile; an id match beats a username match.

    Two rows that match on different fields belong to different accounts. The
    id row is the user's own; without one the lookup is ambiguous.
    """
    if len(rows) <= 1:
        return rows[0] if rows else None
    for row in rows:
        if str(row.get("id")) == local.id:
            logger.warning("Username %s is held by another remote account; using id %s", local.username, local.id)
            return row
    logger.warning("Ambiguous remote profile for %s; keeping the local copy", local.username)
    return None


class IdentityMergeResolver:
    def __init__(self, local: LocalStore, remote: RemoteStore) -> None:
        self._local = local
        self._remote = remote

    def start_session(self, profile: UserProfile) -> UserProfile:
        self._local.write_active_session(profile.model_dump_json())
        self._cache_profile(profile, previous_id=None)
        return profile

    def current_session(self) -> Optional[UserProfile]:
        return self._load_local()

    def end_session(self) -> None:
        self._local.clear_active_session()

    def refresh_session(self) -> Optional[UserProfile]:
        """Merge the active profile with the remote row matching its id or username.

        Returns ``None`` when there is no usable local session. The merged
        profile is written locally only.
        """
        local = self._load_local()
        if local is None:
            return None

        outcome = self._remote.select_paged(
            "users",
            {"id": local.id, "username": local.username},
            0,
            1,
            match_any=True,
        )
        if isinstance(outcome, RemoteError):
            logger.warning("Profile refresh for %s kept the local copy: %s", local.username, outcome.reason)
            return local
        row = _matching_row(local, outcome.value)
        if row is None:
            return local
        try:
            remote = user_from_row(row)
        except (KeyError, ValueError, ValidationError) as exc:
            logger.warning("Remote profile for %s could not be parsed; keeping local copy: %s", local.username, exc)
            return local

        merged = merge_profiles(local, remote)
        self._local.write_active_session(merged.model_dump_json())
        self._cache_profile(merged, previous_id=local.id)
        return merged

    def _load_local(self) -> Optional[UserProfile]:
        raw = self._local.read_active_session()
        if raw is None:
            return None
        try:
            return UserProfile.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Stored session is unreadable; clearing it: %s", exc)
            self._local.clear_active_session()
            return None

    def _cache_profile(self, profile: UserProfile, *, previous_id: Optional[str]) -> None:
        if previous_id is not None and previous_id != profile.id:
            self._local.delete_user(previous_id)
        try:
            self._local.save_user(profile)
        except DuplicateIdentityError as exc:
            logger.warning("Cached profile list not updated for %s: %s", profile.username, exc)


__all__ = ["IdentityMergeResolver", "merge_profiles"]
