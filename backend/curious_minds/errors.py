"""Exception types raised by the cache layer."""

from __future__ import annotations


class CacheError(Exception):
    """Base class for cache layer failures."""


class LocalStoreUnavailableError(CacheError):
    """The on-device store could not be opened or queried."""


class GenerationValidationError(CacheError, ValueError):
    """Generation input was rejected before anything was written."""


class RegistryError(CacheError):
    """The external vocabulary registry failed or reported an error."""


class DuplicateIdentityError(CacheError):
    """A profile save would give an existing username to a different id."""

    def __init__(self, username: str, existing_id: str) -> None:
        super().__init__(f"Duplicate identifier: username {username} already belongs to another account.")
        self.username = username
        self.existing_id = existing_id


class DestructiveOperationError(CacheError):
    """The remote half of an admin delete failed; local and remote may disagree."""


class SyncFailedError(CacheError):
    """An admin-initiated pull could not refresh every grouping key."""

    def __init__(self, failed_keys: dict[str, str]) -> None:
        reasons = "; ".join(f"{key}: {reason}" for key, reason in sorted(failed_keys.items()))
        super().__init__(f"sync failed: {reasons}")
        self.failed_keys = dict(failed_keys)


class ResultAlreadyRecordedError(CacheError):
    """Test results are append-only; an id can only be saved once."""


__all__ = [
    "CacheError",
    "DestructiveOperationError",
    "DuplicateIdentityError",
    "GenerationValidationError",
    "LocalStoreUnavailableError",
    "RegistryError",
    "ResultAlreadyRecordedError",
    "SyncFailedError",
]
