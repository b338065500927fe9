"""Process-wide service instances, created lazily from settings."""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from .config import get_settings
from .content_admin import ContentAdmin
from .identity_merge import IdentityMergeResolver
from .local_store import LocalStore
from .offline_first import OfflineFirstStore
from .remote_store import RemoteStore, build_remote_store
from .sync_engine import SyncEngine

_local_store: Optional[LocalStore] = None
_remote_store: Optional[RemoteStore] = None
_offline_store: Optional[OfflineFirstStore] = None
_sync_engine: Optional[SyncEngine] = None
_content_admin: Optional[ContentAdmin] = None
_identity_resolver: Optional[IdentityMergeResolver] = None


def get_local_store() -> LocalStore:
    global _local_store
    if _local_store is None:
        _local_store = LocalStore().open()
    return _local_store


def get_remote_store() -> RemoteStore:
    global _remote_store
    if _remote_store is None:
        _remote_store = build_remote_store(get_settings())
    return _remote_store


def get_offline_store() -> OfflineFirstStore:
    global _offline_store
    if _offline_store is None:
        settings = get_settings()
        _offline_store = OfflineFirstStore(
            get_local_store(),
            get_remote_store(),
            question_batch_size=settings.question_push_batch_size,
            registry_batch_size=settings.registry_push_batch_size,
            webhook_timeout_seconds=settings.remote_timeout_seconds,
        )
    return _offline_store


def get_sync_engine() -> SyncEngine:
    global _sync_engine
    if _sync_engine is None:
        settings = get_settings()
        _sync_engine = SyncEngine(
            get_local_store(),
            get_remote_store(),
            page_size=settings.sync_page_size,
            freshness_window=timedelta(hours=settings.sync_freshness_hours),
            min_local_items=settings.sync_min_local_items,
        )
    return _sync_engine


def get_content_admin() -> ContentAdmin:
    global _content_admin
    if _content_admin is None:
        _content_admin = ContentAdmin(
            get_offline_store(),
            registry_timeout_seconds=get_settings().remote_timeout_seconds,
        )
    return _content_admin


def get_identity_resolver() -> IdentityMergeResolver:
    global _identity_resolver
    if _identity_resolver is None:
        _identity_resolver = IdentityMergeResolver(get_local_store(), get_remote_store())
    return _identity_resolver


def reset_services(*, remote: Optional[RemoteStore] = None) -> None:
    """Drop cached instances; an explicit remote replaces the configured one."""
    global _local_store, _remote_store, _offline_store, _sync_engine, _content_admin, _identity_resolver
    _local_store = None
    _remote_store = remote
    _offline_store = None
    _sync_engine = None
    _content_admin = None
    _identity_resolver = None


__all__ = [
    "get_content_admin",
    "get_identity_resolver",
    "get_local_store",
    "get_offline_store",
    "get_remote_store",
    "get_sync_engine",
    "reset_services",
]
