"""Read-through cache of assessment items per grouping key."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, List, Optional

from ..records import AssessmentItem


def _normalize_key(group_key: str) -> str:
    normalized = group_key.strip().lower()
    if not normalized:
        raise ValueError("Grouping key cannot be empty when caching items.")
    return normalized


@dataclass
class _ItemSetEntry:
    items: List[AssessmentItem]
    cached_at: datetime


class ItemSetCache:
    """Process-local copy of the items stored under each grouping key.

    Every invalidation bumps a per-key generation. A reader takes the
    generation before it queries the database and hands it back to
    :meth:`set`; a fill whose generation has moved on is dropped, so rows
    read before a concurrent write never land in the cache.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, _ItemSetEntry] = {}
        self._generations: Dict[str, int] = {}
        self._epoch = 0
        self._lock = RLock()

    def generation(self, group_key: str) -> tuple[int, int]:
        key = _normalize_key(group_key)
        with self._lock:
            return self._epoch, self._generations.get(key, 0)

    def get(self, group_key: str) -> Optional[List[AssessmentItem]]:
        key = _normalize_key(group_key)
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        return [item.model_copy(deep=True) for item in entry.items]

    def set(
        self,
        group_key: str,
        items: List[AssessmentItem],
        *,
        generation: Optional[tuple[int, int]] = None,
    ) -> bool:
        key = _normalize_key(group_key)
        payload = [item.model_copy(deep=True) for item in items]
        with self._lock:
            if generation is not None and generation != (self._epoch, self._generations.get(key, 0)):
                return False
            self._entries[key] = _ItemSetEntry(items=payload, cached_at=datetime.now(timezone.utc))
        return True

    def invalidate(self, group_key: str) -> None:
        key = _normalize_key(group_key)
        with self._lock:
            self._entries.pop(key, None)
            self._generations[key] = self._generations.get(key, 0) + 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._epoch += 1


item_set_cache = ItemSetCache()

__all__ = ["ItemSetCache", "item_set_cache"]
