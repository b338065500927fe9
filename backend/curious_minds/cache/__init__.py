"""In-memory caches shared across backend services."""

from .item_cache import ItemSetCache, item_set_cache

__all__ = ["ItemSetCache", "item_set_cache"]
