"""Session-scoped repositories over the cache tables."""
