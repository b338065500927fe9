"""Telemetry listener that keeps an audit trail of cache events in the local store."""

from __future__ import annotations

import logging
from typing import Set

from .db.session import session_scope
from .repositories.cache_state import audit_events
from .telemetry import TelemetryEvent, register_listener

logger = logging.getLogger(__name__)

MONITORED_EVENTS: Set[str] = {
    "level_cleared",
    "question_bank_generated",
    "registry_synced",
    "remote_write_failed",
    "sync_cycle_completed",
    "user_deleted",
}


def persist_event(event: TelemetryEvent) -> None:
    if event.name not in MONITORED_EVENTS:
        return
    try:
        with session_scope() as session:
            audit_events.record(session, event.name, dict(event.payload), actor="telemetry")
    except Exception:  # noqa: BLE001
        logger.exception("Failed to persist telemetry event %s", event.name)


def install() -> None:
    register_listener(persist_event)


__all__ = ["MONITORED_EVENTS", "install", "persist_event"]
