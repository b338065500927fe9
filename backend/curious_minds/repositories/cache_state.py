"""Key/value cache bookkeeping and the audit event log."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.base import as_utc
from ..db.models import CacheAuditEventModel, CacheStateModel

LAST_PULL_KEY = "last_pull_at"
ACTIVE_SESSION_KEY = "active_session"


class AuditEvent(BaseModel):
    event_type: str
    payload: Dict[str, Any]
    actor: Optional[str] = None
    created_at: datetime


class CacheStateRepository:
    def get(self, session: Session, key: str) -> Optional[str]:
        model = session.get(CacheStateModel, key)
        return model.value if model else None

    def set(self, session: Session, key: str, value: str) -> None:
        model = session.get(CacheStateModel, key)
        if model is None:
            session.add(CacheStateModel(key=key, value=value))
        else:
            model.value = value
        session.flush()

    def delete(self, session: Session, key: str) -> None:
        model = session.get(CacheStateModel, key)
        if model is not None:
            session.delete(model)
            session.flush()

    def get_timestamp(self, session: Session, key: str) -> Optional[datetime]:
        raw = self.get(session, key)
        if not raw:
            return None
        return as_utc(datetime.fromisoformat(raw))

    def set_timestamp(self, session: Session, key: str, value: datetime) -> None:
        self.set(session, key, as_utc(value).isoformat())


class AuditEventRepository:
    def record(self, session: Session, event_type: str, payload: Dict[str, Any], *, actor: str = "system") -> None:
        session.add(CacheAuditEventModel(event_type=event_type, payload=payload, actor=actor))
        session.flush()

    def recent(self, session: Session, limit: int = 50) -> List[AuditEvent]:
        stmt = select(CacheAuditEventModel).order_by(CacheAuditEventModel.created_at.desc()).limit(limit)
        return [
            AuditEvent(
                event_type=model.event_type,
                payload=dict(model.payload or {}),
                actor=model.actor,
                created_at=as_utc(model.created_at),
            )
            for model in session.execute(stmt).scalars()
        ]


cache_state = CacheStateRepository()
audit_events = AuditEventRepository()

__all__ = [
    "ACTIVE_SESSION_KEY",
    "AuditEvent",
    "AuditEventRepository",
    "CacheStateRepository",
    "LAST_PULL_KEY",
    "audit_events",
    "cache_state",
]
