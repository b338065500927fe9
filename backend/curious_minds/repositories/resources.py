"""Repository for locally kept study resources."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db.base import as_utc
from ..db.models import CacheAuditEventModel, LearningResourceModel
from ..records import LearningResource

_RESOURCE_FIELDS = ("title", "description", "file_type", "url", "category", "size", "timestamp")


class LearningResourceRepository:
    def get(self, session: Session, resource_id: str) -> Optional[LearningResource]:
        model = session.get(LearningResourceModel, resource_id)
        return self._to_domain(model) if model else None

    def list(self, session: Session) -> List[LearningResource]:
        stmt = select(LearningResourceModel).order_by(LearningResourceModel.timestamp.desc(), LearningResourceModel.id)
        return [self._to_domain(model) for model in session.execute(stmt).scalars()]

    def upsert(self, session: Session, resource: LearningResource) -> LearningResource:
        model = session.get(LearningResourceModel, resource.id)
        if model is None:
            model = LearningResourceModel(id=resource.id)
            session.add(model)
        for field in _RESOURCE_FIELDS:
            setattr(model, field, getattr(resource, field))
        session.flush()
        return self._to_domain(model)

    def delete(self, session: Session, resource_id: str) -> bool:
        result = session.execute(delete(LearningResourceModel).where(LearningResourceModel.id == resource_id))
        removed = bool(result.rowcount)
        if removed:
            session.add(
                CacheAuditEventModel(event_type="resource_delete", payload={"resource_id": resource_id}, actor="system")
            )
        return removed

    @staticmethod
    def _to_domain(model: LearningResourceModel) -> LearningResource:
        return LearningResource(
            id=model.id,
            title=model.title,
            description=model.description,
            file_type=model.file_type,
            url=model.url,
            category=model.category,
            size=model.size,
            timestamp=as_utc(model.timestamp),
        )


learning_resources = LearningResourceRepository()

__all__ = ["LearningResourceRepository", "learning_resources"]
