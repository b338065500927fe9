"""Repositories for the two grouped content collections: questions and master words."""

from __future__ import annotations

from typing import Any, Dict, Generic, Iterable, List, Sequence, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ..db.models import AssessmentItemModel, CacheAuditEventModel, RegistryWordModel
from ..records import AssessmentItem, RegistryWord

# Keeps IN (...) lists under SQLite's bound-parameter limit.
_ID_CHUNK_SIZE = 500

RecordT = TypeVar("RecordT", AssessmentItem, RegistryWord)


def _normalize_group_key(group_key: str) -> str:
    normalized = group_key.strip().lower()
    if not normalized:
        raise ValueError("Grouping key cannot be empty.")
    return normalized


def _chunks(values: Sequence[str], size: int = _ID_CHUNK_SIZE) -> Iterable[Sequence[str]]:
    for start in range(0, len(values), size):
        yield values[start : start + size]


class _GroupedCollectionRepository(Generic[RecordT]):
    """Upsert-by-id storage with a secondary grouping-key index.

    Every method runs inside the caller's session; the caller's transaction
    boundary is what makes a put or delete batch atomic.
    """

    model: Type[Any]
    group_column: str
    collection: str

    def put_many(self, session: Session, records: Iterable[RecordT]) -> int:
        latest: Dict[str, RecordT] = {}
        for record in records:
            latest[record.id] = record
        if not latest:
            return 0
        ids = list(latest)
        for chunk in _chunks(ids):
            session.execute(delete(self.model).where(self.model.id.in_(chunk)))
        session.add_all(self._to_model(record) for record in latest.values())
        session.flush()
        return len(latest)

    def get_by_group(self, session: Session, group_key: str) -> List[RecordT]:
        key = _normalize_group_key(group_key)
        column = getattr(self.model, self.group_column)
        stmt = select(self.model).where(column == key).order_by(self.model.id)
        return [self._to_domain(model) for model in session.execute(stmt).scalars()]

    def get_all(self, session: Session) -> List[RecordT]:
        stmt = select(self.model).order_by(self.model.id)
        return [self._to_domain(model) for model in session.execute(stmt).scalars()]

    def delete_by_group(self, session: Session, group_key: str) -> int:
        key = _normalize_group_key(group_key)
        column = getattr(self.model, self.group_column)
        ids = list(session.execute(select(self.model.id).where(column == key)).scalars())
        for chunk in _chunks(ids):
            session.execute(delete(self.model).where(self.model.id.in_(chunk)))
        session.flush()
        if ids:
            self._record_audit(session, f"{self.collection}_group_deleted", {"group": key, "count": len(ids)})
        return len(ids)

    def count(self, session: Session) -> int:
        return int(session.execute(select(func.count()).select_from(self.model)).scalar_one())

    def _record_audit(self, session: Session, event_type: str, payload: Dict[str, Any]) -> None:
        session.add(CacheAuditEventModel(event_type=event_type, payload=payload, actor="system"))

    def _to_model(self, record: RecordT) -> Any:  # pragma: no cover - abstract
        raise NotImplementedError

    def _to_domain(self, model: Any) -> RecordT:  # pragma: no cover - abstract
        raise NotImplementedError


class AssessmentItemRepository(_GroupedCollectionRepository[AssessmentItem]):
    model = AssessmentItemModel
    group_column = "level"
    collection = "questions"

    def set_counts(self, session: Session) -> Dict[str, int]:
        stmt = select(
            AssessmentItemModel.level,
            func.count(func.distinct(AssessmentItemModel.set_id)),
        ).group_by(AssessmentItemModel.level)
        return {level: int(total) for level, total in session.execute(stmt)}

    def _to_model(self, record: AssessmentItem) -> AssessmentItemModel:
        return AssessmentItemModel(
            id=record.id,
            level=record.level,
            set_id=record.set_id,
            item_index=record.item_index,
            sub_index=record.sub_index,
            prompt=record.prompt,
            answer=record.answer,
            aux_definition=record.aux_definition,
            aux_context=record.aux_context,
        )

    def _to_domain(self, model: AssessmentItemModel) -> AssessmentItem:
        return AssessmentItem(
            id=model.id,
            level=model.level,
            set_id=model.set_id,
            item_index=model.item_index,
            sub_index=model.sub_index or "",
            prompt=model.prompt,
            answer=model.answer,
            aux_definition=model.aux_definition,
            aux_context=model.aux_context,
        )


class RegistryWordRepository(_GroupedCollectionRepository[RegistryWord]):
    model = RegistryWordModel
    group_column = "stage"
    collection = "master_words"

    def word_counts(self, session: Session) -> Dict[str, int]:
        stmt = select(RegistryWordModel.stage, func.count(RegistryWordModel.id)).group_by(RegistryWordModel.stage)
        return {stage: int(total) for stage, total in session.execute(stmt)}

    def _to_model(self, record: RegistryWord) -> RegistryWordModel:
        return RegistryWordModel(
            id=record.id,
            stage=record.stage,
            native_text=record.native_text,
            english_gloss=record.english_gloss,
            secondary_gloss=record.secondary_gloss,
        )

    def _to_domain(self, model: RegistryWordModel) -> RegistryWord:
        return RegistryWord(
            id=model.id,
            stage=model.stage,
            native_text=model.native_text,
            english_gloss=model.english_gloss or "",
            secondary_gloss=model.secondary_gloss or "",
        )


assessment_items = AssessmentItemRepository()
registry_words = RegistryWordRepository()

__all__ = [
    "AssessmentItemRepository",
    "RegistryWordRepository",
    "assessment_items",
    "registry_words",
]
