"""Repositories for user profiles, test results and the system config row."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db.base import as_utc
from ..db.models import CacheAuditEventModel, SystemConfigModel, TestResultModel, UserProfileModel
from ..errors import DuplicateIdentityError, ResultAlreadyRecordedError
from ..records import TestResult
from ..system_config import SYSTEM_CONFIG_ID, SystemConfig
from ..user_profile import UserProfile, normalize_username

_PROFILE_FIELDS = (
    "username",
    "full_name",
    "role",
    "active",
    "allowed_modules",
    "institute",
    "school",
    "assigned_teacher_id",
    "teacher_notes",
    "avatar_url",
    "email",
    "phone",
    "grade",
    "curriculum",
    "password",
)


def _record_audit(session: Session, event_type: str, payload: Dict[str, Any]) -> None:
    session.add(CacheAuditEventModel(event_type=event_type, payload=payload, actor="system"))


class UserProfileRepository:
    """Locally cached user profiles, unique on the normalised username."""

    def get(self, session: Session, user_id: str) -> Optional[UserProfile]:
        model = session.get(UserProfileModel, user_id)
        return self._to_domain(model) if model else None

    def get_by_username(self, session: Session, username: str) -> Optional[UserProfile]:
        normalized = normalize_username(username)
        stmt = select(UserProfileModel).where(UserProfileModel.username == normalized)
        model = session.execute(stmt).scalar_one_or_none()
        return self._to_domain(model) if model else None

    def list(self, session: Session) -> List[UserProfile]:
        stmt = select(UserProfileModel).order_by(UserProfileModel.full_name, UserProfileModel.id)
        return [self._to_domain(model) for model in session.execute(stmt).scalars()]

    def upsert(self, session: Session, profile: UserProfile) -> UserProfile:
        stmt = select(UserProfileModel).where(UserProfileModel.username == profile.username)
        holder = session.execute(stmt).scalar_one_or_none()
        if holder is not None and holder.id != profile.id:
            raise DuplicateIdentityError(profile.username, holder.id)

        model = holder or session.get(UserProfileModel, profile.id)
        if model is None:
            model = UserProfileModel(id=profile.id)
            session.add(model)
        for field in _PROFILE_FIELDS:
            value = getattr(profile, field)
            setattr(model, field, list(value) if isinstance(value, list) else value)
        session.flush()
        _record_audit(session, "user_upsert", {"user_id": profile.id, "username": profile.username})
        return self._to_domain(model)

    def delete(self, session: Session, user_id: str) -> bool:
        result = session.execute(delete(UserProfileModel).where(UserProfileModel.id == user_id))
        removed = bool(result.rowcount)
        if removed:
            _record_audit(session, "user_delete", {"user_id": user_id})
        return removed

    def _to_domain(self, model: UserProfileModel) -> UserProfile:
        payload = {field: getattr(model, field) for field in _PROFILE_FIELDS}
        payload["allowed_modules"] = list(model.allowed_modules or [])
        return UserProfile(id=model.id, **payload)


class TestResultRepository:
    __test__ = False

    def append(self, session: Session, result: TestResult) -> TestResult:
        if session.get(TestResultModel, result.id) is not None:
            raise ResultAlreadyRecordedError(f"Test result {result.id} has already been recorded.")
        model = TestResultModel(
            id=result.id,
            user_id=result.user_id,
            level=result.level,
            set_id=result.set_id,
            duration_minutes=result.duration_minutes,
            speed_gap=result.speed_gap,
            correct_answers=result.correct_answers,
            total_questions=result.total_questions,
            score_percentage=result.score_percentage,
            time_taken_seconds=result.time_taken_seconds,
            completed=result.completed,
            raw_answers_snapshot=result.raw_answers_snapshot,
            word_scores=list(result.word_scores) if result.word_scores is not None else None,
            timestamp=result.timestamp,
        )
        session.add(model)
        session.flush()
        return self._to_domain(model)

    def exists(self, session: Session, result_id: str) -> bool:
        return session.get(TestResultModel, result_id) is not None

    def list(self, session: Session, user_id: Optional[str] = None) -> List[TestResult]:
        stmt = select(TestResultModel)
        if user_id is not None:
            stmt = stmt.where(TestResultModel.user_id == user_id)
        stmt = stmt.order_by(TestResultModel.timestamp.desc(), TestResultModel.id)
        return [self._to_domain(model) for model in session.execute(stmt).scalars()]

    def _to_domain(self, model: TestResultModel) -> TestResult:
        return TestResult(
            id=model.id,
            user_id=model.user_id,
            level=model.level,
            set_id=model.set_id,
            duration_minutes=model.duration_minutes,
            speed_gap=model.speed_gap,
            correct_answers=model.correct_answers,
            total_questions=model.total_questions,
            score_percentage=model.score_percentage,
            time_taken_seconds=model.time_taken_seconds,
            completed=model.completed,
            raw_answers_snapshot=model.raw_answers_snapshot,
            word_scores=model.word_scores,
            timestamp=as_utc(model.timestamp),
        )


class SystemConfigRepository:
    def get_payload(self, session: Session) -> Optional[Dict[str, Any]]:
        model = session.get(SystemConfigModel, SYSTEM_CONFIG_ID)
        return dict(model.payload) if model else None

    def save(self, session: Session, config: SystemConfig) -> None:
        model = session.get(SystemConfigModel, SYSTEM_CONFIG_ID)
        if model is None:
            model = SystemConfigModel(id=SYSTEM_CONFIG_ID)
            session.add(model)
        model.payload = config.to_payload()
        session.flush()
        _record_audit(session, "config_update", {"id": SYSTEM_CONFIG_ID})


user_profiles = UserProfileRepository()
test_results = TestResultRepository()
system_configs = SystemConfigRepository()

__all__ = [
    "SystemConfigRepository",
    "TestResultRepository",
    "UserProfileRepository",
    "system_configs",
    "test_results",
    "user_profiles",
]
