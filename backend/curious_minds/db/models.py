"""ORM models backing the on-device cache."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from .base import Base, TimestampMixin, utcnow

JSONType = JSON


class AssessmentItemModel(Base):
    __tablename__ = "questions"
    __table_args__ = (Index("ix_questions_level", "level"),)

    id: Mapped[str] = mapped_column(String(160), primary_key=True)
    level: Mapped[str] = mapped_column(String(64), nullable=False)
    set_id: Mapped[str] = mapped_column(String(32), nullable=False)
    item_index: Mapped[int] = mapped_column(Integer, nullable=False)
    sub_index: Mapped[str] = mapped_column(String(8), default="", nullable=False)
    prompt: Mapped[str] = mapped_column(Text, default="", nullable=False)
    answer: Mapped[str] = mapped_column(Text, default="", nullable=False)
    aux_definition: Mapped[str | None] = mapped_column(Text, nullable=True)
    aux_context: Mapped[str | None] = mapped_column(Text, nullable=True)
    stored_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class RegistryWordModel(Base):
    __tablename__ = "master_words"
    __table_args__ = (Index("ix_master_words_stage", "stage"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    stage: Mapped[str] = mapped_column(String(32), nullable=False)
    native_text: Mapped[str] = mapped_column(Text, nullable=False)
    english_gloss: Mapped[str] = mapped_column(Text, default="", nullable=False)
    secondary_gloss: Mapped[str] = mapped_column(Text, default="", nullable=False)
    stored_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class UserProfileModel(TimestampMixin, Base):
    __tablename__ = "users"
    __table_args__ = (Index("ix_users_username", "username", unique=True),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    username: Mapped[str] = mapped_column(String(128), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), default="User", nullable=False)
    role: Mapped[str] = mapped_column(String(16), default="student", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    allowed_modules: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
    institute: Mapped[str | None] = mapped_column(String(255))
    school: Mapped[str | None] = mapped_column(String(255))
    assigned_teacher_id: Mapped[str | None] = mapped_column(String(64))
    teacher_notes: Mapped[str | None] = mapped_column(Text)
    avatar_url: Mapped[str | None] = mapped_column(Text)
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(64))
    grade: Mapped[str | None] = mapped_column(String(64))
    curriculum: Mapped[str | None] = mapped_column(String(64))
    password: Mapped[str | None] = mapped_column(String(255))


class TestResultModel(Base):
    __tablename__ = "test_results"
    __table_args__ = (Index("ix_test_results_user", "user_id"),)
    __test__ = False

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    level: Mapped[str] = mapped_column(String(64), nullable=False)
    set_id: Mapped[str] = mapped_column(String(32), nullable=False)
    duration_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    speed_gap: Mapped[str | None] = mapped_column(String(32))
    correct_answers: Mapped[int] = mapped_column(Integer, nullable=False)
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    score_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    time_taken_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    raw_answers_snapshot: Mapped[str] = mapped_column(Text, default="[]", nullable=False)
    word_scores: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SystemConfigModel(TimestampMixin, Base):
    __tablename__ = "system_config"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    payload: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)


class LearningResourceModel(TimestampMixin, Base):
    __tablename__ = "resources"
    __table_args__ = (Index("ix_resources_timestamp", "timestamp"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    file_type: Mapped[str] = mapped_column(String(16), default="pdf", nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(128), default="General", nullable=False)
    size: Mapped[str] = mapped_column(String(64), default="N/A", nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class CacheStateModel(Base):
    """Small key/value rows: last successful pull, active session payload."""

    __tablename__ = "cache_state"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class CacheAuditEventModel(Base):
    __tablename__ = "cache_audit_events"
    __table_args__ = (Index("ix_cache_audit_events_created", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    payload: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    actor: Mapped[str | None] = mapped_column(String(128))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


__all__ = [
    "AssessmentItemModel",
    "CacheAuditEventModel",
    "CacheStateModel",
    "LearningResourceModel",
    "RegistryWordModel",
    "SystemConfigModel",
    "TestResultModel",
    "UserProfileModel",
]
