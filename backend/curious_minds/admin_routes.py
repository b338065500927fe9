"""Admin endpoints: content generation, registry sync, cloud sync, users and config."""

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from .constants import DEFAULT_SET_COUNT, MATH_BASE_PRESETS, math_level, vocabulary_stage
from .content_admin import StageSyncSummary
from .content_routes import require_known_key
from .errors import (
    DestructiveOperationError,
    DuplicateIdentityError,
    GenerationValidationError,
    RegistryError,
    SyncFailedError,
)
from .repositories.cache_state import AuditEvent
from .services import get_content_admin, get_local_store, get_offline_store, get_sync_engine
from .session_routes import SyncStatusPayload
from .system_config import SystemConfig
from .user_profile import UserProfile, UserRole

router = APIRouter(prefix="/api/admin", tags=["admin"])
logger = logging.getLogger(__name__)


class DrillGenerationRequest(BaseModel):
    base_numbers: Optional[Union[str, List[int]]] = None
    set_count: int = Field(default=DEFAULT_SET_COUNT, ge=1, le=500)


class GenerationResponse(BaseModel):
    level: str
    items: int
    sets: int


class MasterSyncResponse(BaseModel):
    words: int
    rebuilt: Dict[str, int] = Field(default_factory=dict)


class ClearLevelResponse(BaseModel):
    level: str
    removed: int
    remote_ok: bool
    remote_error: Optional[str] = None


class AdminUserRequest(BaseModel):
    id: Optional[str] = None
    username: str
    password: Optional[str] = None
    full_name: str = "User"
    role: UserRole = "student"
    active: bool = True
    allowed_modules: List[str] = Field(default_factory=list)
    institute: Optional[str] = None
    school: Optional[str] = None
    assigned_teacher_id: Optional[str] = None
    teacher_notes: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    grade: Optional[str] = None
    curriculum: Optional[str] = None


def _bad_gateway(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


def _unprocessable(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=message)


@router.post("/sync", response_model=SyncStatusPayload)
def force_sync() -> SyncStatusPayload:
    try:
        report = get_sync_engine().force_pull()
    except SyncFailedError as exc:
        raise _bad_gateway(exc) from exc
    return SyncStatusPayload.from_report(report)


@router.post("/refresh", response_model=SyncStatusPayload)
def refresh_if_stale() -> SyncStatusPayload:
    return SyncStatusPayload.from_report(get_sync_engine().refresh_if_stale())


@router.post("/math/{level}/generate", response_model=GenerationResponse, status_code=status.HTTP_201_CREATED)
def generate_math_bank(level: str, payload: DrillGenerationRequest) -> GenerationResponse:
    known = math_level(level)
    if known is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown math level '{level}'.")
    base_numbers = payload.base_numbers if payload.base_numbers is not None else MATH_BASE_PRESETS[known.id]
    try:
        items = get_content_admin().generate_drill_bank(known.id, base_numbers, payload.set_count)
    except GenerationValidationError as exc:
        raise _unprocessable(str(exc)) from exc
    return GenerationResponse(level=known.id, items=len(items), sets=payload.set_count)


def _require_stage(stage: str) -> str:
    known = vocabulary_stage(stage)
    if known is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown stage '{stage}'.")
    return known.id


@router.post("/vocabulary/{stage}/sync", response_model=StageSyncSummary)
def sync_vocabulary_stage(stage: str) -> StageSyncSummary:
    stage_id = _require_stage(stage)
    try:
        return get_content_admin().sync_stage_from_registry(stage_id)
    except RegistryError as exc:
        raise _bad_gateway(exc) from exc


@router.post("/vocabulary/{stage}/rebuild", response_model=GenerationResponse, status_code=status.HTTP_201_CREATED)
def rebuild_vocabulary_stage(stage: str) -> GenerationResponse:
    stage_id = _require_stage(stage)
    try:
        items = get_content_admin().rebuild_vocabulary_sets(stage_id)
    except GenerationValidationError as exc:
        raise _unprocessable(str(exc)) from exc
    return GenerationResponse(level=stage_id, items=len(items), sets=len({item.set_id for item in items}))


@router.post("/vocabulary/master-sync", response_model=MasterSyncResponse)
def sync_master_registry(rebuild: bool = Query(default=True)) -> MasterSyncResponse:
    admin = get_content_admin()
    try:
        words = admin.sync_master_registry()
    except RegistryError as exc:
        raise _bad_gateway(exc) from exc
    rebuilt = admin.rebuild_all_vocabulary_sets() if rebuild else {}
    return MasterSyncResponse(words=words, rebuilt=rebuilt)


@router.delete("/levels/{level}", response_model=ClearLevelResponse)
def clear_level(level: str) -> ClearLevelResponse:
    key = require_known_key(level)
    outcome = get_offline_store().clear_level(key)
    if not outcome.remote_ok:
        logger.warning("Level %s cleared locally only: %s", key, outcome.remote_error)
    return ClearLevelResponse(
        level=outcome.level,
        removed=outcome.removed,
        remote_ok=outcome.remote_ok,
        remote_error=outcome.remote_error,
    )


@router.get("/users", response_model=List[UserProfile])
def list_users() -> List[UserProfile]:
    return get_offline_store().list_users()


@router.put("/users", response_model=UserProfile)
def save_user(payload: AdminUserRequest) -> UserProfile:
    username = payload.username.strip().upper()
    if not username:
        raise _unprocessable("Username is required.")
    store = get_offline_store()
    existing = store.get_user(payload.id) if payload.id else None
    password = (payload.password or "").strip() or (existing.password if existing else None)
    if not password:
        raise _unprocessable("A password is required for new accounts.")
    profile = UserProfile(
        **payload.model_dump(exclude={"id", "username", "password"}),
        id=payload.id or str(uuid.uuid4()),
        username=username,
        password=password,
    )
    try:
        return store.save_user(profile)
    except DuplicateIdentityError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str) -> None:
    try:
        get_offline_store().delete_user(user_id)
    except DestructiveOperationError as exc:
        raise _bad_gateway(exc) from exc


@router.get("/config", response_model=SystemConfig)
def get_config() -> SystemConfig:
    return get_offline_store().get_config()


@router.put("/config", response_model=SystemConfig)
def update_config(payload: SystemConfig) -> SystemConfig:
    return get_offline_store().update_config(payload)


@router.get("/audit", response_model=List[AuditEvent])
def recent_audit_events(limit: int = Query(default=50, ge=1, le=500)) -> List[AuditEvent]:
    return get_local_store().recent_audit_events(limit)


__all__ = ["router"]
