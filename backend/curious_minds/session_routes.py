"""Session lifecycle endpoints: start, refresh and end the active session."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from .services import get_identity_resolver, get_sync_engine
from .sync_engine import PullReport
from .user_profile import UserProfile

router = APIRouter(prefix="/api/session", tags=["session"])
logger = logging.getLogger(__name__)


class SyncStatusPayload(BaseModel):
    proceeded: bool
    skipped_reason: Optional[str] = None
    pulled: int = 0
    failed: List[str] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: PullReport) -> "SyncStatusPayload":
        return cls(
            proceeded=report.proceeded,
            skipped_reason=report.skipped_reason,
            pulled=sum(report.pulled.values()),
            failed=sorted(report.failed),
        )


class SessionPayload(BaseModel):
    profile: UserProfile
    sync: SyncStatusPayload


@router.post("/login", response_model=SessionPayload)
def start_session(profile: UserProfile) -> SessionPayload:
    """Store the authenticated profile as the active session, then refresh stale content."""
    stored = get_identity_resolver().start_session(profile)
    report = get_sync_engine().refresh_if_stale()
    return SessionPayload(profile=stored, sync=SyncStatusPayload.from_report(report))


@router.post("/refresh", response_model=SessionPayload)
def refresh_session() -> SessionPayload:
    profile = get_identity_resolver().refresh_session()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No active session.")
    report = get_sync_engine().refresh_if_stale()
    return SessionPayload(profile=profile, sync=SyncStatusPayload.from_report(report))


@router.get("/current", response_model=UserProfile)
def current_session() -> UserProfile:
    profile = get_identity_resolver().current_session()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No active session.")
    return profile


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def end_session() -> Response:
    get_identity_resolver().end_session()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["SessionPayload", "SyncStatusPayload", "router"]
