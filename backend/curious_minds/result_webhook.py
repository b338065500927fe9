"""Fire-and-forget forwarding of vocabulary results to the spreadsheet webhook."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .records import TestResult
from .user_profile import UserProfile

logger = logging.getLogger(__name__)


def webhook_payload(result: TestResult, user: Optional[UserProfile]) -> Dict[str, Any]:
    parts = result.level.split("-")
    stage = parts[1] if len(parts) > 1 and parts[1] else "1"
    return {
        "action": "saveResult",
        "code": user.username if user else "GUEST",
        "name": user.full_name if user else "Unknown",
        "timestamp": result.timestamp.isoformat(),
        "levelName": result.level,
        "stage": stage,
        "gap": result.speed_gap or "N/A",
        "set": result.set_id,
        "marks": result.correct_answers,
        "total": result.total_questions,
        "wordScores": result.word_scores,
    }


def post_vocabulary_result(
    url: Optional[str],
    result: TestResult,
    user: Optional[UserProfile] = None,
    *,
    timeout_seconds: float = 15.0,
    client: Optional[httpx.Client] = None,
) -> bool:
    """Post the flattened record; failures are logged and reported as ``False``."""
    if not url or not result.word_scores:
        return False
    local_client = client or httpx.Client(timeout=timeout_seconds, follow_redirects=True)
    close_client = client is None
    try:
        response = local_client.post(url, json=webhook_payload(result, user))
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Result webhook post failed for result=%s: %s", result.id, exc)
        return False
    finally:
        if close_client:
            local_client.close()
    return True


__all__ = ["post_vocabulary_result", "webhook_payload"]
