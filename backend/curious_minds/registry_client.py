"""Client for the external vocabulary registry (a spreadsheet web app)."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from .constants import vocabulary_stage
from .errors import RegistryError
from .records import RegistryWord
from .remote_rows import word_from_registry_entry

logger = logging.getLogger(__name__)


def stage_number(stage: str) -> int:
    known = vocabulary_stage(stage)
    if known is not None:
        return known.number
    suffix = stage.strip().lower().rsplit("-", 1)[-1]
    if not suffix.isdigit():
        raise RegistryError(f"Unknown vocabulary stage: {stage}")
    return int(suffix)


class RegistryClient:
    def __init__(
        self,
        endpoint: Optional[str],
        *,
        timeout_seconds: float = 15.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._endpoint = (endpoint or "").strip()
        self._timeout = timeout_seconds
        self._client = client

    def fetch_stage(self, stage: str) -> List[RegistryWord]:
        """Fetch one stage's words in registry order."""
        if not self._endpoint:
            raise RegistryError("registry URL is not configured")
        stage_key = stage.strip().lower()
        number = stage_number(stage_key)
        params = {"action": "getQuestions", "stage": str(number)}

        local_client = self._client or httpx.Client(timeout=self._timeout, follow_redirects=True)
        close_client = self._client is None
        try:
            response = local_client.get(self._endpoint, params=params)
            response.raise_for_status()
            payload: Any = response.json()
        except httpx.HTTPError as exc:
            raise RegistryError(f"Registry request for {stage_key} failed: {exc}") from exc
        except ValueError as exc:
            raise RegistryError(f"Registry returned invalid JSON for {stage_key}: {exc}") from exc
        finally:
            if close_client:
                local_client.close()

        if not isinstance(payload, dict):
            raise RegistryError(f"Registry returned an unexpected payload for {stage_key}.")
        error = payload.get("error")
        if error:
            raise RegistryError(f"Registry error for {stage_key}: {error}")
        entries = payload.get("questions")
        if not isinstance(entries, list):
            raise RegistryError(f"Registry payload for {stage_key} has no questions list.")

        words = [
            word_from_registry_entry(stage_key, ordinal, entry)
            for ordinal, entry in enumerate((e for e in entries if isinstance(e, dict)), start=1)
        ]
        logger.info("Fetched %d registry words for %s", len(words), stage_key)
        return words


__all__ = ["RegistryClient", "stage_number"]
