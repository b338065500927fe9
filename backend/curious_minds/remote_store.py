"""Remote store adapter returning explicit result values instead of raising.

Every adapter call yields either :class:`RemoteOk` or :class:`RemoteError`.
Callers decide per call site whether a failure is logged and swallowed or
surfaced to an admin.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Mapping, Optional, Protocol, Sequence, TypeVar, Union

import httpx

from .config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

Row = Dict[str, Any]
Filters = Mapping[str, Any]


@dataclass(frozen=True)
class RemoteOk(Generic[T]):
    value: T


@dataclass(frozen=True)
class RemoteError:
    reason: str
    status_code: Optional[int] = None

    def __str__(self) -> str:
        return self.reason


RemoteResult = Union[RemoteOk[T], RemoteError]


class RemoteStore(Protocol):
    def select_paged(
        self,
        table: str,
        filters: Filters,
        range_start: int,
        range_end: int,
        *,
        match_any: bool = False,
    ) -> RemoteResult[List[Row]]:
        """Rows ``range_start`` through ``range_end`` inclusive, ordered by id."""
        ...

    def upsert(
        self,
        table: str,
        rows: Sequence[Row],
        *,
        ignore_duplicates: bool = False,
    ) -> RemoteResult[int]:
        ...

    def delete_where(self, table: str, filters: Filters) -> RemoteResult[None]:
        ...


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class SupabaseRemoteStore:
    """PostgREST client for the hosted Supabase project."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout_seconds: float = 15.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        self._timeout = timeout_seconds
        self._client = client

    def _endpoint(self, table: str) -> str:
        return f"{self._base_url}/rest/v1/{table}"

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json_body: Any = None,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> Union[httpx.Response, RemoteError]:
        headers = dict(self._headers)
        if extra_headers:
            headers.update(extra_headers)
        local_client = self._client or httpx.Client(timeout=self._timeout)
        close_client = self._client is None
        try:
            response = local_client.request(
                method,
                self._endpoint(table),
                params=params,
                json=json_body,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            return RemoteError(f"{method} {table} failed: {exc}")
        finally:
            if close_client:
                local_client.close()
        if response.status_code >= 400:
            return RemoteError(
                f"{method} {table} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    def select_paged(
        self,
        table: str,
        filters: Filters,
        range_start: int,
        range_end: int,
        *,
        match_any: bool = False,
    ) -> RemoteResult[List[Row]]:
        if range_end < range_start:
            return RemoteError(f"invalid range {range_start}-{range_end}")
        params: Dict[str, str] = {
            "select": "*",
            "order": "id.asc",
            "offset": str(range_start),
            "limit": str(range_end - range_start + 1),
        }
        if match_any and filters:
            clauses = ",".join(f"{column}.eq.{_filter_value(value)}" for column, value in filters.items())
            params["or"] = f"({clauses})"
        else:
            for column, value in filters.items():
                params[column] = f"eq.{_filter_value(value)}"
        outcome = self._request("GET", table, params=params)
        if isinstance(outcome, RemoteError):
            return outcome
        try:
            payload = outcome.json()
        except ValueError as exc:
            return RemoteError(f"GET {table} returned invalid JSON: {exc}")
        if not isinstance(payload, list):
            return RemoteError(f"GET {table} returned {type(payload).__name__}, expected a list")
        return RemoteOk([dict(row) for row in payload if isinstance(row, dict)])

    def upsert(
        self,
        table: str,
        rows: Sequence[Row],
        *,
        ignore_duplicates: bool = False,
    ) -> RemoteResult[int]:
        if not rows:
            return RemoteOk(0)
        resolution = "ignore-duplicates" if ignore_duplicates else "merge-duplicates"
        outcome = self._request(
            "POST",
            table,
            json_body=list(rows),
            extra_headers={"Prefer": f"resolution={resolution},return=minimal"},
        )
        if isinstance(outcome, RemoteError):
            return outcome
        return RemoteOk(len(rows))

    def delete_where(self, table: str, filters: Filters) -> RemoteResult[None]:
        if not filters:
            return RemoteError(f"refusing to delete from {table} without a filter")
        params = {column: f"eq.{_filter_value(value)}" for column, value in filters.items()}
        outcome = self._request("DELETE", table, params=params)
        if isinstance(outcome, RemoteError):
            return outcome
        return RemoteOk(None)


class OfflineRemoteStore:
    """Stand-in used when no remote project is configured; every call fails."""

    reason = "remote store is not configured"

    def select_paged(
        self,
        table: str,
        filters: Filters,
        range_start: int,
        range_end: int,
        *,
        match_any: bool = False,
    ) -> RemoteResult[List[Row]]:
        return RemoteError(self.reason)

    def upsert(self, table: str, rows: Sequence[Row], *, ignore_duplicates: bool = False) -> RemoteResult[int]:
        return RemoteError(self.reason)

    def delete_where(self, table: str, filters: Filters) -> RemoteResult[None]:
        return RemoteError(self.reason)


def build_remote_store(settings: Settings, *, client: Optional[httpx.Client] = None) -> RemoteStore:
    if not settings.remote_configured:
        logger.warning("Remote store credentials missing or invalid; running in local-only mode.")
        return OfflineRemoteStore()
    assert settings.supabase_url is not None and settings.supabase_anon_key is not None
    return SupabaseRemoteStore(
        settings.supabase_url,
        settings.supabase_anon_key,
        timeout_seconds=settings.remote_timeout_seconds,
        client=client,
    )


__all__ = [
    "OfflineRemoteStore",
    "RemoteError",
    "RemoteOk",
    "RemoteResult",
    "RemoteStore",
    "SupabaseRemoteStore",
    "build_remote_store",
]
