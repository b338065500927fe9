from __future__ import annotations

import json
from typing import Any, Dict, List

import httpx

from curious_minds.config import Settings
from curious_minds.remote_store import (
    OfflineRemoteStore,
    RemoteError,
    RemoteOk,
    SupabaseRemoteStore,
    build_remote_store,
)

BASE_URL = "https://project.supabase.co"


def _store(handler) -> SupabaseRemoteStore:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return SupabaseRemoteStore(BASE_URL, "anon-key", client=client)


def test_select_paged_sends_ordered_range() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": "novice-t1-q1-main", "level": "novice"}])

    outcome = _store(handler).select_paged("questions", {"level": "novice"}, 1000, 1999)

    assert isinstance(outcome, RemoteOk)
    assert outcome.value == [{"id": "novice-t1-q1-main", "level": "novice"}]
    request = seen[0]
    assert request.url.path == "/rest/v1/questions"
    assert request.url.params["order"] == "id.asc"
    assert request.url.params["offset"] == "1000"
    assert request.url.params["limit"] == "1000"
    assert request.url.params["level"] == "eq.novice"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["authorization"] == "Bearer anon-key"


def test_select_paged_match_any_builds_or_filter() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    _store(handler).select_paged("users", {"id": "u1", "username": "ASHA"}, 0, 0, match_any=True)

    params = seen[0].url.params
    assert params["or"] == "(id.eq.u1,username.eq.ASHA)"
    assert params["limit"] == "1"
    assert "username" not in params


def test_http_failures_become_remote_errors() -> None:
    def server_error(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def not_json(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>")

    failed = _store(server_error).select_paged("questions", {}, 0, 9)
    assert isinstance(failed, RemoteError)
    assert failed.status_code == 503

    assert isinstance(_store(unreachable).upsert("users", [{"id": "u1"}]), RemoteError)
    assert isinstance(_store(not_json).select_paged("questions", {}, 0, 9), RemoteError)


def test_upsert_sets_conflict_resolution() -> None:
    captured: Dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["prefer"] = request.headers["prefer"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(201)

    outcome = _store(handler).upsert("test_results", [{"id": "r1"}, {"id": "r2"}], ignore_duplicates=True)

    assert outcome == RemoteOk(2)
    assert captured["method"] == "POST"
    assert captured["prefer"] == "resolution=ignore-duplicates,return=minimal"
    assert captured["body"] == [{"id": "r1"}, {"id": "r2"}]


def test_delete_requires_a_filter() -> None:
    calls: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(204)

    store = _store(handler)

    assert isinstance(store.delete_where("questions", {}), RemoteError)
    assert calls == []
    assert store.delete_where("questions", {"level": "novice"}) == RemoteOk(None)
    assert calls[0].method == "DELETE"
    assert calls[0].url.params["level"] == "eq.novice"


def test_build_remote_store_rejects_placeholder_credentials() -> None:
    placeholder = Settings(CURIOUS_SUPABASE_URL="https://placeholder.supabase.co", CURIOUS_SUPABASE_ANON_KEY="key")
    insecure = Settings(CURIOUS_SUPABASE_URL="http://project.supabase.co", CURIOUS_SUPABASE_ANON_KEY="key")
    configured = Settings(CURIOUS_SUPABASE_URL=BASE_URL, CURIOUS_SUPABASE_ANON_KEY="key")

    assert isinstance(build_remote_store(placeholder), OfflineRemoteStore)
    assert isinstance(build_remote_store(insecure), OfflineRemoteStore)
    assert isinstance(build_remote_store(configured), SupabaseRemoteStore)
    assert isinstance(OfflineRemoteStore().select_paged("questions", {}, 0, 9), RemoteError)
