from __future__ import annotations

from pathlib import Path

from fastapi.testclient import TestClient

from curious_minds.errors import LocalStoreUnavailableError
from curious_minds.main import app


def test_health_endpoint() -> None:
    client = TestClient(app)
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_database_health_endpoint_success(cache_db: Path) -> None:
    client = TestClient(app)
    response = client.get("/healthz/database")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["items"] == 0
    assert payload["last_pull_at"] is None
    assert payload["remote_configured"] is False


def test_database_health_endpoint_failure(monkeypatch, cache_db: Path) -> None:
    client = TestClient(app)

    def raise_unavailable():
        raise LocalStoreUnavailableError("cache file is locked")

    monkeypatch.setattr("curious_minds.main.get_local_store", raise_unavailable)
    response = client.get("/healthz/database")
    assert response.status_code == 503
    assert response.json()["detail"] == "cache file is locked"
