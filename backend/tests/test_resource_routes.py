from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from curious_minds import services
from curious_minds.main import app


@pytest.fixture
def client(cache_db: Path, remote) -> TestClient:
    services.reset_services(remote=remote)
    return TestClient(app)


def test_resource_lifecycle(client: TestClient, remote) -> None:
    created = client.post(
        "/api/resources",
        json={"title": "Times tables chart", "url": "https://example.com/chart.pdf", "description": "Printable"},
    )
    assert created.status_code == 201
    body = created.json()
    assert body["fileType"] == "pdf"
    assert body["category"] == "General"
    assert body["size"] == "N/A"
    resource_id = body["id"]

    updated = client.put(
        f"/api/resources/{resource_id}",
        json={"title": "Times tables chart", "url": "https://example.com/chart.pdf", "category": "Math"},
    )
    assert updated.status_code == 200
    assert updated.json()["category"] == "Math"
    assert len(client.get("/api/resources").json()) == 1

    assert client.delete(f"/api/resources/{resource_id}").status_code == 204
    assert client.delete(f"/api/resources/{resource_id}").status_code == 404
    assert client.get("/api/resources").json() == []
    assert remote.calls["upsert"] == 0


def test_resource_filters(client: TestClient) -> None:
    client.post("/api/resources", json={"title": "Vowel song", "url": "https://example.com/song", "file_type": "video"})
    client.post(
        "/api/resources",
        json={"title": "Number line", "url": "https://example.com/line.pdf", "description": "Counting SONG sheet"},
    )

    by_text = client.get("/api/resources", params={"search": "song"}).json()
    by_type = client.get("/api/resources", params={"file_type": "video"}).json()

    assert sorted(resource["title"] for resource in by_text) == ["Number line", "Vowel song"]
    assert [resource["title"] for resource in by_type] == ["Vowel song"]


def test_resource_validation(client: TestClient) -> None:
    assert client.post("/api/resources", json={"title": "   ", "url": "https://example.com"}).status_code == 422
    assert client.post("/api/resources", json={"title": "Chart"}).status_code == 422
    assert (
        client.post("/api/resources", json={"title": "Chart", "url": "https://x", "file_type": "exe"}).status_code
        == 422
    )
