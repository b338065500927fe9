from __future__ import annotations

from typing import List

import httpx
import pytest

from curious_minds.errors import RegistryError
from curious_minds.registry_client import RegistryClient, stage_number

REGISTRY_URL = "https://script.example.com/exec"


def _client(handler) -> RegistryClient:
    return RegistryClient(REGISTRY_URL, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_fetch_stage_builds_ordered_words() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "questions": [
                    {"text": "అమ్మ", "definition": "mother", "context": "माँ"},
                    "not-an-entry",
                    {"text": "నాన్న", "english": "father"},
                ]
            },
        )

    words = _client(handler).fetch_stage("Stage-2")

    assert seen[0].url.params["action"] == "getQuestions"
    assert seen[0].url.params["stage"] == "2"
    assert [word.id for word in words] == ["stage-2-001", "stage-2-002"]
    assert words[0].english_gloss == "mother"
    assert words[0].secondary_gloss == "माँ"
    assert words[1].english_gloss == "father"
    assert words[1].secondary_gloss == ""
    assert all(word.stage == "stage-2" for word in words)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, json={"error": "sheet missing"}),
        httpx.Response(200, json={"rows": []}),
        httpx.Response(200, json=["unexpected"]),
        httpx.Response(200, content=b"<html>"),
    ],
)
def test_registry_failures_raise(response: httpx.Response) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    with pytest.raises(RegistryError):
        _client(handler).fetch_stage("stage-1")


def test_missing_registry_url_raises() -> None:
    with pytest.raises(RegistryError):
        RegistryClient(None).fetch_stage("stage-1")


def test_stage_numbers() -> None:
    assert stage_number("stage-7") == 7
    assert stage_number("STAGE-18") == 18
    with pytest.raises(RegistryError):
        stage_number("advanced")
