from __future__ import annotations

import json
from pathlib import Path

from curious_minds.local_store import LocalStore
from curious_minds.user_profile import UserProfile
from scripts import import_legacy_storage as importer


def _export(tmp_path: Path) -> Path:
    users = [
        {"id": "u1", "username": "asha", "fullName": "Asha Rao", "role": "student", "allowedModules": ["math"]},
        {"username": "no-id"},
        {"id": "u2", "username": "ASHA", "fullName": "Impostor"},
    ]
    results = [
        {
            "id": "r1",
            "userId": "u1",
            "level": "novice",
            "testId": "1",
            "correctAnswers": 14,
            "totalQuestions": 15,
            "scorePercentage": 93,
            "timestamp": "2026-09-30T10:00:00.000Z",
        },
        {"id": "r2", "level": "novice", "scorePercentage": 250},
    ]
    payload = {
        importer.USERS_KEY: json.dumps(users),
        importer.RESULTS_KEY: results,
        importer.CONFIG_KEY: json.dumps({"customTitle": "Legacy Academy", "primaryColor": "#000000"}),
        importer.ACTIVE_USER_KEY: json.dumps(users[0]),
        importer.RESOURCES_KEY: json.dumps(
            [
                {
                    "id": "k1",
                    "title": "Vowel chart",
                    "description": "",
                    "fileType": "image",
                    "url": "https://example.com/vowels.png",
                    "category": "Telugu",
                    "timestamp": "2026-08-01T08:00:00.000Z",
                },
                {"id": "k2", "title": "No link"},
            ]
        ),
    }
    path = tmp_path / "export.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_legacy_export_is_imported(tmp_path: Path, local_store: LocalStore) -> None:
    assert importer.main([str(_export(tmp_path))]) == 0

    assert [user.id for user in local_store.list_users()] == ["u1"]
    results = local_store.list_results("u1")
    assert [result.id for result in results] == ["r1"]
    assert results[0].score_percentage == 93
    config = local_store.load_config()
    assert config.custom_title == "Legacy Academy"
    assert config.primary_color == "#000000"
    resources = local_store.list_resources()
    assert [(resource.id, resource.file_type, resource.size) for resource in resources] == [("k1", "image", "N/A")]
    session = UserProfile.model_validate_json(local_store.read_active_session())
    assert session.username == "ASHA"
    assert session.allowed_modules == ["math"]


def test_reimport_skips_recorded_results(tmp_path: Path, local_store: LocalStore) -> None:
    payload = importer.load_export(_export(tmp_path))

    assert importer.import_results(local_store, payload) == 1
    assert importer.import_results(local_store, payload) == 0


def test_missing_keys_are_tolerated(local_store: LocalStore) -> None:
    assert importer.import_users(local_store, {}) == 0
    assert importer.import_config(local_store, {importer.CONFIG_KEY: "{broken"}) is False
    assert importer.import_active_session(local_store, {}) is None
    assert importer.import_resources(local_store, {importer.RESOURCES_KEY: "not json"}) == 0


def test_missing_export_file(tmp_path: Path, cache_db: Path) -> None:
    assert importer.main([str(tmp_path / "absent.json")]) == 1
