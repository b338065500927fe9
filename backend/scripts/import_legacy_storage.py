"""Import a JSON export of the browser-era storage keys into the device cache."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from pydantic import ValidationError

from curious_minds.errors import DuplicateIdentityError, ResultAlreadyRecordedError
from curious_minds.local_store import LocalStore
from curious_minds.records import LearningResource
from curious_minds.remote_rows import result_from_row, user_from_row
from curious_minds.system_config import merge_with_defaults
from curious_minds.user_profile import UserProfile

logger = logging.getLogger("curious_minds.legacy_import")

USERS_KEY = "cm_users"
RESULTS_KEY = "cm_results"
CONFIG_KEY = "cm_config"
ACTIVE_USER_KEY = "cm_active_user"
RESOURCES_KEY = "cm_resources"

_ROW_ERRORS = (KeyError, TypeError, ValueError, ValidationError)


def _decode(value: Any) -> Any:
    """Browser storage keeps JSON strings; exports may already be decoded."""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Skipping value that is not valid JSON")
            return None
    return value


def load_export(path: Path) -> Dict[str, Any]:
    with path.open(encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{path} does not contain a JSON object of storage keys")
    return payload


def _records(payload: Dict[str, Any], key: str) -> Iterable[Dict[str, Any]]:
    decoded = _decode(payload.get(key))
    if decoded is None:
        return []
    if not isinstance(decoded, list):
        logger.warning("Expected a list under %s; skipping", key)
        return []
    return [entry for entry in decoded if isinstance(entry, dict)]


def import_users(store: LocalStore, payload: Dict[str, Any]) -> int:
    imported = 0
    for entry in _records(payload, USERS_KEY):
        try:
            profile = user_from_row(entry)
            store.save_user(profile)
        except DuplicateIdentityError as exc:
            logger.warning("Skipping user %s: %s", entry.get("id"), exc)
            continue
        except _ROW_ERRORS as exc:
            logger.warning("Skipping invalid user payload: %s", exc)
            continue
        imported += 1
    logger.info("Imported %d users", imported)
    return imported


def import_results(store: LocalStore, payload: Dict[str, Any]) -> int:
    imported = 0
    for entry in _records(payload, RESULTS_KEY):
        try:
            result = result_from_row(entry)
        except _ROW_ERRORS as exc:
            logger.warning("Skipping invalid result payload: %s", exc)
            continue
        try:
            store.append_result(result)
        except ResultAlreadyRecordedError:
            continue
        imported += 1
    logger.info("Imported %d test results", imported)
    return imported


def import_resources(store: LocalStore, payload: Dict[str, Any]) -> int:
    imported = 0
    for entry in _records(payload, RESOURCES_KEY):
        try:
            resource = LearningResource.model_validate(entry)
        except _ROW_ERRORS as exc:
            logger.warning("Skipping invalid resource payload: %s", exc)
            continue
        store.save_resource(resource)
        imported += 1
    logger.info("Imported %d resources", imported)
    return imported


def import_config(store: LocalStore, payload: Dict[str, Any]) -> bool:
    decoded = _decode(payload.get(CONFIG_KEY))
    if not isinstance(decoded, dict):
        logger.info("No legacy config found")
        return False
    try:
        config = merge_with_defaults(decoded)
    except ValidationError as exc:
        logger.warning("Skipping invalid config payload: %s", exc)
        return False
    store.save_config(config)
    return True


def import_active_session(store: LocalStore, payload: Dict[str, Any]) -> Optional[UserProfile]:
    decoded = _decode(payload.get(ACTIVE_USER_KEY))
    if not isinstance(decoded, dict):
        return None
    try:
        profile = user_from_row(decoded)
    except _ROW_ERRORS as exc:
        logger.warning("Skipping invalid active session: %s", exc)
        return None
    store.write_active_session(profile.model_dump_json())
    return profile


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import legacy browser storage into the device cache.")
    parser.add_argument("export", type=Path, help="JSON file holding the cm_* storage keys.")
    parser.add_argument("--skip-session", action="store_true", help="Do not restore the active session.")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = parse_args(argv)
    if not args.export.exists():
        logger.error("Export file %s not found", args.export)
        return 1
    payload = load_export(args.export)
    store = LocalStore().open()
    users = import_users(store, payload)
    results = import_results(store, payload)
    resources = import_resources(store, payload)
    config = import_config(store, payload)
    session = None if args.skip_session else import_active_session(store, payload)
    logger.info(
        "Legacy import completed: %d users, %d results, %d resources, config=%s, session=%s",
        users,
        results,
        resources,
        "yes" if config else "no",
        session.username if session else "none",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
