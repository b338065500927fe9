from __future__ import annotations

import types

import pytest
from alembic.config import Config

from scripts import run_migrations as runner


def _load_test_config(monkeypatch) -> Config:
    monkeypatch.setenv("CURIOUS_LOCAL_DATABASE_URL", "sqlite://")
    config = Config()
    config.set_main_option("script_location", "alembic")
    return config


def test_resolve_database_url_falls_back_to_env(monkeypatch) -> None:
    config = _load_test_config(monkeypatch)
    assert runner.resolve_database_url(config) == "sqlite://"
    assert config.get_main_option("sqlalchemy.url") == "sqlite://"


def test_resolve_database_url_prefers_ini(monkeypatch) -> None:
    config = _load_test_config(monkeypatch)
    config.set_main_option("sqlalchemy.url", "sqlite:///explicit.db")
    assert runner.resolve_database_url(config) == "sqlite:///explicit.db"


def test_resolve_database_url_requires_a_url(monkeypatch) -> None:
    config = Config()
    config.set_main_option("script_location", "alembic")
    monkeypatch.delenv("CURIOUS_LOCAL_DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError):
        runner.resolve_database_url(config)


def test_wait_for_database_succeeds_with_sqlite(tmp_path) -> None:
    db_path = tmp_path / "test.sqlite"
    url = f"sqlite:///{db_path}"
    runner.wait_for_database(url, timeout=2, poll_interval=0.1)


def test_wait_for_database_times_out(monkeypatch) -> None:
    class DummyEngine:
        def connect(self) -> types.SimpleNamespace:
            raise runner.OperationalError("SELECT 1", {}, Exception("boom"))

        def dispose(self) -> None:
            pass

    monkeypatch.setattr(runner, "create_engine", lambda *_, **__: DummyEngine())
    with pytest.raises(RuntimeError):
        runner.wait_for_database("sqlite:///unreachable.db", timeout=0, poll_interval=0)


def test_run_migrations_invokes_upgrade(monkeypatch) -> None:
    config = _load_test_config(monkeypatch)

    recorded: dict[str, object] = {}

    def fake_wait(url: str, *, timeout: int, poll_interval: float) -> None:
        recorded["wait"] = (url, timeout, poll_interval)

    def fake_upgrade(cfg, revision: str) -> None:
        recorded["revision"] = revision
        recorded["config_script_location"] = cfg.get_main_option("script_location")

    monkeypatch.setattr(runner, "wait_for_database", fake_wait)
    monkeypatch.setattr(runner.command, "upgrade", fake_upgrade)

    runner.run_migrations("head", timeout=5, poll_interval=0.1, config=config)

    assert recorded["revision"] == "head"
    assert recorded["wait"] == ("sqlite://", 5, 0.1)
    assert recorded["config_script_location"] == "alembic"


def test_main_reports_failures(monkeypatch) -> None:
    def failing_run(*_, **__) -> None:
        raise RuntimeError("Cache database did not become ready in time.")

    monkeypatch.setattr(runner, "run_migrations", failing_run)
    assert runner.main(["--timeout", "0"]) == 1
