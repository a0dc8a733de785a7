import logging
from types import SimpleNamespace

import pytest

from helpdesk import db
from helpdesk.core import runtime_state
from helpdesk.core.logging import QUIET_LOGGERS, setup_logging


@pytest.mark.anyio
async def test_health_reports_db_and_migrations(client):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["db_ok"] is True
    assert body["migrations_status"] == "up_to_date"
    assert body["status"] == "ok"
    assert body["scheduler_running"] is False


def test_run_serves_app_on_configured_address(monkeypatch):
    from helpdesk import main
    from helpdesk.config import get_settings

    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "9001")
    get_settings.cache_clear()
    try:
        main.run()
    finally:
        get_settings.cache_clear()

    assert calls == [("helpdesk.main:app", {"host": "0.0.0.0", "port": 9001, "log_config": None})]


@pytest.mark.anyio
async def test_health_reports_registered_scheduler(client, monkeypatch):
    monkeypatch.setattr(runtime_state, "_scheduler", SimpleNamespace(running=True))
    body = (await client.get("/health")).json()
    assert body["scheduler_running"] is True


def test_dispose_engine_forgets_engine_and_session_factory():
    first = db.get_engine()
    assert db.get_sessionmaker().kw["bind"] is first

    db.dispose_engine()

    second = db.get_engine()
    assert second is not first
    assert db.get_sessionmaker().kw["bind"] is second


def test_setup_logging_is_idempotent_and_quiets_chatty_libraries():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("debug")
        setup_logging("debug")
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
