"""structlog setup: redaction and the per-request log line."""

from __future__ import annotations

import dataclasses
import json
import logging

import pytest
import structlog
from fastapi.testclient import TestClient

from taskboard.config import Settings
from taskboard.logging_setup import get_logger, redact_sensitive, setup_logging
from taskboard.main import create_app


def test_redact_sensitive_only_touches_credentials() -> None:
    event = redact_sensitive(
        None,
        "info",
        {"event": "x", "password": "x", "authorization": "Bearer y", "jwt_secret": "s", "path": "/", "status": 200},
    )
    assert event == {
        "event": "x",
        "password": "***REDACTED***",
        "authorization": "***REDACTED***",
        "jwt_secret": "***REDACTED***",
        "path": "/",
        "status": 200,
    }


@pytest.fixture
def json_logging(settings: Settings, capsys):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    setup_logging(dataclasses.replace(settings, log_format="json"))
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    structlog.reset_defaults()


def _json_lines(out: str) -> list[dict]:
    lines = []
    for line in out.splitlines():
        try:
            lines.append(json.loads(line))
        except ValueError:
            continue
    return lines


def test_requests_are_logged_with_status(settings: Settings, engine, json_logging, capsys) -> None:
    with TestClient(create_app(settings, engine=engine)) as client:
        assert client.get("/health").status_code == 200

    requests = [e for e in _json_lines(capsys.readouterr().out) if e.get("event") == "http_request"]
    assert requests
    assert requests[-1]["status"] == 200
    assert requests[-1]["path"] == "/health"
    assert requests[-1]["method"] == "GET"


def test_configured_logger_redacts_password(json_logging, capsys) -> None:
    get_logger("taskboard.tests").info("login_attempt", password="hunter2", email="a@x.com")

    out = capsys.readouterr().out
    assert "hunter2" not in out
    (event,) = [e for e in _json_lines(out) if e.get("event") == "login_attempt"]
    assert event["password"] == "***REDACTED***"
    assert event["email"] == "a@x.com"
