from __future__ import annotations

import pytest

from app.nexusdl import config, healthcheck


def test_run_health_checks_happy_path() -> None:
    result = healthcheck.run_health_checks(entrypoint="ui")

    assert result.ok is True
    assert result.checks["config"]["ok"] is True
    assert result.checks["filesystem"]["ok"] is True
    assert result.checks["browser"]["ok"] is True


def test_run_health_checks_handles_invalid_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "FOLLOWUP_MAX_ATTEMPTS", 0)

    result = healthcheck.run_health_checks(entrypoint="cli")

    assert result.ok is False
    assert result.checks["config"]["ok"] is False
    assert "FOLLOWUP_MAX_ATTEMPTS" in result.checks["config"]["error"]


def test_run_health_checks_reports_missing_browser(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(healthcheck.importlib.util, "find_spec", lambda name: None)

    result = healthcheck.run_health_checks(entrypoint="cli")

    assert result.ok is False
    assert result.checks["browser"]["ok"] is False
