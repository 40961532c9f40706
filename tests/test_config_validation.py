from app.nexusdl import config
from app.nexusdl.config_validation import coerce_delay_ms, validate_runtime_config
import pytest


def test_default_config_is_valid() -> None:
    validate_runtime_config("tests")


def test_invalid_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "PLAYWRIGHT_NAV_TIMEOUT_SECONDS", 0)
    with pytest.raises(ValueError):
        validate_runtime_config("cli")


def test_default_delay_out_of_range(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "DOWNLOAD_DELAY_MS", 50)
    with pytest.raises(ValueError):
        validate_runtime_config("ui")


def test_followup_attempts_must_be_positive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "FOLLOWUP_MAX_ATTEMPTS", 0)
    with pytest.raises(ValueError):
        validate_runtime_config("cli")


def test_followup_interval_must_be_positive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "FOLLOWUP_INTERVAL_SECONDS", 0)
    with pytest.raises(ValueError):
        validate_runtime_config("cli")


def test_followup_grace_may_be_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "FOLLOWUP_CLOSE_GRACE_SECONDS", 0)
    validate_runtime_config("tests")

    monkeypatch.setattr(config, "FOLLOWUP_CLOSE_GRACE_SECONDS", -1)
    with pytest.raises(ValueError):
        validate_runtime_config("tests")


@pytest.mark.parametrize("raw,expected", [(None, 1000), ("", 1000), ("  ", 1000), ("100", 100), (" 2500 ", 2500), (30000, 30000)])
def test_coerce_delay_accepts_valid_values(raw, expected) -> None:
    assert coerce_delay_ms(raw) == expected


@pytest.mark.parametrize("raw", ["fast", "1.5", "99", 30001, -1])
def test_coerce_delay_rejects_invalid_values(raw) -> None:
    with pytest.raises(ValueError):
        coerce_delay_ms(raw, entrypoint="tests")
