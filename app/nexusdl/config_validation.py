from __future__ import annotations

from typing import Any, Literal

from . import config
from .logging_utils import _downloader_event
from .utils import log_line

Entrypoint = Literal["ui", "cli", "tests"]


def _raise_config_error(
    message: str, *, entrypoint: Entrypoint, error: str, field: str | None = None
) -> None:
    _downloader_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        field=field,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def coerce_delay_ms(raw: Any, *, entrypoint: Entrypoint = "ui") -> int:
    """Parse a user supplied delay (milliseconds) and enforce the allowed range.

    Empty values fall back to the configured default. Anything that is not an
    integer, or lies outside ``[MIN_DOWNLOAD_DELAY_MS, MAX_DOWNLOAD_DELAY_MS]``,
    raises ``ValueError``.
    """

    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return config.load_download_delay_ms()

    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        _raise_config_error(
            f"Download delay must be an integer number of milliseconds, got {raw!r}.",
            entrypoint=entrypoint,
            error="delay_not_integer",
            field="DOWNLOAD_DELAY_MS",
        )

    if not config.MIN_DOWNLOAD_DELAY_MS <= value <= config.MAX_DOWNLOAD_DELAY_MS:
        _raise_config_error(
            f"Download delay must be between {config.MIN_DOWNLOAD_DELAY_MS} and "
            f"{config.MAX_DOWNLOAD_DELAY_MS} ms, got {value}.",
            entrypoint=entrypoint,
            error="delay_out_of_range",
            field="DOWNLOAD_DELAY_MS",
        )
    return value


def validate_runtime_config(entrypoint: Entrypoint) -> None:
    """Validate runtime configuration for the given entrypoint.

    Raises ``ValueError`` when a blocking misconfiguration is detected.
    """

    coerce_delay_ms(config.DOWNLOAD_DELAY_MS, entrypoint=entrypoint)

    if config.FOLLOWUP_MAX_ATTEMPTS < 1:
        _raise_config_error(
            "FOLLOWUP_MAX_ATTEMPTS must be at least 1.",
            entrypoint=entrypoint,
            error="followup_attempts_invalid",
            field="FOLLOWUP_MAX_ATTEMPTS",
        )

    if config.FOLLOWUP_INTERVAL_SECONDS <= 0:
        _raise_config_error(
            "FOLLOWUP_INTERVAL_SECONDS must be greater than zero.",
            entrypoint=entrypoint,
            error="followup_interval_invalid",
            field="FOLLOWUP_INTERVAL_SECONDS",
        )

    if config.FOLLOWUP_CLOSE_GRACE_SECONDS < 0:
        _raise_config_error(
            "FOLLOWUP_CLOSE_GRACE_SECONDS must be non-negative.",
            entrypoint=entrypoint,
            error="followup_grace_invalid",
            field="FOLLOWUP_CLOSE_GRACE_SECONDS",
        )

    timeout_fields = [
        ("PLAYWRIGHT_NAV_TIMEOUT_SECONDS", config.PLAYWRIGHT_NAV_TIMEOUT_SECONDS),
        ("PLAYWRIGHT_CLICK_TIMEOUT_MS", config.PLAYWRIGHT_CLICK_TIMEOUT_MS),
        ("PLAYWRIGHT_DOWNLOAD_TIMEOUT_MS", config.PLAYWRIGHT_DOWNLOAD_TIMEOUT_MS),
    ]

    for field_name, value in timeout_fields:
        if value <= 0:
            _raise_config_error(
                f"{field_name} must be greater than zero.",
                entrypoint=entrypoint,
                error="invalid_timeout",
                field=field_name,
            )


__all__ = ["validate_runtime_config", "coerce_delay_ms", "Entrypoint"]
