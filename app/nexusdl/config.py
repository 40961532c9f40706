"""Configuration constants for the NexusPHP batch downloader."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

DATA_DIR: Path = Path(os.getenv("NEXUSDL_DATA_DIR", "/app/data"))
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"
RUNS_DIR: Path = DATA_DIR / "runs"
EXPORTS_DIR: Path = DATA_DIR / "exports"
DOWNLOAD_DIR: Path = DATA_DIR / "torrents"
SUMMARY_FILE: Path = DATA_DIR / "last_summary.json"

# Pacing between queue items, in milliseconds (the panel exposes this knob).
DOWNLOAD_DELAY_MS: int = int(os.getenv("NEXUSDL_DOWNLOAD_DELAY_MS", "1000"))
MIN_DOWNLOAD_DELAY_MS: int = 100
MAX_DOWNLOAD_DELAY_MS: int = 30000

# Follow-up polling on detail pages opened from a batch.
FOLLOWUP_INTERVAL_SECONDS: float = float(
    os.getenv("NEXUSDL_FOLLOWUP_INTERVAL_SECONDS", "1.0")
)
FOLLOWUP_MAX_ATTEMPTS: int = int(os.getenv("NEXUSDL_FOLLOWUP_MAX_ATTEMPTS", "10"))
FOLLOWUP_CLOSE_GRACE_SECONDS: float = float(
    os.getenv("NEXUSDL_FOLLOWUP_CLOSE_GRACE_SECONDS", "2.0")
)

# Page names on NexusPHP trackers.
DETAIL_PAGE = "details.php"
ACTION_PAGE = "download.php"
BATCH_QUERY_FLAG = "auto_download"
BATCH_REFERRER_PAGES: tuple[str, ...] = ("myhr.php", "torrents.php")
TORRENT_SUFFIX = ".torrent"


def _parse_timeout_seconds(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Parse a timeout value in seconds from the environment with bounds."""

    try:
        value = int(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


# Playwright timeouts
PLAYWRIGHT_NAV_TIMEOUT_SECONDS: int = _parse_timeout_seconds(
    "NEXUSDL_NAV_TIMEOUT_SECONDS", 25
)
# Click-level timeout remains in milliseconds to match Playwright API expectations.
PLAYWRIGHT_CLICK_TIMEOUT_MS: int = int(os.getenv("PLAYWRIGHT_CLICK_TIMEOUT_MS", "2000"))
# How long an activated download link may take before the browser reports
# the download.
PLAYWRIGHT_DOWNLOAD_TIMEOUT_MS: int = int(os.getenv("PLAYWRIGHT_DOWNLOAD_TIMEOUT_MS", "15000"))

HEADLESS: bool = os.getenv("NEXUSDL_HEADLESS", "true").strip().lower() not in {
    "0",
    "false",
}
# Playwright storage state (cookies of a logged-in tracker session).
STORAGE_STATE_PATH: Optional[str] = os.getenv("NEXUSDL_STORAGE_STATE") or None

WRITE_RUN_REPORTS: bool = os.getenv("NEXUSDL_WRITE_RUN_REPORTS", "1").strip().lower() not in {
    "0",
    "false",
}
EXPORTS_KEEP_MAX: int = int(os.getenv("EXPORTS_KEEP_MAX", "5"))

USER_AGENT: str = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def load_download_delay_ms() -> int:
    """Return the inter-item delay supplied to a run at start."""

    return DOWNLOAD_DELAY_MS
