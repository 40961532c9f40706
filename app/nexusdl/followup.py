"""Follow-up download on a detail page opened from a batch.

When a listing opens a torrent's detail page in a new browsing context, the
download link may only appear after the page finishes rendering. The poller
looks for it at a fixed interval up to a fixed number of attempts, clicks
it, and closes the context after a short grace period. If the link never
shows up the page is left open so the user can click it by hand.
"""
from __future__ import annotations

import time
from typing import Callable, Optional
from urllib.parse import parse_qs, urlparse

from . import config
from .document import PageDocument
from .error_codes import ErrorCode
from .layouts import PageType, classify
from .logging_utils import _downloader_event
from .resolver import AcquisitionOutcome, _short_error_message, find_action_anchor
from .utils import log_line

Sleeper = Callable[[float], None]


def is_batch_context(location: str, referrer: str = "") -> bool:
    """Return ``True`` when a detail page was reached from a batch run."""

    try:
        query = parse_qs(urlparse(location or "").query)
    except ValueError:
        query = {}
    if "1" in query.get(config.BATCH_QUERY_FLAG, []):
        return True
    referrer = referrer or ""
    return any(page in referrer for page in config.BATCH_REFERRER_PAGES)


class DetailFollowUp:
    def __init__(
        self,
        *,
        interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        close_grace: Optional[float] = None,
        sleep: Optional[Sleeper] = None,
    ) -> None:
        self.interval = config.FOLLOWUP_INTERVAL_SECONDS if interval is None else interval
        self.max_attempts = config.FOLLOWUP_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.close_grace = config.FOLLOWUP_CLOSE_GRACE_SECONDS if close_grace is None else close_grace
        self.sleep = sleep or time.sleep
        self.attempts = 0

    def run(self, document: PageDocument) -> AcquisitionOutcome:
        """Poll *document* for its download link and trigger it once found."""

        self.attempts = 0
        log_line("[FOLLOWUP] Batch download requested; looking for the download link...")

        while self.attempts < self.max_attempts:
            self.sleep(self.interval)
            self.attempts += 1

            anchor = find_action_anchor(document.snapshot())
            if anchor is None:
                log_line(
                    f"[FOLLOWUP][WARN] Download link not found "
                    f"(attempt {self.attempts}/{self.max_attempts})"
                )
                continue

            href = anchor.get("href")
            log_line(f"[FOLLOWUP] Found download link (attempt {self.attempts}/{self.max_attempts})")
            try:
                document.click_link(href)
            except Exception as exc:  # noqa: BLE001
                log_line(f"[FOLLOWUP][ERROR] Clicking download link failed: {exc}")
                _downloader_event(
                    "error",
                    phase="followup",
                    attempt=self.attempts,
                    error_code=ErrorCode.ACTION_TRIGGER_ERROR,
                    error=_short_error_message(exc),
                )
                return AcquisitionOutcome(
                    ok=False,
                    error_code=ErrorCode.ACTION_TRIGGER_ERROR,
                    url=href,
                    error_message=_short_error_message(exc),
                )

            log_line("[FOLLOWUP] Download triggered.")
            self.sleep(self.close_grace)
            log_line("[FOLLOWUP] Closing batch download window.")
            document.close()
            _downloader_event("state", phase="followup", kind="triggered", attempt=self.attempts, url=href)
            return AcquisitionOutcome(ok=True, url=href)

        log_line("[FOLLOWUP][ERROR] Reached the attempt limit without finding a download link.")
        log_line("[FOLLOWUP] Leaving the window open; click the download link manually.")
        _downloader_event(
            "error",
            phase="followup",
            attempt=self.attempts,
            error_code=ErrorCode.POLLING_EXHAUSTED,
        )
        return AcquisitionOutcome(ok=False, error_code=ErrorCode.POLLING_EXHAUSTED)


def handle_detail_page(
    document: PageDocument, follow_up: Optional[DetailFollowUp] = None
) -> Optional[AcquisitionOutcome]:
    """Run the follow-up download when *document* is a batch-opened detail page.

    Returns ``None`` when there is nothing to do.
    """

    if classify(document.location) is not PageType.DETAIL:
        return None
    if not is_batch_context(document.location, document.referrer):
        return None
    return (follow_up or DetailFollowUp()).run(document)


__all__ = ["DetailFollowUp", "handle_detail_page", "is_batch_context"]
