"""Live tracker pages driven through Playwright.

``open_page`` launches Chromium, loads one tracker page and yields it as a
``PageDocument``. Downloads the browser starts (from the page or from popups
it opens) are saved under ``DOWNLOAD_DIR`` before the browser shuts down.
"""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from bs4 import BeautifulSoup
from playwright.sync_api import (
    Download,
    Error as PWError,
    Page,
    TimeoutError as PWTimeout,
    sync_playwright,
)

from . import config
from .document import parse_html
from .logging_utils import _downloader_event
from .utils import ensure_dirs, log_line, sanitize_filename_component

# Builds the transient trigger element. Hidden, opened in a new context,
# removed again whether or not the click went through.
_TRIGGER_JS = """
({url, filename}) => {
    const link = document.createElement('a');
    link.href = url;
    link.style.display = 'none';
    link.download = filename;
    link.target = '_blank';
    document.body.appendChild(link);
    try {
        link.click();
    } finally {
        document.body.removeChild(link);
    }
}
"""


_DOWNLOAD_POLL_MS = 100


def _css_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class PlaywrightDocument:
    """``PageDocument`` over a live Playwright page."""

    def __init__(self, page: Page) -> None:
        self.page = page
        self.downloads: List[Download] = []
        page.on("download", self.downloads.append)
        page.context.on("page", self._watch_popup)

    def _watch_popup(self, popup: Page) -> None:
        popup.on("download", self.downloads.append)

    @property
    def location(self) -> str:
        return self.page.url

    @property
    def referrer(self) -> str:
        try:
            return str(self.page.evaluate("document.referrer") or "")
        except PWError:
            return ""

    def snapshot(self) -> BeautifulSoup:
        return parse_html(self.page.content())

    def _await_download(self, seen: int, url: str) -> Download:
        """Pump Playwright events until a download beyond the first *seen* arrives.

        Downloads started by the page or one of its popups are only delivered
        while Playwright is servicing a call, so the wait goes through
        ``page.wait_for_timeout``.
        """

        waited = 0
        while len(self.downloads) <= seen:
            if waited >= config.PLAYWRIGHT_DOWNLOAD_TIMEOUT_MS:
                raise PWTimeout(
                    f"No download started for {url} within "
                    f"{config.PLAYWRIGHT_DOWNLOAD_TIMEOUT_MS} ms"
                )
            self.page.wait_for_timeout(_DOWNLOAD_POLL_MS)
            waited += _DOWNLOAD_POLL_MS
        return self.downloads[-1]

    def click_link(self, href: str) -> None:
        seen = len(self.downloads)
        locator = self.page.locator(f'a[href="{_css_string(href)}"]').first
        locator.click(timeout=config.PLAYWRIGHT_CLICK_TIMEOUT_MS)
        self._await_download(seen, href)

    def trigger_download(self, url: str, filename: str) -> None:
        seen = len(self.downloads)
        self.page.evaluate(_TRIGGER_JS, {"url": url, "filename": filename})
        self._await_download(seen, url)

    def close(self) -> None:
        if not self.page.is_closed():
            self.page.close()


def save_downloads(downloads: List[Download], dest_dir: Optional[Path] = None) -> List[Path]:
    """Persist finished browser downloads into *dest_dir*."""

    dest_dir = Path(dest_dir or config.DOWNLOAD_DIR)
    dest_dir.mkdir(parents=True, exist_ok=True)
    saved: List[Path] = []
    for download in downloads:
        name = sanitize_filename_component(download.suggested_filename) or "download.torrent"
        target = dest_dir / name
        try:
            download.save_as(str(target))
        except PWError as exc:
            log_line(f"[BROWSER][WARN] Could not save {download.url}: {exc}")
            _downloader_event("error", phase="save_download", url=download.url, error=str(exc))
            continue
        saved.append(target)
    if saved:
        log_line(f"[BROWSER] Saved {len(saved)} download(s) to {dest_dir}")
    return saved


@contextmanager
def open_page(
    url: str,
    *,
    referrer: Optional[str] = None,
    headless: Optional[bool] = None,
) -> Iterator[PlaywrightDocument]:
    """Open *url* in Chromium and yield it as a ``PlaywrightDocument``."""

    ensure_dirs()
    headless = config.HEADLESS if headless is None else headless

    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=headless)
        context_kwargs = {
            "user_agent": config.USER_AGENT,
            "accept_downloads": True,
        }
        if config.STORAGE_STATE_PATH:
            context_kwargs["storage_state"] = config.STORAGE_STATE_PATH
        context = browser.new_context(**context_kwargs)
        page = context.new_page()
        document = PlaywrightDocument(page)
        try:
            log_line(f"[BROWSER] Opening {url}")
            try:
                page.goto(
                    url,
                    referer=referrer,
                    wait_until="domcontentloaded",
                    timeout=config.PLAYWRIGHT_NAV_TIMEOUT_SECONDS * 1000,
                )
            except PWTimeout:
                log_line(f"[BROWSER][WARN] Navigation timeout for {url}; continuing with partial page.")
            yield document
        finally:
            save_downloads(document.downloads)
            context.close()
            browser.close()


__all__ = ["PlaywrightDocument", "open_page", "save_downloads"]
