from __future__ import annotations

"""Acquisition of a single torrent from the current page."""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode, urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from . import config
from .document import PageDocument
from .error_codes import ErrorCode
from .extraction import Item
from .layouts import PageType
from .logging_utils import _downloader_event
from .utils import log_line, torrent_filename


@dataclass(frozen=True)
class AcquisitionOutcome:
    ok: bool
    error_code: Optional[str] = None
    url: Optional[str] = None
    error_message: Optional[str] = None


def _short_error_message(exc: Exception, max_length: int = 200) -> str:
    message = f"{type(exc).__name__}: {exc}"
    return message if len(message) <= max_length else message[: max_length - 3] + "..."


def find_action_anchor(soup: BeautifulSoup) -> Optional[Tag]:
    """Return the first anchor on the page pointing at the download action."""

    for anchor in soup.find_all("a", href=True):
        if config.ACTION_PAGE in (anchor.get("href") or ""):
            return anchor
    return None


def build_download_url(location: str, torrent_id: str) -> str:
    """Download action URL for *torrent_id*, relative to the current page's directory."""

    return urljoin(location, f"{config.ACTION_PAGE}?{urlencode({'id': torrent_id})}")


class AcquisitionResolver:
    """Triggers the download of one item on the current page.

    On a detail page the page's own download link is clicked. On every other
    page a download URL is built from the item id and fired through a
    transient hidden anchor, without navigating away.
    """

    def __init__(self, document: PageDocument) -> None:
        self.document = document

    def resolve(self, item: Item, page_type: PageType) -> AcquisitionOutcome:
        try:
            if page_type is PageType.DETAIL:
                return self._resolve_on_detail_page(item)
            return self._resolve_by_trigger(item)
        except Exception as exc:  # noqa: BLE001
            log_line(f"[RUN][ERROR] Unexpected failure for {item.title}: {exc}")
            _downloader_event(
                "error",
                phase="resolve",
                item_id=item.id,
                error_code=ErrorCode.INTERNAL,
                error=_short_error_message(exc),
            )
            return AcquisitionOutcome(
                ok=False,
                error_code=ErrorCode.INTERNAL,
                error_message=_short_error_message(exc),
            )

    def _resolve_on_detail_page(self, item: Item) -> AcquisitionOutcome:
        anchor = find_action_anchor(self.document.snapshot())
        if anchor is None:
            log_line(f"[RUN][ERROR] No download link on detail page for {item.title}")
            return AcquisitionOutcome(ok=False, error_code=ErrorCode.ACTION_NOT_FOUND)

        href = anchor.get("href")
        try:
            self.document.click_link(href)
        except Exception as exc:  # noqa: BLE001
            log_line(f"[RUN][ERROR] Clicking download link failed for {item.title}: {exc}")
            return AcquisitionOutcome(
                ok=False,
                error_code=ErrorCode.ACTION_TRIGGER_ERROR,
                url=href,
                error_message=_short_error_message(exc),
            )

        log_line(f"[RUN] Download link clicked: {item.title}")
        return AcquisitionOutcome(ok=True, url=href)

    def _resolve_by_trigger(self, item: Item) -> AcquisitionOutcome:
        url = build_download_url(self.document.location, item.id)
        filename = torrent_filename(item.title, item.id)
        log_line(f"[RUN] Download link: {url}")

        try:
            self.document.trigger_download(url, filename)
        except Exception as exc:  # noqa: BLE001
            log_line(f"[RUN][ERROR] Direct download failed: {item.title} - {exc}")
            return AcquisitionOutcome(
                ok=False,
                error_code=ErrorCode.ACTION_TRIGGER_ERROR,
                url=url,
                error_message=_short_error_message(exc),
            )

        log_line(f"[RUN] Direct download triggered: {item.title}")
        return AcquisitionOutcome(ok=True, url=url)


__all__ = [
    "AcquisitionOutcome",
    "AcquisitionResolver",
    "build_download_url",
    "find_action_anchor",
]
