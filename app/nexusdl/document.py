"""Document capabilities the downloader drives.

The downloader never fetches anything itself. It reads the current page,
activates anchors on it, and asks the host to close it. ``PageDocument``
names those capabilities; ``StaticDocument`` provides them for a saved HTML
page and records every activation instead of performing it.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, runtime_checkable

from bs4 import BeautifulSoup

HTML_PARSER = "html5lib"


def parse_html(html: str) -> BeautifulSoup:
    """Parse *html* with a browser-compatible tree builder (implicit tbody)."""

    return BeautifulSoup(html, HTML_PARSER)


@runtime_checkable
class PageDocument(Protocol):
    @property
    def location(self) -> str: ...

    @property
    def referrer(self) -> str: ...

    def snapshot(self) -> BeautifulSoup:
        """Return the current DOM as parsed HTML."""

    def click_link(self, href: str) -> None:
        """Activate the existing anchor pointing at *href* in place."""

    def trigger_download(self, url: str, filename: str) -> None:
        """Create a hidden anchor for *url*, activate it and discard it."""

    def close(self) -> None:
        """Ask the host to close this browsing context."""


@dataclass
class Activation:
    kind: str
    url: str
    filename: Optional[str] = None


class StaticDocument:
    """Offline page backed by a fixed HTML string.

    ``html`` may be swapped between snapshots to emulate content that renders
    late. Activations are recorded in ``activations``; ``fail_on`` makes the
    matching activations raise, the way a blocked click would.
    """

    def __init__(
        self,
        html: str,
        location: str,
        *,
        referrer: str = "",
        fail_on: Optional[set[str]] = None,
    ) -> None:
        self.html = html
        self._location = location
        self._referrer = referrer
        self.fail_on = set(fail_on or ())
        self.activations: List[Activation] = []
        self.snapshots = 0
        self.closed = False

    @classmethod
    def from_file(cls, path: Path, location: str, *, referrer: str = "") -> "StaticDocument":
        html = Path(path).read_text(encoding="utf-8", errors="ignore")
        return cls(html, location, referrer=referrer)

    @property
    def location(self) -> str:
        return self._location

    @property
    def referrer(self) -> str:
        return self._referrer

    def snapshot(self) -> BeautifulSoup:
        self.snapshots += 1
        return parse_html(self.html)

    def _record(self, activation: Activation) -> None:
        if activation.url in self.fail_on:
            raise RuntimeError(f"activation blocked for {activation.url}")
        self.activations.append(activation)

    def click_link(self, href: str) -> None:
        self._record(Activation(kind="click", url=href))

    def trigger_download(self, url: str, filename: str) -> None:
        self._record(Activation(kind="trigger", url=url, filename=filename))

    def close(self) -> None:
        self.closed = True


__all__ = ["PageDocument", "StaticDocument", "Activation", "parse_html", "HTML_PARSER"]
