"""Torrent extraction from parsed listing pages."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Optional, Set
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from .error_codes import ErrorCode
from .layouts import GENERIC_LAYOUT, LayoutDescriptor, PageType, layout_for
from .logging_utils import _downloader_event


@dataclass(frozen=True)
class Item:
    """One downloadable torrent found on a listing page."""

    id: str
    title: str
    source_ref: Any = field(default=None, compare=False, repr=False)


def _torrent_id(href: str | None) -> Optional[str]:
    """Return the numeric ``id`` query parameter of a detail link."""

    if not href:
        return None
    try:
        query = parse_qs(urlparse(href.strip()).query)
    except ValueError:
        return None
    for value in query.get("id", []):
        value = value.strip()
        if value.isdigit():
            return value
    return None


def _anchor_title(anchor: Tag, title_selector: Optional[str]) -> str:
    if title_selector:
        emphasis = anchor.select_one(title_selector)
        if emphasis is not None:
            return emphasis.get_text().strip()
    return anchor.get_text().strip()


def _first_detail_anchor(scope: Tag, layout: LayoutDescriptor) -> Optional[Tag]:
    for anchor in scope.find_all("a", href=True):
        if layout.matches_link(anchor.get("href")):
            return anchor
    return None


def _item_from_anchor(anchor: Optional[Tag], row: Tag, layout: LayoutDescriptor) -> Optional[Item]:
    if anchor is None:
        return None
    href = anchor.get("href")
    torrent_id = _torrent_id(href)
    title = _anchor_title(anchor, layout.title_selector)
    if not torrent_id or not title:
        # A detail link without a usable id or title; the row is skipped.
        _downloader_event(
            "scan",
            phase="extract",
            error_code=ErrorCode.EXTRACTION_GAP,
            href=href,
            has_id=bool(torrent_id),
            has_title=bool(title),
        )
        return None
    return Item(id=torrent_id, title=title, source_ref=row)


def _table_rows(table: Tag) -> List[Tag]:
    """Rows of the table's first body, the way a browser exposes them."""

    body = table.find("tbody")
    scope = body if body is not None else table
    return scope.find_all("tr")


def _iter_layout_rows(soup: BeautifulSoup, layout: LayoutDescriptor) -> Iterator[Tag]:
    tables = soup.select(layout.table_selector)
    if layout.first_table_only:
        tables = tables[:1]
    for table in tables:
        yield from _table_rows(table)[layout.header_rows_to_skip:]


def _extract_with_layout(soup: BeautifulSoup, layout: LayoutDescriptor) -> List[Item]:
    items: List[Item] = []
    column = layout.title_column_index
    for row in _iter_layout_rows(soup, layout):
        cells = row.find_all("td")
        if column is None or len(cells) <= column:
            continue
        item = _item_from_anchor(_first_detail_anchor(cells[column], layout), row, layout)
        if item is not None:
            items.append(item)
    return items


def _extract_generic(soup: BeautifulSoup, layout: LayoutDescriptor = GENERIC_LAYOUT) -> List[Item]:
    items: List[Item] = []
    for row in soup.select(layout.table_selector)[layout.header_rows_to_skip:]:
        item = _item_from_anchor(_first_detail_anchor(row, layout), row, layout)
        if item is not None:
            items.append(item)
    return items


def extract(soup: BeautifulSoup, page_type: PageType) -> List[Item]:
    """Return the torrents listed on *soup*, in row order, duplicates included.

    Pages with a dedicated layout are read column-wise; anything else falls
    back to scanning every table row for a detail link. Malformed rows are
    skipped without error.
    """

    layout = layout_for(page_type)
    if layout is GENERIC_LAYOUT:
        items = _extract_generic(soup)
    else:
        items = _extract_with_layout(soup, layout)

    _downloader_event(
        "scan",
        phase="extract",
        page_type=page_type.value,
        layout=layout.page_type.value,
        found=len(items),
    )
    return items


def dedupe(items: Iterable[Item]) -> List[Item]:
    """Keep the first occurrence of every torrent id, preserving order."""

    seen: Set[str] = set()
    unique: List[Item] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


__all__ = ["Item", "extract", "dedupe"]
