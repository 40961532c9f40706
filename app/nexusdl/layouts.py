from __future__ import annotations

"""Page classification and the table layouts torrents are listed in.

Each NexusPHP listing page renders its torrents in a slightly different
table. The descriptors below record where the title column sits and how many
header rows precede the data; pages without a descriptor are scanned with the
generic row walker.
"""

import posixpath
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Pattern
from urllib.parse import urlparse

from . import config


class PageType(str, Enum):
    CLAIM_LIST = "claim-list"
    HR_LIST = "hr-list"
    USER_DETAILS_LIST = "userdetails-list"
    TORRENT_LIST = "torrent-list"
    DETAIL = "detail"
    UNCLASSIFIED = "unclassified"


# Matched against the basename of the location path. "userdetails.php" must
# never be read as a detail page.
_PAGES: Dict[str, PageType] = {
    "claim.php": PageType.CLAIM_LIST,
    "myhr.php": PageType.HR_LIST,
    "userdetails.php": PageType.USER_DETAILS_LIST,
    "torrents.php": PageType.TORRENT_LIST,
    config.DETAIL_PAGE: PageType.DETAIL,
}

DETAIL_LINK_PATTERN: Pattern[str] = re.compile(
    r"(?:^|/)" + re.escape(config.DETAIL_PAGE) + r"(?:[?#]|$)", re.IGNORECASE
)


@dataclass(frozen=True)
class LayoutDescriptor:
    """Where torrents live on one kind of listing page.

    ``title_column_index`` of ``None`` means any cell of the row may hold the
    detail link (the generic walker). ``title_selector`` names an element
    nested in the anchor whose text is preferred as the title.
    """

    page_type: PageType
    table_selector: str
    header_rows_to_skip: int = 1
    title_column_index: Optional[int] = 1
    title_selector: Optional[str] = None
    link_pattern: Pattern[str] = DETAIL_LINK_PATTERN
    first_table_only: bool = True

    def matches_link(self, href: str | None) -> bool:
        return bool(href) and bool(self.link_pattern.search(href.strip()))


CLAIM_LAYOUT = LayoutDescriptor(
    page_type=PageType.CLAIM_LIST,
    table_selector="table#claim-table",
    header_rows_to_skip=1,
    title_column_index=2,
)

HR_LAYOUT = LayoutDescriptor(
    page_type=PageType.HR_LIST,
    table_selector="table#hr-table",
    header_rows_to_skip=1,
    title_column_index=1,
)

USER_DETAILS_LAYOUT = LayoutDescriptor(
    page_type=PageType.USER_DETAILS_LIST,
    table_selector="tr table",
    header_rows_to_skip=1,
    title_column_index=1,
    title_selector="b",
    first_table_only=False,
)

GENERIC_LAYOUT = LayoutDescriptor(
    page_type=PageType.UNCLASSIFIED,
    table_selector="table tr",
    header_rows_to_skip=0,
    title_column_index=None,
    first_table_only=False,
)

LAYOUTS: Dict[PageType, LayoutDescriptor] = {
    layout.page_type: layout for layout in (CLAIM_LAYOUT, HR_LAYOUT, USER_DETAILS_LAYOUT)
}


def classify(location: str | None) -> PageType:
    """Return the page type for *location*; unknown pages are ``UNCLASSIFIED``."""

    if not location:
        return PageType.UNCLASSIFIED
    try:
        path = urlparse(location.strip()).path
    except ValueError:
        return PageType.UNCLASSIFIED
    page = posixpath.basename(path).lower()
    return _PAGES.get(page, PageType.UNCLASSIFIED)


def layout_for(page_type: PageType) -> LayoutDescriptor:
    """Return the descriptor for *page_type*, falling back to the generic walker."""

    return LAYOUTS.get(page_type, GENERIC_LAYOUT)


__all__ = [
    "PageType",
    "LayoutDescriptor",
    "DETAIL_LINK_PATTERN",
    "CLAIM_LAYOUT",
    "HR_LAYOUT",
    "USER_DETAILS_LAYOUT",
    "GENERIC_LAYOUT",
    "LAYOUTS",
    "classify",
    "layout_for",
]
