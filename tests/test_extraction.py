from app.nexusdl.document import parse_html
from app.nexusdl.extraction import Item, dedupe, extract
from app.nexusdl.layouts import PageType
from tests.pages import (
    CLAIM_PAGE,
    DETAIL_PAGE,
    HR_PAGE,
    TORRENTS_PAGE,
    USER_DETAILS_PAGE,
)


def _pairs(items):
    return [(item.id, item.title) for item in items]


def test_claim_layout_reads_title_column_of_first_table_only() -> None:
    items = extract(parse_html(CLAIM_PAGE), PageType.CLAIM_LIST)

    assert _pairs(items) == [("101", "Alpha"), ("102", "Beta"), ("101", "Alpha again")]


def test_claim_page_scan_dedupes_to_first_occurrence() -> None:
    items = dedupe(extract(parse_html(CLAIM_PAGE), PageType.CLAIM_LIST))

    assert _pairs(items) == [("101", "Alpha"), ("102", "Beta")]


def test_hr_layout_skips_malformed_rows() -> None:
    items = extract(parse_html(HR_PAGE), PageType.HR_LIST)

    assert _pairs(items) == [("201", "Gamma"), ("203", "Delta")]


def test_user_details_layout_prefers_bold_title_across_tables() -> None:
    items = extract(parse_html(USER_DETAILS_PAGE), PageType.USER_DETAILS_LIST)

    assert _pairs(items) == [("301", "Epsilon"), ("302", "Zeta"), ("303", "Eta")]


def test_torrent_list_uses_generic_row_walker() -> None:
    items = extract(parse_html(TORRENTS_PAGE), PageType.TORRENT_LIST)

    assert _pairs(items) == [("401", "Theta"), ("402", "Iota")]


def test_unclassified_page_uses_generic_row_walker() -> None:
    items = extract(parse_html(HR_PAGE), PageType.UNCLASSIFIED)

    assert [item.id for item in items] == ["201", "203"]


def test_page_without_tables_yields_nothing() -> None:
    assert extract(parse_html(DETAIL_PAGE), PageType.DETAIL) == []
    assert extract(parse_html("<html><body></body></html>"), PageType.CLAIM_LIST) == []


def test_items_keep_their_source_row() -> None:
    items = extract(parse_html(HR_PAGE), PageType.HR_LIST)

    assert items[0].source_ref is not None
    assert items[0].source_ref.name == "tr"


def test_extraction_is_repeatable() -> None:
    soup = parse_html(CLAIM_PAGE)

    assert extract(soup, PageType.CLAIM_LIST) == extract(soup, PageType.CLAIM_LIST)


def test_dedupe_preserves_order_and_is_idempotent() -> None:
    items = [Item("3", "c"), Item("1", "a"), Item("3", "c2"), Item("2", "b"), Item("1", "a2")]

    once = dedupe(items)

    assert _pairs(once) == [("3", "c"), ("1", "a"), ("2", "b")]
    assert dedupe(once) == once
    assert dedupe([]) == []


def test_unusable_detail_links_are_reported_as_gaps(monkeypatch) -> None:
    from app.nexusdl import extraction
    from app.nexusdl.error_codes import ErrorCode

    events = []
    monkeypatch.setattr(extraction, "_downloader_event", lambda label, **fields: events.append(fields))

    extract(parse_html(HR_PAGE), PageType.HR_LIST)

    gaps = [event for event in events if event.get("error_code") == ErrorCode.EXTRACTION_GAP]
    assert [gap["href"] for gap in gaps] == ["details.php?id=abc", "details.php?id=202"]
