import pytest

from app.nexusdl.layouts import (
    CLAIM_LAYOUT,
    GENERIC_LAYOUT,
    HR_LAYOUT,
    USER_DETAILS_LAYOUT,
    PageType,
    classify,
    layout_for,
)


@pytest.mark.parametrize(
    "location,expected",
    [
        ("https://pt.example.org/claim.php?uid=1", PageType.CLAIM_LIST),
        ("https://pt.example.org/myhr.php", PageType.HR_LIST),
        ("https://pt.example.org/userdetails.php?id=7", PageType.USER_DETAILS_LIST),
        ("https://pt.example.org/torrents.php?cat=401", PageType.TORRENT_LIST),
        ("https://pt.example.org/details.php?id=5&auto_download=1", PageType.DETAIL),
        ("https://pt.example.org/index.php", PageType.UNCLASSIFIED),
        ("", PageType.UNCLASSIFIED),
        (None, PageType.UNCLASSIFIED),
    ],
)
def test_classify(location, expected) -> None:
    assert classify(location) is expected


def test_userdetails_is_never_a_detail_page() -> None:
    page_type = classify("https://pt.example.org/userdetails.php?id=7&type=seeding")

    assert page_type is PageType.USER_DETAILS_LIST
    assert page_type is not PageType.DETAIL


def test_query_string_does_not_affect_classification() -> None:
    assert classify("https://pt.example.org/index.php?next=details.php") is PageType.UNCLASSIFIED


def test_layout_for_falls_back_to_generic() -> None:
    assert layout_for(PageType.CLAIM_LIST) is CLAIM_LAYOUT
    assert layout_for(PageType.HR_LIST) is HR_LAYOUT
    assert layout_for(PageType.USER_DETAILS_LIST) is USER_DETAILS_LAYOUT
    assert layout_for(PageType.TORRENT_LIST) is GENERIC_LAYOUT
    assert layout_for(PageType.DETAIL) is GENERIC_LAYOUT
    assert layout_for(PageType.UNCLASSIFIED) is GENERIC_LAYOUT


def test_detail_link_matching() -> None:
    assert GENERIC_LAYOUT.matches_link("details.php?id=1")
    assert GENERIC_LAYOUT.matches_link("/details.php?id=1#top")
    assert GENERIC_LAYOUT.matches_link("https://pt.example.org/details.php?id=1")
    assert not GENERIC_LAYOUT.matches_link("userdetails.php?id=1")
    assert not GENERIC_LAYOUT.matches_link("details.php.bak")
    assert not GENERIC_LAYOUT.matches_link(None)
    assert not GENERIC_LAYOUT.matches_link("")
