"""Tests for Link header pagination helpers."""

import pytest

from gh_pr_stats.github.pagination import (
    PaginationMetadataError,
    last_page_number,
    page_number,
    parse_link_header,
)

LINK_HEADER = (
    '<https://api.github.com/repositories/8514/pulls?state=closed&page=2>; rel="next", '
    '<https://api.github.com/repositories/8514/pulls?state=closed&page=341>; rel="last"'
)


class TestParseLinkHeader:
    """Tests for parse_link_header."""

    def test_next_and_last(self) -> None:
        """Test a standard first-page header."""
        links = parse_link_header(LINK_HEADER)

        assert set(links) == {"next", "last"}
        assert links["last"].endswith("page=341")

    def test_all_relations(self) -> None:
        """Test a middle-page header with prev/first relations."""
        header = (
            '<https://x/pulls?page=4>; rel="next", <https://x/pulls?page=9>; rel="last", '
            '<https://x/pulls?page=1>; rel="first", <https://x/pulls?page=2>; rel="prev"'
        )

        assert set(parse_link_header(header)) == {"next", "last", "first", "prev"}

    @pytest.mark.parametrize("header", [None, "", "garbage", "<no-rel>"])
    def test_empty_or_invalid(self, header) -> None:
        """Test missing or unparseable headers yield no links."""
        assert parse_link_header(header) == {}


class TestPageNumber:
    """Tests for page_number and last_page_number."""

    def test_page_number(self) -> None:
        """Test the page parameter is extracted regardless of position."""
        assert page_number("https://x/pulls?page=7&state=closed") == 7
        assert page_number("https://x/pulls?state=closed&per_page=100&page=12") == 12

    @pytest.mark.parametrize(
        "url",
        [
            "https://x/pulls?state=closed",
            "https://x/pulls?page=abc",
            "https://x/pulls?page=0",
            "https://x/pulls?page=-3",
        ],
    )
    def test_page_number_malformed(self, url) -> None:
        """Test malformed page parameters raise PaginationMetadataError."""
        with pytest.raises(PaginationMetadataError):
            page_number(url)

    def test_last_page_number(self) -> None:
        """Test the last relation is resolved to its page index."""
        assert last_page_number(parse_link_header(LINK_HEADER)) == 341

    def test_last_page_number_absent(self) -> None:
        """Test a response without a last link has no last page."""
        assert last_page_number({"next": "https://x/pulls?page=2"}) is None
        assert last_page_number({}) is None
