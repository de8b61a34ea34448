"""Tests for page URI rewriting."""

import pytest

from portal.core.uri_template import UriTemplate


class TestQueryMode:
    """Page number written to a query parameter."""

    def test_appends_page_parameter(self):
        """A base URI without the selector gets it appended."""
        template = UriTemplate("http://example.com/articles")
        assert template.with_page(3) == "http://example.com/articles?page=3"

    def test_replaces_existing_page_in_place(self):
        """An existing selector keeps its position among other pairs."""
        template = UriTemplate("http://example.com/articles?page=1&q=php")
        assert template.with_page(4) == "http://example.com/articles?page=4&q=php"

    def test_preserves_other_pairs_verbatim(self):
        """Other query pairs are not re-encoded."""
        template = UriTemplate("/admin/artikel?q=hello%20world&sort=-date#list")
        assert template.with_page(2) == "/admin/artikel?q=hello%20world&sort=-date&page=2#list"

    def test_custom_page_selector(self):
        """The query parameter name is configurable."""
        template = UriTemplate("https://example.com/list?q=x", page_selector="p")
        assert template.with_page(5) == "https://example.com/list?q=x&p=5"

    def test_duplicate_selectors_collapse(self):
        """Repeated selectors are reduced to one."""
        template = UriTemplate("/list?page=1&a=b&page=2")
        assert template.with_page(3) == "/list?page=3&a=b"

    def test_preserves_scheme_authority_and_fragment(self):
        """Scheme, user info, port and fragment survive."""
        template = UriTemplate("https://user@example.com:8443/a/b?x=1#frag")
        assert template.with_page(9) == "https://user@example.com:8443/a/b?x=1&page=9#frag"

    def test_only_keeps_allow_listed_keys(self):
        """With only set, other query keys are dropped."""
        template = UriTemplate("/admin/artikel?q=php&debug=1&page=2", only=("q",))
        assert template.with_page(3) == "/admin/artikel?q=php&page=3"


class TestSegmentMode:
    """Page number written into a path segment."""

    def test_replaces_nth_segment(self):
        """Segment 2 of /articles/1/list becomes the page."""
        template = UriTemplate("http://example.com/articles/1/list", segment=2)
        assert template.with_page(7) == "http://example.com/articles/7/list"

    def test_preserves_query_and_fragment(self):
        """Query and fragment are untouched in segment mode."""
        template = UriTemplate("/articles/1?q=php&page=9#top", segment=2)
        assert template.with_page(3) == "/articles/3?q=php&page=9#top"

    def test_preserves_trailing_slash(self):
        """A trailing slash on the path is kept."""
        template = UriTemplate("/articles/1/", segment=2)
        assert template.with_page(2) == "/articles/2/"

    def test_segment_past_end_appends(self):
        """A segment index beyond the path appends the page."""
        template = UriTemplate("/articles", segment=2)
        assert template.with_page(4) == "/articles/4"

    def test_segment_past_end_of_root(self):
        """Segment mode on an empty path creates the segment."""
        template = UriTemplate("http://example.com", segment=1)
        assert template.with_page(2) == "http://example.com/2"

    def test_only_filters_query(self):
        """The allow-list also applies in segment mode."""
        template = UriTemplate("/articles/1?q=php&debug=1", segment=2, only=("q",))
        assert template.with_page(2) == "/articles/2?q=php"

    def test_is_segment_mode(self):
        """segment > 0 selects segment mode."""
        assert UriTemplate("/a", segment=1).is_segment_mode
        assert not UriTemplate("/a").is_segment_mode


class TestValidation:
    """Template construction rules."""

    def test_negative_segment_rejected(self):
        """A negative segment index is a configuration error."""
        with pytest.raises(ValueError, match="segment"):
            UriTemplate("/a", segment=-1)

    def test_deterministic(self):
        """Same template and page always give the same URI."""
        template = UriTemplate("/articles?q=php")
        assert template.with_page(2) == template.with_page(2)
