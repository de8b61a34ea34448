"""Tests for pagination utilities."""

from starlette.requests import Request

from portal.core.pagination import (
    PaginationParams,
    pagination_meta,
    pagination_params,
    request_pager,
)


def _request(path: str, query: str = "") -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("test", 80),
        "path": path,
        "query_string": query.encode("latin-1"),
        "headers": [(b"host", b"test")],
    }
    return Request(scope)


class TestPaginationParams:
    """Tests for PaginationParams dataclass."""

    def test_pagination_params_stores_values(self):
        """PaginationParams should store page and per_page."""
        params = PaginationParams(page=3, per_page=25)
        assert params.page == 3
        assert params.per_page == 25

    def test_offset_page_one(self):
        """Page 1 should have offset 0."""
        assert PaginationParams(page=1, per_page=20).offset == 0

    def test_offset_calculation(self):
        """Offset should be (page - 1) * per_page."""
        params = PaginationParams(page=5, per_page=10)
        assert params.offset == 40  # (5 - 1) * 10

    def test_limit_equals_per_page(self):
        """Limit should equal per_page."""
        assert PaginationParams(page=1, per_page=50).limit == 50

    def test_offset_and_limit_slice_a_page(self):
        """offset and limit select the items of the current page."""
        params = PaginationParams(page=3, per_page=4)
        items = list(range(1, 11))
        assert items[params.offset :][: params.limit] == [9, 10]


class TestPaginationParamsDependency:
    """Tests for pagination_params FastAPI dependency.

    Query defaults only resolve through FastAPI's dependency injection,
    which the endpoint tests cover.
    """

    def test_accepts_page_and_per_page(self):
        """pagination_params should accept page and per_page args."""
        params = pagination_params(page=3, per_page=25)
        assert isinstance(params, PaginationParams)
        assert params.offset == 50


class TestRequestPager:
    """Tests for request_pager."""

    def test_links_keep_request_query(self):
        """Generated URIs keep the other query parameters of the request."""
        request = _request("/articles", "q=php&page=2")
        builder = request_pager(
            request, PaginationParams(page=2, per_page=20), total=95
        )
        assert builder.page_count == 5
        assert builder.current_uri() == "http://test/articles?q=php&page=2"
        assert builder.next_page_uri() == "http://test/articles?q=php&page=3"

    def test_default_surround_count(self):
        """Without a surround count the configured default is used."""
        request = _request("/articles")
        builder = request_pager(
            request, PaginationParams(page=5, per_page=10), total=100
        )
        assert [link.title for link in builder.links()] == [3, 4, 5, 6, 7]

    def test_only_filters_query(self):
        """The allow-list drops other query keys."""
        request = _request("/articles", "q=php&debug=1")
        builder = request_pager(
            request,
            PaginationParams(page=1, per_page=10),
            total=30,
            surround_count=0,
            only=("q",),
        )
        assert builder.last_uri() == "http://test/articles?q=php&page=3"


class TestPaginationMetaBuilder:
    """Tests for pagination_meta."""

    def test_meta_with_links(self):
        """Metadata includes totals, item bounds and navigation links."""
        request = _request("/articles", "page=5")
        meta = pagination_meta(
            request, PaginationParams(page=5, per_page=20), total=95
        )
        assert meta.total == 95
        assert meta.page == 5
        assert meta.total_pages == 5
        assert meta.links is not None
        assert meta.links.next_page is None
        assert meta.links.previous_page == "http://test/articles?page=4"

    def test_empty_collection(self):
        """No items: zero pages and no page links."""
        meta = pagination_meta(
            _request("/articles"), PaginationParams(page=1, per_page=20), total=0
        )
        assert meta.total_pages == 0
        assert meta.links is not None
        assert meta.links.pages == []
