"""Pagination link building.

Turns a PageWindow and a UriTemplate into the URIs and link descriptors a
view needs to render pager navigation.

Two kinds of previous/next exist and both are kept:
- has_previous / has_next move by the displayed window: the target is the
  page just outside the first/last link.
- has_previous_page / has_next_page move by a single page relative to
  the current page.
"""

from dataclasses import dataclass

from portal.core.page_window import PageRangeCalculator, PageWindow, page_count_for
from portal.core.uri_template import UriTemplate


@dataclass(frozen=True)
class LinkDescriptor:
    """One numbered pager link.

    Attributes:
        uri: Target URI for the page.
        title: Page number shown as the link text.
        active: True only for the current page.
    """

    uri: str
    title: int
    active: bool


class PaginationLinkBuilder:
    """Builds navigation URIs and links for one page window.

    Usage:
        builder = PaginationLinkBuilder(window, UriTemplate("/articles?q=php"))
        for link in builder.links():
            ...
        if builder.has_next():
            next_uri = builder.next_uri()
    """

    def __init__(self, window: PageWindow, template: UriTemplate) -> None:
        self.window = window
        self.template = template

    # -- window-relative navigation -------------------------------------

    def has_previous(self) -> bool:
        """Check if there is a page before the first displayed link."""
        return self.window.first > 1

    def previous_uri(self) -> str | None:
        """URI of the page just before the first displayed link."""
        if not self.has_previous():
            return None
        return self.template.with_page(self.window.first - 1)

    def has_next(self) -> bool:
        """Check if there is a page after the last displayed link."""
        return self.window.page_count > self.window.last

    def next_uri(self) -> str | None:
        """URI of the page just after the last displayed link."""
        if not self.has_next():
            return None
        return self.template.with_page(self.window.last + 1)

    # -- current-relative navigation ------------------------------------

    def has_previous_page(self) -> bool:
        """Check if there is a page before the current page."""
        return self.window.current > 1

    def previous_page_uri(self) -> str | None:
        """URI of the page before the current page."""
        if not self.has_previous_page():
            return None
        return self.template.with_page(self.window.current - 1)

    def has_next_page(self) -> bool:
        """Check if there is a page after the current page within the window."""
        return self.window.current < self.window.last

    def next_page_uri(self) -> str | None:
        """URI of the page after the current page."""
        if not self.has_next_page():
            return None
        return self.template.with_page(self.window.current + 1)

    # -- fixed targets ----------------------------------------------------

    def first_uri(self) -> str:
        return self.template.with_page(1)

    def last_uri(self) -> str:
        return self.template.with_page(self.window.page_count)

    def current_uri(self) -> str:
        return self.template.with_page(self.window.current)

    def links(self) -> list[LinkDescriptor]:
        """Build one link per page in the displayed window.

        Returns:
            LinkDescriptors ascending by page number; empty when there
            are no pages.
        """
        return [
            LinkDescriptor(
                uri=self.template.with_page(page),
                title=page,
                active=page == self.window.current,
            )
            for page in self.window.pages
        ]

    # -- page numbers -----------------------------------------------------

    @property
    def first_page_number(self) -> int:
        return self.window.first

    @property
    def last_page_number(self) -> int:
        return self.window.last

    @property
    def current_page_number(self) -> int:
        return self.window.current

    @property
    def page_count(self) -> int:
        return self.window.page_count

    @property
    def previous_page_number(self) -> int | None:
        """Page before the current one, None on page 1."""
        if self.window.current == 1:
            return None
        return self.window.current - 1

    @property
    def next_page_number(self) -> int | None:
        """Page after the current one, None on the last page."""
        if self.window.current == self.window.page_count:
            return None
        return self.window.current + 1

    @property
    def total(self) -> int | None:
        return self.window.total

    @property
    def per_page(self) -> int | None:
        return self.window.per_page

    @property
    def per_page_start(self) -> int | None:
        return self.window.per_page_start

    @property
    def per_page_end(self) -> int | None:
        return self.window.per_page_end


def build_pager(
    *,
    base_uri: str,
    current: int,
    total: int | None = None,
    per_page: int | None = None,
    page_count: int | None = None,
    surround_count: int | None = None,
    segment: int = 0,
    page_selector: str = "page",
    only: tuple[str, ...] | None = None,
) -> PaginationLinkBuilder:
    """Build a PaginationLinkBuilder from plain counts.

    Args:
        base_uri: URI the links are derived from.
        current: Current page number.
        total: Total number of items.
        per_page: Items per page.
        page_count: Total pages; derived from total and per_page when omitted.
        surround_count: Links to show on each side of the current page.
        segment: 0 for query mode, N > 0 for path segment mode.
        page_selector: Query parameter name for query mode.
        only: Query keys to keep in generated URIs.

    Returns:
        Link builder for the computed window.

    Raises:
        ValueError: If page_count cannot be determined.
    """
    if page_count is None:
        if total is None or per_page is None:
            msg = "page_count is required when total or per_page is missing"
            raise ValueError(msg)
        page_count = page_count_for(total, per_page)

    calculator = PageRangeCalculator(
        page_count=page_count,
        current=current,
        total=total,
        per_page=per_page,
    )
    template = UriTemplate(
        base_uri=base_uri,
        segment=segment,
        page_selector=page_selector,
        only=only,
    )
    return PaginationLinkBuilder(calculator.window(surround_count), template)
