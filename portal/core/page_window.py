"""Page range calculation.

Computes which page numbers a pager should display around the current
page, and which item indexes the current page covers.

No errors are raised for page numbers: a current page outside
[1, page_count] is accepted as-is and may produce a degenerate window
(first > last). Callers clamp before use if they need strict bounds.
"""

from dataclasses import dataclass


def page_count_for(total: int, per_page: int) -> int:
    """Number of pages needed to display `total` items.

    Args:
        total: Total number of items.
        per_page: Items per page (must be positive).

    Returns:
        Ceiling of total / per_page; 0 when there are no items.
    """
    if total <= 0:
        return 0
    return (total + per_page - 1) // per_page


@dataclass(frozen=True)
class PageWindow:
    """Snapshot of a pager's display window.

    Attributes:
        first: First page number shown as a link.
        last: Last page number shown as a link.
        current: Current page number.
        page_count: Total number of pages.
        total: Total number of items, if known.
        per_page: Items per page, if known.
        per_page_start: 1-indexed number of the first item on the current page.
        per_page_end: 1-indexed number of the last item on the current page.
    """

    first: int
    last: int
    current: int
    page_count: int
    total: int | None = None
    per_page: int | None = None
    per_page_start: int | None = None
    per_page_end: int | None = None

    @property
    def pages(self) -> range:
        """Page numbers in the window, ascending (empty if first > last)."""
        return range(self.first, self.last + 1)


class PageRangeCalculator:
    """Computes page windows and per-page item bounds.

    Item bounds are computed against the full window (first page 1, last
    page page_count), before any surround count narrows what is displayed.

    Usage:
        calc = PageRangeCalculator(page_count=10, current=5, total=195, per_page=20)
        window = calc.window(surround_count=2)  # pages 3..7
    """

    def __init__(
        self,
        *,
        page_count: int,
        current: int,
        total: int | None = None,
        per_page: int | None = None,
    ) -> None:
        self.page_count = page_count
        self.current = current
        self.total = total
        self.per_page = per_page

    def compute_window(self, surround_count: int | None = None) -> tuple[int, int]:
        """Compute the first and last page numbers to display.

        Args:
            surround_count: Links to show on each side of the current page.
                None shows every page.

        Returns:
            (first, last) page numbers.
        """
        if surround_count is None:
            return 1, self.page_count

        first = max(1, self.current - surround_count)
        last = min(self.page_count, self.current + surround_count)
        return first, last

    def compute_per_page_bounds(self) -> tuple[int | None, int | None]:
        """Compute the item numbers the current page starts and ends with.

        The last page absorbs the remainder, so its end is `total` rather
        than a multiple of per_page.

        Returns:
            (start, end), or (None, None) when total or per_page is unknown
            or there are no pages.
        """
        if self.total is None or self.per_page is None or self.page_count == 0:
            return None, None

        _, last = self.compute_window()
        start = self.per_page * (self.current - 1) + 1

        if last == self.current:
            return start, self.total

        if self.current == 1:
            start = 1
        return start, self.per_page * self.current

    def window(self, surround_count: int | None = None) -> PageWindow:
        """Build a PageWindow for the given surround count.

        Args:
            surround_count: Links to show on each side of the current page.

        Returns:
            Immutable PageWindow.
        """
        first, last = self.compute_window(surround_count)
        start, end = self.compute_per_page_bounds()
        return PageWindow(
            first=first,
            last=last,
            current=self.current,
            page_count=self.page_count,
            total=self.total,
            per_page=self.per_page,
            per_page_start=start,
            per_page_end=end,
        )
