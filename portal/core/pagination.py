"""Pagination request parameters and link building for FastAPI endpoints.

page (default 1), per_page (default PAGER_PER_PAGE, max PAGER_MAX_PER_PAGE).
Links are derived from the request URL so every other query parameter
survives in the generated page URIs.
"""

from dataclasses import dataclass

from fastapi import Query, Request

from portal.core.config import settings
from portal.core.page_links import PaginationLinkBuilder, build_pager
from portal.core.responses import PaginationLinks, PaginationMeta


@dataclass
class PaginationParams:
    """Pagination query parameters.

    Attributes:
        page: Current page number (1-indexed).
        per_page: Number of items per page.
    """

    page: int
    per_page: int

    @property
    def offset(self) -> int:
        """Index of the first item on the page (0-based slice start).

        Returns:
            Number of items before this page (0 for page 1).
        """
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        """Maximum number of items on the page.

        `items[params.offset : params.offset + params.limit]` is the page.

        Returns:
            Same as per_page.
        """
        return self.per_page


def pagination_params(
    page: int = Query(
        default=1,
        ge=1,
        alias=settings.pager_selector,
        description="Page number (1-indexed)",
    ),
    per_page: int = Query(
        default=settings.pager_per_page,
        ge=1,
        le=settings.pager_max_per_page,
        description=f"Items per page (max {settings.pager_max_per_page})",
    ),
) -> PaginationParams:
    """FastAPI dependency for pagination query parameters.

    Usage:
        @router.get("/items")
        async def list_items(
            request: Request,
            pagination: PaginationParams = Depends(pagination_params),
        ):
            items = load_items()
            page_items = items[pagination.offset :][: pagination.limit]
            meta = pagination_meta(request, pagination, len(items))
            ...

    Args:
        page: Page number (default 1, must be >= 1).
        per_page: Items per page (between 1 and PAGER_MAX_PER_PAGE).

    Returns:
        PaginationParams with validated page and per_page.
    """
    return PaginationParams(page=page, per_page=per_page)


def request_pager(
    request: Request,
    params: PaginationParams,
    total: int,
    *,
    surround_count: int | None = None,
    only: tuple[str, ...] | None = None,
) -> PaginationLinkBuilder:
    """Build a link builder whose URIs are based on the request URL.

    Args:
        request: Incoming request; its URL is the link base.
        params: Validated page and per_page.
        total: Total number of items.
        surround_count: Links on each side of the current page
            (PAGER_SURROUND_COUNT when None).
        only: Query keys to keep in the generated URIs.

    Returns:
        Link builder in query mode using PAGER_SELECTOR.
    """
    if surround_count is None:
        surround_count = settings.pager_surround_count
    return build_pager(
        base_uri=str(request.url),
        current=params.page,
        total=total,
        per_page=params.per_page,
        surround_count=surround_count,
        page_selector=settings.pager_selector,
        only=only,
    )


def pagination_meta(
    request: Request,
    params: PaginationParams,
    total: int,
    *,
    surround_count: int | None = None,
    only: tuple[str, ...] | None = None,
) -> PaginationMeta:
    """Build list-response metadata including navigation links.

    Args:
        request: Incoming request; its URL is the link base.
        params: Validated page and per_page.
        total: Total number of items.
        surround_count: Links on each side of the current page.
        only: Query keys to keep in the generated URIs.

    Returns:
        PaginationMeta with links populated.
    """
    builder = request_pager(
        request, params, total, surround_count=surround_count, only=only
    )
    return PaginationMeta(
        total=total,
        page=params.page,
        per_page=params.per_page,
        links=PaginationLinks.from_builder(builder),
    )
