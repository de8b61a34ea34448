"""Response envelope models.

Consistent response format for API endpoints and middleware rejections.

WHY RESPONSE ENVELOPES:
- Consistent structure across all endpoints
- Easy to distinguish success from error responses
- Pagination metadata and navigation links in a predictable location
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, computed_field

from portal.core.page_links import PaginationLinkBuilder
from portal.core.page_window import page_count_for

T = TypeVar("T")


class PageLink(BaseModel):
    """One numbered pager link."""

    uri: str
    title: int
    active: bool


class PaginationLinks(BaseModel):
    """Navigation URIs for a list response.

    previous/next jump past the displayed window; previous_page/next_page
    move a single page from the current one.
    """

    first: str
    last: str
    current: str
    previous: str | None = None
    next: str | None = None
    previous_page: str | None = None
    next_page: str | None = None
    pages: list[PageLink]

    @classmethod
    def from_builder(cls, builder: PaginationLinkBuilder) -> "PaginationLinks":
        """Collect every URI a pager view needs from a link builder."""
        return cls(
            first=builder.first_uri(),
            last=builder.last_uri(),
            current=builder.current_uri(),
            previous=builder.previous_uri(),
            next=builder.next_uri(),
            previous_page=builder.previous_page_uri(),
            next_page=builder.next_page_uri(),
            pages=[
                PageLink(uri=link.uri, title=link.title, active=link.active)
                for link in builder.links()
            ],
        )


class PaginationMeta(BaseModel):
    """Pagination metadata for collections.

    Attributes:
        total: Total number of items across all pages.
        page: Current page number (1-indexed).
        per_page: Number of items per page.
        links: Navigation links, when the endpoint builds them.
    """

    total: int
    page: int
    per_page: int
    links: PaginationLinks | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        """Calculate total number of pages.

        Returns:
            Number of pages needed to display all items.
            Returns 0 if total is 0.
        """
        return page_count_for(self.total, self.per_page)


class DataResponse(BaseModel, Generic[T]):
    """Standard response envelope for single resources."""

    data: T


class ErrorDetail(BaseModel):
    """Error detail for response body.

    Attributes:
        code: Machine-readable error code (e.g., "CSRF_DISALLOWED_ACTION").
        message: Human-readable error message.
        details: Optional list of field-level errors (for validation).
    """

    code: str
    message: str
    details: list[dict] | None = None


class ErrorResponse(BaseModel):
    """Standard error response envelope.

    Usage in exception handlers:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=ErrorDetail(code=exc.code, message=exc.message)
            ).model_dump(),
        )
    """

    error: ErrorDetail
