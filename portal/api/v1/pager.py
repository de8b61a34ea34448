"""Pager API router.

Computes pagination metadata and navigation links for a result count,
so server-rendered and script clients share one link algorithm. Links
keep the caller's other query parameters.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from portal.core.pagination import PaginationParams, pagination_meta, pagination_params
from portal.core.responses import DataResponse, PaginationMeta

router = APIRouter()

Pagination = Annotated[PaginationParams, Depends(pagination_params)]


@router.get("")
async def get_pager(
    request: Request,
    pagination: Pagination,
    total: Annotated[int, Query(ge=0, description="Total number of items")],
    surround: Annotated[
        int | None,
        Query(ge=0, le=50, description="Links on each side of the current page"),
    ] = None,
) -> DataResponse[PaginationMeta]:
    """Return pagination metadata with links for `total` items."""
    return DataResponse(
        data=pagination_meta(request, pagination, total, surround_count=surround)
    )
