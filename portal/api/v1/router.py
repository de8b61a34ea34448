"""API v1 router aggregator.

All v1 endpoint routers are included here and mounted at /api/v1.
"""

from fastapi import APIRouter

from portal.api.v1 import csrf, pager

router = APIRouter()

router.include_router(csrf.router, prefix="/csrf", tags=["csrf"])
router.include_router(pager.router, prefix="/pager", tags=["pager"])
