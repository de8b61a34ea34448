"""CSRF token API router.

Lets script clients fetch the current token and the names it must be
sent under. Reading the token never rotates the hash.
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from portal.core.csrf import CsrfProtection
from portal.core.responses import DataResponse

router = APIRouter()


class CsrfTokenResponse(BaseModel):
    """Where and what to send back on state-changing requests.

    Attributes:
        token_name: Form or JSON field name.
        header_name: Header name (alternative to the field).
        cookie_name: Cookie holding the hash in cookie mode.
        token: Token value (randomized per call when enabled).
    """

    token_name: str
    header_name: str
    cookie_name: str
    token: str


@router.get("")
async def get_csrf_token(request: Request) -> DataResponse[CsrfTokenResponse]:
    """Return the CSRF token for the current client.

    The CSRF middleware restores or generates the hash before this runs
    and sets the cookie when a new hash was generated.
    """
    protection: CsrfProtection = request.state.csrf
    return DataResponse(
        data=CsrfTokenResponse(
            token_name=protection.token_name,
            header_name=protection.header_name,
            cookie_name=protection.cookie_name,
            token=protection.get_token(),
        )
    )
