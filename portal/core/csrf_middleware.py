"""ASGI middleware enforcing CSRF protection on state-changing requests.

For every HTTP request the middleware:
- restores the CSRF hash from the cookie or session (or generates one),
- publishes the CsrfProtection object on request.state.csrf,
- for POST/PUT/DELETE/PATCH, buffers the body, verifies the token and
  replays the body downstream with the token field stripped,
- appends the CSRF cookie to the response whenever a hash was generated.

This is a raw ASGI middleware (not BaseHTTPMiddleware) for direct access
to the receive callable and the response start message.

Session-backed protection reads scope["session"], so Starlette's
SessionMiddleware must be installed outside this middleware.
"""

from __future__ import annotations

from datetime import UTC, datetime
from urllib.parse import parse_qsl

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from portal.core.config import Settings
from portal.core.config import settings as default_settings
from portal.core.csrf import (
    PROTECTED_METHODS,
    CsrfConfig,
    CsrfProtection,
    CsrfRequest,
    HashStorage,
    strip_form_field,
)
from portal.core.csrf_storage import CookieHashStorage, CsrfCookie, SessionHashStorage
from portal.core.errors import CsrfVerificationFailed
from portal.core.responses import ErrorDetail, ErrorResponse

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class CsrfMiddleware:
    """Verify CSRF tokens and maintain the CSRF hash cookie or session key."""

    def __init__(self, app: ASGIApp, settings: Settings | None = None) -> None:
        """Initialize with the next ASGI application.

        Args:
            app: The next ASGI application in the middleware chain.
            settings: Settings to read CSRF and cookie options from.
        """
        self.app = app
        self.settings = settings or default_settings
        self.config = CsrfConfig.from_settings(self.settings)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        storage = self._storage(scope, request)
        protection = CsrfProtection(self.config, storage)
        scope.setdefault("state", {})["csrf"] = protection

        async def send_with_cookie(message: Message) -> None:
            if message["type"] == "http.response.start":
                pending = getattr(storage, "pending_cookie", None)
                if pending is not None:
                    headers = MutableHeaders(scope=message)
                    headers.append("set-cookie", build_set_cookie_header(pending))
            await send(message)

        method = scope["method"].upper()
        if (
            method not in PROTECTED_METHODS
            or scope["path"] in self.settings.csrf_exempt_paths
        ):
            await self.app(scope, receive, send_with_cookie)
            return

        raw_body = await _read_body(receive)
        body = raw_body.decode("utf-8", "surrogateescape")
        is_form = method == "POST" and request.headers.get(
            "content-type", ""
        ).startswith(_FORM_CONTENT_TYPE)

        csrf_request = CsrfRequest(
            method=method,
            headers=dict(request.headers),
            post=dict(parse_qsl(body, keep_blank_values=True)) if is_form else {},
            body=body,
        )

        try:
            protection.verify(csrf_request)
        except CsrfVerificationFailed as exc:
            response = self._rejection(request, protection, exc)
            await response(scope, receive, send_with_cookie)
            return

        if is_form:
            csrf_request.body = strip_form_field(body, self.config.token_name)

        new_body = csrf_request.body.encode("utf-8", "surrogateescape")
        if new_body != raw_body:
            scope["headers"] = [
                (name, value)
                for name, value in scope["headers"]
                if name.lower() != b"content-length"
            ] + [(b"content-length", str(len(new_body)).encode("latin-1"))]

        body_replayed = False

        async def replay_receive() -> Message:
            nonlocal body_replayed
            if body_replayed:
                return await receive()
            body_replayed = True
            return {"type": "http.request", "body": new_body, "more_body": False}

        await self.app(scope, replay_receive, send_with_cookie)

    def _storage(self, scope: Scope, request: Request) -> HashStorage:
        """Select the hash storage backend for this request."""
        if self.config.protection == "session":
            if "session" not in scope:
                msg = "CSRF_PROTECTION=session requires SessionMiddleware"
                raise RuntimeError(msg)
            return SessionHashStorage(scope["session"], self.config.token_name)
        return CookieHashStorage.from_settings(self.settings, request.cookies)

    def _rejection(
        self,
        request: Request,
        protection: CsrfProtection,
        exc: CsrfVerificationFailed,
    ) -> Response:
        """Build the response for a failed CSRF check.

        Redirects back to the referring page when configured, otherwise
        returns the standard 403 error envelope.
        """
        if protection.should_redirect():
            return RedirectResponse(
                url=request.headers.get("referer", "/"),
                status_code=303,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=ErrorDetail(code=exc.code, message=exc.message)
            ).model_dump(),
        )


async def _read_body(receive: Receive) -> bytes:
    """Buffer the full request body (may arrive in multiple chunks)."""
    body_parts: list[bytes] = []
    while True:
        message = await receive()
        if message["type"] != "http.request":
            break
        body = message.get("body", b"")
        if body:
            body_parts.append(body)
        if not message.get("more_body", False):
            break
    return b"".join(body_parts)


def build_set_cookie_header(cookie: CsrfCookie) -> str:
    """Render a CsrfCookie as a Set-Cookie header value.

    Args:
        cookie: Pending CSRF cookie.

    Returns:
        Header value; no Expires attribute for session cookies.
    """
    response = Response()
    expires: datetime | None = None
    if cookie.expires:
        expires = datetime.fromtimestamp(cookie.expires, UTC)
    response.set_cookie(
        key=cookie.name,
        value=cookie.value,
        expires=expires,
        path=cookie.path,
        domain=cookie.domain or None,
        secure=cookie.secure,
        httponly=cookie.httponly,
        samesite=cookie.samesite,
    )
    return response.headers["set-cookie"]
