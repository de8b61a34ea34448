"""CSRF hash storage backends.

Both backends read the hash once per request and write it back
immediately whenever a new hash is generated. Writes are last-write-wins.
"""

import time
from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Literal

from portal.core.config import Settings
from portal.core.csrf import is_valid_hash


@dataclass(frozen=True)
class CsrfCookie:
    """Pending Set-Cookie for a newly generated hash.

    Attributes:
        name: Cookie name including prefix.
        value: The CSRF hash.
        expires: Absolute expiry in epoch seconds; 0 for a session cookie.
    """

    name: str
    value: str
    expires: int
    path: str = "/"
    domain: str = ""
    secure: bool = False
    httponly: bool = True
    samesite: Literal["lax", "strict", "none"] = "lax"


class CookieHashStorage:
    """Hash stored in a cookie (double submit).

    The cookie always carries the raw hash, even with token randomization
    on. A cookie value that is not exactly 32 hex characters is ignored.
    """

    def __init__(
        self,
        *,
        cookie_value: str | None,
        cookie_name: str,
        expires: int,
        path: str = "/",
        domain: str = "",
        secure: bool = False,
        httponly: bool = True,
        samesite: Literal["lax", "strict", "none"] = "lax",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cookie_value = cookie_value
        self.cookie_name = cookie_name
        self.expires = expires
        self.path = path
        self.domain = domain
        self.secure = secure
        self.httponly = httponly
        self.samesite = samesite
        self._clock = clock
        self.pending_cookie: CsrfCookie | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        cookies: Mapping[str, str],
    ) -> "CookieHashStorage":
        """Build cookie storage from settings and the request cookie jar."""
        name = settings.csrf_cookie_full_name
        return cls(
            cookie_value=cookies.get(name),
            cookie_name=name,
            expires=settings.csrf_expires,
            path=settings.cookie_path,
            domain=settings.cookie_domain,
            secure=settings.cookie_secure,
            httponly=settings.cookie_httponly,
            samesite=settings.cookie_samesite,
        )

    def load(self) -> str | None:
        if is_valid_hash(self.cookie_value):
            return self.cookie_value
        return None

    def save(self, value: str) -> None:
        expires = 0 if self.expires == 0 else int(self._clock()) + self.expires
        self.cookie_value = value
        self.pending_cookie = CsrfCookie(
            name=self.cookie_name,
            value=value,
            expires=expires,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )


class SessionHashStorage:
    """Hash stored server-side under a session key."""

    def __init__(self, session: MutableMapping[str, Any], key: str) -> None:
        self.session = session
        self.key = key

    def load(self) -> str | None:
        value = self.session.get(self.key)
        if isinstance(value, str) and value:
            return value
        return None

    def save(self, value: str) -> None:
        self.session[self.key] = value
