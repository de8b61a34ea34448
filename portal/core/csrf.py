"""CSRF protection: hash lifecycle, token randomization, and verification.

The server keeps one secret hash per client, persisted in a cookie or a
session (see portal.core.csrf_storage). Pages embed a token derived from
that hash; state-changing requests must send it back.

Token randomization (BREACH mitigation):
    token = hex((hash_bytes XOR key_bytes) + key_bytes)
A fresh 16-byte key is drawn for every emission, so the transmitted bytes
differ each time while the hash is recoverable by XOR-ing the halves.

Regeneration after every verified request is last-write-wins: two tabs
submitting at once may leave one of them holding a stale token. Set
regenerate=False to keep one hash valid for concurrent forms.
"""

import enum
import hmac
import json
import logging
import re
import secrets
from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol
from urllib.parse import parse_qsl, unquote_plus

from portal.core.config import Settings
from portal.core.errors import CsrfVerificationFailed

logger = logging.getLogger(__name__)

CSRF_HASH_BYTES = 16
"""Random bytes in a CSRF hash (32 hex characters)."""

PROTECTED_METHODS = frozenset({"POST", "PUT", "DELETE", "PATCH"})
"""HTTP methods that must carry a valid token."""

_HASH_RE = re.compile(rf"[0-9a-f]{{{CSRF_HASH_BYTES * 2}}}", re.IGNORECASE)


class MalformedTokenError(ValueError):
    """Randomized token could not be hex-decoded into hash and key halves."""


class CsrfState(enum.Enum):
    """Lifecycle of the CSRF hash within one request."""

    UNINITIALIZED = "uninitialized"
    HASH_RESTORED = "hash_restored"
    HASH_GENERATED = "hash_generated"
    VERIFIED = "verified"
    REJECTED = "rejected"


class HashStorage(Protocol):
    """Where the CSRF hash is persisted between requests."""

    def load(self) -> str | None:
        """Return the stored hash, or None if absent or invalid."""
        ...

    def save(self, value: str) -> None:
        """Persist a newly generated hash immediately."""
        ...


@dataclass(frozen=True)
class CsrfConfig:
    """CSRF protection settings.

    Attributes:
        protection: Storage backend, "cookie" or "session".
        token_randomize: Mask the hash with a fresh XOR key per emission.
        regenerate: Issue a new hash after every successful verification.
        expires: Cookie lifetime in seconds (0 = browser session).
        token_name: Form/JSON field and session key name.
        header_name: Request header carrying the token.
        cookie_name: Cookie name including prefix.
        redirect: Redirect back instead of returning 403 on failure.
    """

    protection: Literal["cookie", "session"] = "cookie"
    token_randomize: bool = False
    regenerate: bool = True
    expires: int = 7200
    token_name: str = "csrf_token_name"
    header_name: str = "X-CSRF-TOKEN"
    cookie_name: str = "csrf_cookie_name"
    redirect: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "CsrfConfig":
        return cls(
            protection=settings.csrf_protection,
            token_randomize=settings.csrf_token_randomize,
            regenerate=settings.csrf_regenerate,
            expires=settings.csrf_expires,
            token_name=settings.csrf_token_name,
            header_name=settings.csrf_header_name,
            cookie_name=settings.csrf_cookie_full_name,
            redirect=settings.csrf_redirect,
        )


@dataclass
class CsrfRequest:
    """Request context the CSRF check reads from and strips the token out of.

    Attributes:
        method: HTTP method (any case).
        headers: Request headers; lookups are case-insensitive.
        post: Form fields of a form-encoded POST body.
        body: Raw request body text.
    """

    method: str
    headers: Mapping[str, str] = field(default_factory=dict)
    post: MutableMapping[str, str] = field(default_factory=dict)
    body: str = ""

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


# ===================================================================
# Hash generation and randomization
# ===================================================================


def generate_hash() -> str:
    """Draw a new random CSRF hash (32 hex characters)."""
    return secrets.token_bytes(CSRF_HASH_BYTES).hex()


def is_valid_hash(value: str | None) -> bool:
    """Check that value looks like a CSRF hash (hex, case-insensitive)."""
    return value is not None and _HASH_RE.fullmatch(value) is not None


def randomize(hash_value: str, key: bytes | None = None) -> str:
    """Mask a hash with a random XOR key.

    Args:
        hash_value: CSRF hash (32 hex characters).
        key: XOR key; a fresh random key when None.

    Returns:
        64 hex characters: masked hash followed by the key.

    Raises:
        ValueError: If hash_value is not a valid hash.
    """
    if not is_valid_hash(hash_value):
        msg = f"Invalid CSRF hash: {hash_value!r}"
        raise ValueError(msg)
    if key is None:
        key = secrets.token_bytes(CSRF_HASH_BYTES)

    hash_binary = bytes.fromhex(hash_value)
    masked = bytes(h ^ k for h, k in zip(hash_binary, key, strict=True))
    return (masked + key).hex()


def derandomize(token: str) -> str:
    """Recover the hash from a randomized token.

    Args:
        token: Masked hash followed by its key, both hex.

    The key is the trailing 32 characters, so extra characters between
    the masked hash and the key are ignored.

    Returns:
        The unmasked hash as lowercase hex.

    Raises:
        MalformedTokenError: If the token is shorter than 64 characters or
            either segment is not 32 hex characters.
    """
    width = CSRF_HASH_BYTES * 2
    value, key = token[:width], token[-width:]
    if len(token) < width * 2 or not (is_valid_hash(value) and is_valid_hash(key)):
        msg = f"Randomized CSRF token must be {width * 2} hex characters"
        raise MalformedTokenError(msg)

    pairs = zip(bytes.fromhex(value), bytes.fromhex(key), strict=True)
    return bytes(v ^ k for v, k in pairs).hex()


# ===================================================================
# Posted token extraction
# ===================================================================

TokenExtractor = Callable[[CsrfRequest, CsrfConfig], str | None]


def _json_object(body: str) -> dict[str, Any] | None:
    """Parse body as a JSON object; None if it is not one."""
    if not body:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _non_empty(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def token_from_post(request: CsrfRequest, config: CsrfConfig) -> str | None:
    return _non_empty(request.post.get(config.token_name))


def token_from_header(request: CsrfRequest, config: CsrfConfig) -> str | None:
    return _non_empty(request.header(config.header_name))


def token_from_json_body(request: CsrfRequest, config: CsrfConfig) -> str | None:
    data = _json_object(request.body)
    if data is None:
        return None
    return _non_empty(data.get(config.token_name))


def token_from_form_body(request: CsrfRequest, config: CsrfConfig) -> str | None:
    # JSON bodies are handled above; never reinterpret them as form data
    if not request.body or _json_object(request.body) is not None:
        return None
    parsed = dict(parse_qsl(request.body, keep_blank_values=True))
    return _non_empty(parsed.get(config.token_name))


TOKEN_EXTRACTORS: tuple[TokenExtractor, ...] = (
    token_from_post,
    token_from_header,
    token_from_json_body,
    token_from_form_body,
)
"""Token sources in priority order; the first non-empty value wins."""


def get_posted_token(request: CsrfRequest, config: CsrfConfig) -> str | None:
    """Find the token a request carries.

    Args:
        request: Incoming request context.
        config: CSRF settings (field and header names).

    Returns:
        The first non-empty token found, or None.
    """
    for extractor in TOKEN_EXTRACTORS:
        token = extractor(request, config)
        if token is not None:
            return token
    return None


def remove_token_from_request(request: CsrfRequest, token_name: str) -> None:
    """Strip the token field so handlers never see it as user data.

    Checks the POST map first, then a JSON object body, then a
    form-encoded body. Bodies without the field are left untouched.
    """
    if token_name in request.post:
        del request.post[token_name]
        return

    data = _json_object(request.body)
    if data is not None:
        if token_name in data:
            del data[token_name]
            # ASCII output: string values may hold lone surrogates
            request.body = json.dumps(data)
        return

    if request.body:
        request.body = strip_form_field(request.body, token_name)


def strip_form_field(body: str, name: str) -> str:
    """Drop every `name` pair from a form-encoded body.

    Remaining pairs are kept verbatim. The body is returned unchanged
    when it has no such pair.
    """
    pairs = body.split("&")
    kept = [pair for pair in pairs if unquote_plus(pair.split("=", 1)[0]) != name]
    if len(kept) == len(pairs):
        return body
    return "&".join(kept)


# ===================================================================
# Protocol
# ===================================================================


class CsrfProtection:
    """Per-request CSRF protection bound to one hash storage backend.

    Construction restores the hash from storage, or generates and saves
    a new one when none is stored.

    Usage:
        protection = CsrfProtection(config, CookieHashStorage(...))
        protection.verify(request)  # raises CsrfVerificationFailed
        token = protection.get_token()  # embed in the next form
    """

    def __init__(self, config: CsrfConfig, storage: HashStorage) -> None:
        self.config = config
        self.storage = storage
        self.state = CsrfState.UNINITIALIZED

        stored = storage.load()
        if stored is None:
            self.hash: str = self.generate_hash()
        else:
            self.hash = stored
            self.state = CsrfState.HASH_RESTORED

    @property
    def token_name(self) -> str:
        return self.config.token_name

    @property
    def header_name(self) -> str:
        return self.config.header_name

    @property
    def cookie_name(self) -> str:
        return self.config.cookie_name

    def should_redirect(self) -> bool:
        """Check if a failed check should redirect back instead of 403."""
        return self.config.redirect

    def generate_hash(self) -> str:
        """Generate (or regenerate) the hash and persist it immediately."""
        self.hash = generate_hash()
        self.storage.save(self.hash)
        self.state = CsrfState.HASH_GENERATED
        return self.hash

    def get_token(self) -> str:
        """Return the client-facing token (randomized when enabled)."""
        if self.config.token_randomize:
            return randomize(self.hash)
        return self.hash

    def verify(self, request: CsrfRequest) -> None:
        """Verify the token carried by a state-changing request.

        Safe methods pass without a token. On success the token is
        stripped from the request payload and, if configured, the hash
        is regenerated.

        Args:
            request: Incoming request context (mutated on success).

        Raises:
            CsrfVerificationFailed: If the token is absent, malformed,
                or does not match the stored hash.
        """
        if request.method.upper() not in PROTECTED_METHODS:
            return

        posted = get_posted_token(request, self.config)
        token = posted
        if posted is not None and self.config.token_randomize:
            try:
                token = derandomize(posted)
            except MalformedTokenError:
                token = None

        # Posted values may carry lone surrogates (JSON escapes, undecodable bytes)
        if token is None or not hmac.compare_digest(
            self.hash.encode("utf-8", "surrogatepass"),
            token.encode("utf-8", "surrogatepass"),
        ):
            self.state = CsrfState.REJECTED
            logger.warning(
                "CSRF verification failed",
                extra={"method": request.method, "token_present": posted is not None},
            )
            raise CsrfVerificationFailed()

        remove_token_from_request(request, self.config.token_name)
        self.state = CsrfState.VERIFIED

        if self.config.regenerate:
            self.generate_hash()

        logger.info("CSRF token verified.")
