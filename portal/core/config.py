"""Application configuration loaded from environment variables.

Settings for CSRF protection, the CSRF cookie, sessions, pagination and
logging. Uses pydantic-settings for validation and .env file support.
"""

from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Minimum length for SESSION_SECRET in production (256 bits = 32 bytes)
_MIN_SESSION_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    # CSRF protection
    # "cookie": hash lives in a cookie (double submit)
    # "session": hash lives in the server-side session
    csrf_protection: Literal["cookie", "session"] = "cookie"
    csrf_token_randomize: bool = False
    csrf_regenerate: bool = True
    csrf_expires: int = 7200  # seconds; 0 = browser-session cookie
    csrf_token_name: str = "csrf_token_name"
    csrf_header_name: str = "X-CSRF-TOKEN"
    csrf_cookie_name: str = "csrf_cookie_name"
    csrf_redirect: bool = False
    csrf_exempt_paths: list[str] = []

    # Cookie defaults (applied to the CSRF cookie)
    cookie_prefix: str = ""
    cookie_path: str = "/"
    cookie_domain: str = ""
    cookie_secure: bool = False
    cookie_httponly: bool = True
    cookie_samesite: Literal["lax", "strict", "none"] = "lax"

    # Sessions (only used when csrf_protection == "session")
    session_secret: SecretStr = SecretStr("")
    session_cookie_name: str = "portal_session"

    # Pagination
    pager_selector: str = "page"
    pager_surround_count: int = 2
    pager_per_page: int = 20
    pager_max_per_page: int = 100

    @model_validator(mode="after")
    def check_security(self) -> "Settings":
        """Validate cookie and CSRF configuration.

        Checks:
        - SameSite=None requires the Secure flag (browser requirement)
        - CSRF expiry must be non-negative
        - Pager sizes must be positive
        - Session-backed CSRF needs a strong session secret in production
        """
        if self.cookie_samesite == "none" and not self.cookie_secure:
            msg = (
                "COOKIE_SECURE must be true when COOKIE_SAMESITE=none. "
                "Browsers reject SameSite=None cookies without the Secure flag."
            )
            raise ValueError(msg)

        if self.csrf_expires < 0:
            msg = f"CSRF_EXPIRES cannot be negative. Got: {self.csrf_expires}"
            raise ValueError(msg)

        if self.pager_per_page < 1 or self.pager_max_per_page < self.pager_per_page:
            msg = (
                "PAGER_PER_PAGE must be positive and not exceed PAGER_MAX_PER_PAGE. "
                f"Got: {self.pager_per_page} / {self.pager_max_per_page}"
            )
            raise ValueError(msg)

        if self.pager_surround_count < 0:
            msg = (
                "PAGER_SURROUND_COUNT cannot be negative. "
                f"Got: {self.pager_surround_count}"
            )
            raise ValueError(msg)

        if self.environment == "production" and self.csrf_protection == "session":
            secret_value = self.session_secret.get_secret_value()
            if len(secret_value) < _MIN_SESSION_SECRET_LENGTH:
                msg = (
                    f"SESSION_SECRET must be at least {_MIN_SESSION_SECRET_LENGTH} "
                    "characters when CSRF_PROTECTION=session in production. "
                    'Generate with: python -c "import secrets; '
                    'print(secrets.token_hex(32))"'
                )
                raise ValueError(msg)

        return self

    @property
    def csrf_cookie_full_name(self) -> str:
        """CSRF cookie name including the global cookie prefix."""
        return f"{self.cookie_prefix}{self.csrf_cookie_name}"


settings = Settings()
