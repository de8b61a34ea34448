"""API error classes.

HTTP status codes and machine-readable error codes shared by the
exception handlers in portal.main and the CSRF middleware.

WHY CUSTOM ERROR CLASSES:
- Consistent error response format across all endpoints
- Easy to map to HTTP status codes in exception handlers
- Type-safe error handling in the core components
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "FORBIDDEN").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ForbiddenError(APIError):
    """Not allowed to perform the action (403)."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            code="FORBIDDEN",
            message=message,
            status_code=403,
        )


class CsrfVerificationFailed(ForbiddenError):
    """CSRF token absent or mismatched (403).

    Fatal for the current request: the caller must abort processing.
    The message never says which check failed.
    """

    def __init__(self) -> None:
        APIError.__init__(
            self,
            code="CSRF_DISALLOWED_ACTION",
            message="The action you requested is not allowed.",
            status_code=403,
        )
