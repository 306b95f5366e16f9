"""Mapping of upstream Notion failures onto HTTP error responses.

Every route reports errors as an HTTPException whose detail is a dict with
an ``error`` headline and an optional ``message`` / ``details`` / ``code``.
Upstream errors are passed through and never retried.
"""

from fastapi import HTTPException, status
from notion_client import APIResponseError

# code -> (status, headline)
_UPSTREAM_CATEGORIES: dict[str, tuple[int, str]] = {
    "object_not_found": (status.HTTP_404_NOT_FOUND, "Not found"),
    "unauthorized": (status.HTTP_401_UNAUTHORIZED, "Unauthorized"),
    "restricted_resource": (status.HTTP_403_FORBIDDEN, "Restricted resource"),
    "rate_limited": (status.HTTP_429_TOO_MANY_REQUESTS, "Rate limited"),
    "validation_error": (status.HTTP_400_BAD_REQUEST, "Validation error"),
}


def error_detail(
    error: str,
    message: str | None = None,
    details: str | None = None,
    code: str | None = None,
) -> dict:
    """Build the JSON error body shared by all routes."""
    body: dict = {"error": error}
    if message is not None:
        body["message"] = message
    if details is not None:
        body["details"] = details
    if code is not None:
        body["code"] = code
    return body


def bad_request(error: str, message: str | None = None) -> HTTPException:
    """Malformed input, rejected before any network call."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error_detail(error, message),
    )


def error_code(exc: APIResponseError) -> str:
    """Return the Notion error code as a plain string."""
    code = getattr(exc, "code", None)
    return str(getattr(code, "value", code) or "unknown_error")


def upstream_error(exc: APIResponseError, not_found_message: str | None = None) -> HTTPException:
    """Translate a Notion APIResponseError into a user-facing HTTPException.

    Known codes map to a distinguishable status; anything else keeps the
    upstream status (500 when absent). The upstream message is passed through.
    """
    code = error_code(exc)
    upstream_message = str(exc) or None
    if code in _UPSTREAM_CATEGORIES:
        status_code, headline = _UPSTREAM_CATEGORIES[code]
        if code == "object_not_found" and not_found_message:
            detail = error_detail(headline, not_found_message, details=upstream_message, code=code)
        else:
            detail = error_detail(headline, upstream_message, code=code)
        return HTTPException(status_code=status_code, detail=detail)

    status_code = getattr(exc, "status", None) or status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(
        status_code=status_code,
        detail=error_detail(
            "Notion API error",
            upstream_message or "An unexpected error occurred",
            code=code,
        ),
    )
