"""Exception hierarchy for the wizard and dashboard client.

Every failure the client can surface derives from ``NonploError`` so UI
layers can catch one type and show ``exc.message``.

Taxonomy:
  - AuthRequiredError      → block the action and redirect to the auth flow
  - ApiError / NetworkError → backend or transport failure (save failures are
                             downgraded to notifications by the controller)
  - BuildError             → provisioning failed; message is the backend's
  - StepIncompleteError    → forward navigation blocked by required fields
  - FileRejectedError      → upload refused before any network call
"""

import logging
from typing import Any, Union

import httpx

logger = logging.getLogger(__name__)


class NonploError(Exception):
    """Base exception for Nonplo client errors."""

    def __init__(
        self,
        message: str,
        status_code: int = httpx.codes.INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(self.message)


class AuthRequiredError(NonploError):
    """No authenticated user; the caller should navigate to ``redirect_url``."""

    def __init__(self, redirect_url: str, message: str = "Wizard'ı kullanabilmek için önce giriş yapmanız gerekiyor"):
        self.redirect_url = redirect_url
        super().__init__(
            message=message,
            status_code=httpx.codes.UNAUTHORIZED,
            error_code="AUTH_REQUIRED",
        )


class ApiError(NonploError):
    """Non-2xx response from the backend API."""

    def __init__(self, message: str, status_code: int, error_code: str | None = None, details: Any = None):
        self.details = details
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code or f"HTTP_{status_code}",
        )


class NetworkError(NonploError):
    """Transport failure: timeout, refused connection, DNS."""

    def __init__(self, message: str = "Network error - please check your connection"):
        super().__init__(
            message=message,
            status_code=httpx.codes.SERVICE_UNAVAILABLE,
            error_code="NETWORK_ERROR",
        )


class WizardStateError(NonploError):
    """Operation not allowed in the wizard's current state."""

    def __init__(self, message: str, error_code: str = "WIZARD_STATE_ERROR"):
        super().__init__(
            message=message,
            status_code=httpx.codes.CONFLICT,
            error_code=error_code,
        )


class StepIncompleteError(WizardStateError):
    """Required fields of the current step are missing."""

    def __init__(self, step: int, missing: list[str]):
        self.step = step
        self.missing = missing
        super().__init__(
            message=f"Step {step} is missing required fields: {', '.join(missing)}",
            error_code="STEP_INCOMPLETE",
        )


class BuildError(NonploError):
    """Agent provisioning failed. ``message`` is the backend's text verbatim."""

    def __init__(self, message: str, status_code: int = httpx.codes.BAD_GATEWAY):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code="BUILD_FAILED",
        )


class FileRejectedError(NonploError):
    """Training file refused: bad extension or size, or the backend could not store it."""

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(
            message=f"{filename}: {reason}",
            status_code=httpx.codes.UNPROCESSABLE_ENTITY,
            error_code="FILE_REJECTED",
        )


class ValidationFailedError(NonploError):
    """Local input validation failed (blank text, malformed value)."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(
            message=message,
            status_code=httpx.codes.UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_ERROR",
        )


def error_message_from_body(body: Union[dict, list, str, None], status_code: int) -> tuple[str, str | None, Any]:
    """Extract (message, error_code, details) from an error response body.

    Accepts both envelope styles the backend emits:
    {
        "error": "Human-readable message"
    }
    and
    {
        "error": {
            "code": "ERROR_CODE",
            "message": "Human-readable message",
            "details": {...}
        }
    }
    """
    fallback = f"HTTP {status_code}"

    if isinstance(body, str):
        return (body.strip() or fallback), None, None
    if not isinstance(body, dict):
        return fallback, None, None

    error = body.get("error")
    if isinstance(error, dict):
        return (
            str(error.get("message") or fallback),
            error.get("code"),
            error.get("details"),
        )
    if isinstance(error, str) and error:
        return error, None, body.get("details")

    for key in ("message", "detail", "details"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value, None, None

    return fallback, None, None


def raise_for_response(response: httpx.Response) -> None:
    """Raise ``ApiError`` for a non-2xx response."""
    if response.is_success:
        return

    try:
        body = response.json()
    except ValueError:
        body = response.text

    message, error_code, details = error_message_from_body(body, response.status_code)

    if response.status_code >= 500:
        logger.error(
            f"HTTP {response.status_code}: {message}",
            extra={
                "path": response.request.url.path,
                "method": response.request.method,
            },
        )
    else:
        logger.warning(
            f"HTTP {response.status_code}: {message}",
            extra={
                "path": response.request.url.path,
                "method": response.request.method,
            },
        )

    raise ApiError(
        message=message,
        status_code=response.status_code,
        error_code=error_code,
        details=details,
    )
