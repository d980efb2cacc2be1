"""Error types and the client-wide API error policy."""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, TypeVar

import requests

from rscmp_client.config.constants import (
    MSG_CONNECTION_ERROR,
    MSG_FORBIDDEN,
    MSG_GENERIC_ERROR,
    MSG_SERVER_ERROR,
)
from rscmp_client.utils.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RSCMPError(Exception):
    """Base class for all client errors."""


class ApiError(RSCMPError):
    """The server answered with a non-success status."""

    def __init__(
        self,
        status_code: int,
        message: Optional[str] = None,
        errors: Optional[Dict[str, List[str]]] = None,
        path: Optional[str] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.errors = errors or {}
        self.path = path
        super().__init__(message or f"HTTP {status_code} for {path or 'request'}")


class BadRequestError(ApiError):
    pass


class AuthenticationError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ServerError(ApiError):
    pass


class ConnectionFailedError(RSCMPError):
    """No response was received (network failure or timeout)."""


class ValidationFailed(RSCMPError):
    """Client-side form validation failed before anything was sent."""

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        summary = "; ".join(
            f"{name}: {', '.join(messages)}" for name, messages in errors.items()
        )
        super().__init__(summary or "Validation failed")


_STATUS_ERRORS = {
    400: BadRequestError,
    401: AuthenticationError,
    403: ForbiddenError,
    404: NotFoundError,
}


def raise_for_response(response: requests.Response, path: Optional[str] = None) -> None:
    """Raise the ApiError subclass matching a non-2xx response."""
    if response.ok:
        return

    message = None
    errors = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("title")
        errors = body.get("errors") if isinstance(body.get("errors"), dict) else None

    status = response.status_code
    if status >= 500:
        error_cls = ServerError
    else:
        error_cls = _STATUS_ERRORS.get(status, ApiError)
    raise error_cls(status, message=message, errors=errors, path=path)


@dataclass
class Toast:
    """A single user-facing message."""

    level: str
    message: str


@dataclass
class Toaster:
    """Collects toasts for the active interface to render."""

    toasts: List[Toast] = field(default_factory=list)

    def error(self, message: str) -> Toast:
        return self._push("error", message)

    def success(self, message: str) -> Toast:
        return self._push("success", message)

    def info(self, message: str) -> Toast:
        return self._push("info", message)

    def _push(self, level: str, message: str) -> Toast:
        toast = Toast(level=level, message=message)
        self.toasts.append(toast)
        return toast

    def add(self, toast: Toast) -> Toast:
        self.toasts.append(toast)
        return toast

    def drain(self) -> List[Toast]:
        """Return pending toasts and clear the queue."""
        pending, self.toasts = self.toasts, []
        return pending


def handle_api_error(error: Exception, custom_message: Optional[str] = None) -> Optional[Toast]:
    """Translate an error into at most one toast.

    - 401 is silent: the transport already cleared the session.
    - 403 and 5xx produce a generic bilingual message.
    - 404 means "no data" and is silent.
    - 400 surfaces the server's message verbatim when present.
    - Any other response falls back to the connection-error text.
    """
    if isinstance(error, ApiError):
        status = error.status_code
        if status >= 500:
            logger.error("Server error", status=status, path=error.path)
            return Toast("error", custom_message or MSG_SERVER_ERROR)
        if status == 401:
            logger.info("Unauthenticated request", path=error.path)
            return None
        if status == 403:
            logger.warning("Forbidden request", path=error.path)
            return Toast("error", MSG_FORBIDDEN)
        if status == 404:
            logger.debug("Resource not found", path=error.path)
            return None
        if status == 400 and error.message:
            logger.warning("Bad request", path=error.path, message=error.message)
            return Toast("error", error.message)
        logger.warning("Unhandled API error", status=status, path=error.path)
        return Toast("error", custom_message or MSG_CONNECTION_ERROR)

    if isinstance(error, ConnectionFailedError):
        logger.error("Connection failed", error=str(error))
        return Toast("error", custom_message or MSG_CONNECTION_ERROR)

    logger.error("Unexpected client error", error=str(error))
    return Toast("error", custom_message or MSG_GENERIC_ERROR)


def report_error(
    error: Exception, toaster: Optional[Toaster], custom_message: Optional[str] = None
) -> Optional[Toast]:
    """Apply the error policy and push the resulting toast, if any."""
    toast = handle_api_error(error, custom_message)
    if toast is not None and toaster is not None:
        toaster.add(toast)
    return toast


def safe_api_call(
    call: Callable[[], T],
    default: T,
    show_error: bool = False,
    toaster: Optional[Toaster] = None,
) -> T:
    """Run an API call, returning ``default`` instead of raising on client errors."""
    try:
        return call()
    except RSCMPError as e:
        if show_error:
            report_error(e, toaster)
        else:
            logger.debug("Suppressed API error", error=str(e))
        return default

