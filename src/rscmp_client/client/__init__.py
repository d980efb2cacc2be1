"""HTTP client modules for the RSCMP API."""

from rscmp_client.client.errors import (
    ApiError,
    AuthenticationError,
    BadRequestError,
    ConnectionFailedError,
    ForbiddenError,
    NotFoundError,
    RSCMPError,
    ServerError,
    ValidationFailed,
)
from rscmp_client.client.services import RSCMPClient, iter_pages
from rscmp_client.client.transport import ApiClient

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthenticationError",
    "BadRequestError",
    "ConnectionFailedError",
    "ForbiddenError",
    "NotFoundError",
    "RSCMPClient",
    "RSCMPError",
    "ServerError",
    "ValidationFailed",
    "iter_pages",
]
