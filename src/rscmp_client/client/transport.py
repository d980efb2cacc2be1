"""HTTP transport for the RSCMP REST API."""

from typing import Any, Dict, Optional

import requests

from rscmp_client.client.errors import ConnectionFailedError, raise_for_response
from rscmp_client.config.settings import ClientSettings
from rscmp_client.core.stores import AuthStore
from rscmp_client.utils.logging_config import get_logger

# Configure structured logging
logger = get_logger(__name__)


def clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop unset query parameters and serialize booleans the way the API expects."""
    if not params:
        return None
    cleaned = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        cleaned[key] = value
    return cleaned or None


class ApiClient:
    """Thin wrapper around a requests session with bearer authentication.

    Every request is a single round trip: nothing is retried, raced or cancelled.
    A 401 clears the session in the bound auth store and raises.
    """

    def __init__(
        self,
        settings: ClientSettings,
        auth_store: AuthStore,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings
        self.auth_store = auth_store
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit closes the HTTP session."""
        self.close()
        return False

    def close(self) -> None:
        self.session.close()

    def url(self, path: str) -> str:
        return f"{self.settings.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        token = self.auth_store.access_token
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        raw: bool = False,
    ) -> Any:
        """Send a request and decode the response.

        Args:
            method: HTTP verb
            path: Path relative to the API base URL
            params: Query parameters (None values are dropped)
            json: JSON body
            data: Form fields for multipart bodies
            files: Multipart file parts
            raw: Return the response bytes instead of decoded JSON

        Returns:
            Decoded JSON, ``None`` for empty bodies, or bytes when ``raw``.
        """
        kwargs: Dict[str, Any] = {
            "params": clean_params(params),
            "headers": self._headers(),
            "timeout": self.settings.timeout,
        }
        if files is not None or data is not None:
            kwargs["data"] = data
            kwargs["files"] = files
        elif json is not None:
            kwargs["json"] = json

        try:
            response = self.session.request(method, self.url(path), **kwargs)
        except requests.RequestException as e:
            logger.error("Request failed", method=method, path=path, error=str(e))
            raise ConnectionFailedError(str(e)) from e

        logger.debug("API call", method=method, path=path, status=response.status_code)

        if response.status_code == 401 and self.auth_store.is_authenticated:
            logger.info("Session rejected by server, clearing it", path=path)
            self.auth_store.logout()

        raise_for_response(response, path=path)

        if raw:
            return response.content
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request("DELETE", path, **kwargs)
