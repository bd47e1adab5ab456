"""
Base API Connector Class
Shared requests.Session handling for the REST backend and the AI service
"""
from abc import ABC
from typing import Optional, Dict, Any, Callable, TypeVar
from dataclasses import dataclass

import requests
from requests.auth import AuthBase

from loyalty_core.errors import BackendRequestError, ResponseValidationError
from loyalty_core.logging import get_logger
from loyalty_core.models import MAPPING_ERRORS

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class APIConfig:
    """Configuration for API connection"""
    api_name: str
    base_url: str
    api_key: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    timeout: int = 10


class BearerTokenAuth(AuthBase):
    """
    Attach ``Authorization: Bearer <token>`` to every outgoing request.

    The token is looked up when each request is prepared, so a login or
    logout between calls is picked up without rebuilding the session.
    No refresh is attempted; a stale token yields a 401 from the server.
    """

    def __init__(self, token_getter: Callable[[], Optional[str]]):
        self.token_getter = token_getter

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        token = self.token_getter()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        return request


class BaseAPIConnector(ABC):
    """Abstract base class for the HTTP clients"""

    def __init__(self, config: APIConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

        if config.headers:
            self.session.headers.update(config.headers)

    def _url(self, endpoint: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _make_request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict] = None,
        data: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Make HTTP request with error handling

        Args:
            endpoint: API endpoint (appended to base_url)
            method: HTTP method (GET, POST, etc.)
            params: Query parameters
            data: JSON request body
            timeout: Per-call timeout in seconds (defaults to the config's)

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            BackendRequestError: on transport failure or a non-2xx status
        """
        url = self._url(endpoint)
        logger.debug(f"{self.config.api_name}: {method} {url}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=data,
                timeout=timeout or self.config.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            status_code = getattr(getattr(e, "response", None), "status_code", None)
            raise BackendRequestError(
                f"API request failed for {self.config.api_name}: {e}",
                service=self.config.api_name,
                endpoint=endpoint,
                status_code=status_code,
            ) from e

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise BackendRequestError(
                f"Invalid JSON from {self.config.api_name}: {e}",
                service=self.config.api_name,
                endpoint=endpoint,
                status_code=response.status_code,
            ) from e

    def _map_payload(self, mapper: Callable[[Any], T], payload: Any, endpoint: str) -> T:
        """
        Turn a decoded body into records.

        Raises:
            ResponseValidationError: when the payload does not fit the record
        """
        try:
            return mapper(payload)
        except MAPPING_ERRORS as e:
            logger.warning(f"{self.config.api_name}: malformed payload from {endpoint}: {e}")
            raise ResponseValidationError(
                f"Malformed response from {self.config.api_name}: {e}",
                endpoint=endpoint,
            ) from e

    def test_connection(self, endpoint: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Probe an endpoint and report status without raising.

        Returns:
            Dict with status and message
        """
        try:
            self._make_request(endpoint, timeout=timeout)
            return {
                "status": "success",
                "message": f"Successfully connected to {self.config.api_name}",
            }
        except BackendRequestError as e:
            return {
                "status": "error",
                "message": f"Connection failed: {e.message}",
            }
