"""HTTP transport for the Kafka Connect REST API.

Issues single HTTP exchanges with authentication headers injected. Retries and
status code interpretation live in :mod:`.retry` and :mod:`.responses`.
"""

import base64
import threading
import time
from typing import Any

import httpx
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


def basic_auth_header(username: str, password: str | None = None) -> str:
    """Build the value of a Basic ``Authorization`` header.

    A missing password is encoded as the empty string.
    """
    credentials = f"{username}:{password or ''}".encode()
    return f"Basic {base64.b64encode(credentials).decode('ascii')}"


class Transport:
    """Thin wrapper around httpx issuing authenticated requests.

    Thread-safe through thread-local storage of httpx.Client instances.
    Can be used as a context manager for automatic cleanup.
    """

    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the transport.

        Args:
            base_url: Base URL of a Kafka Connect worker
                (e.g., "http://connect:8083").
            username: Basic auth user. No auth header is sent when omitted.
            password: Basic auth password.
            timeout: Request timeout in seconds (default: 30.0).
            transport: Optional httpx transport, e.g. httpx.MockTransport.

        Raises:
            ValueError: If base_url is empty or timeout is not positive.
        """
        if not base_url:
            msg = "base_url cannot be empty"
            raise ValueError(msg)
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if username:
            self._headers["Authorization"] = basic_auth_header(username, password)

        self._local = threading.local()

    @property
    def client(self) -> httpx.Client:
        """Get or create the thread-local httpx client."""
        if not hasattr(self._local, "client") or self._local.client.is_closed:
            self._local.client = httpx.Client(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._local.client

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the thread-local HTTP client if open."""
        if hasattr(self._local, "client") and not self._local.client.is_closed:
            self._local.client.close()

    def execute(
        self,
        method: str,
        path: str,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send one request and return the response whatever its status.

        Args:
            method: HTTP method.
            path: Path relative to the base URL (e.g., "/connectors").
            params: Query parameters, in order. Keys may repeat.
            json: Optional JSON body.

        Returns:
            The raw httpx response.

        Raises:
            httpx.HTTPError: If the request could not be completed.
        """
        start_time = time.time()
        logger.debug("Making API request", method=method, path=path, params=params)
        try:
            response = self.client.request(method, path, params=params, json=json)
        except httpx.HTTPError:
            logger.debug(
                "API request failed",
                method=method,
                path=path,
                duration_seconds=round(time.time() - start_time, 3),
                exc_info=True,
            )
            raise
        logger.debug(
            "API request completed",
            method=method,
            path=path,
            status_code=response.status_code,
            duration_seconds=round(time.time() - start_time, 3),
        )
        return response
