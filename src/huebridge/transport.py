"""HTTP transport used to talk to the bridge."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .errors import TransportError

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True)
class TransportResponse:
    """Raw answer of a single HTTP request."""

    status_code: int
    content: bytes


class HttpTransport:
    """Blocking HTTP transport issuing exactly one attempt per request."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the transport.

        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests
        """
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            transport = self._transport or httpx.HTTPTransport(retries=0)
            self._client = httpx.Client(
                timeout=self.timeout,
                transport=transport,
                follow_redirects=True,
            )
        return self._client

    def send(self, method: str, url: str, body: Optional[bytes] = None) -> TransportResponse:
        """
        Send one request and return its status and body.

        Raises:
            TransportError: the request failed or the status code is an HTTP error
        """
        headers = {"Content-Type": "application/json"} if body is not None else None
        try:
            response = self.client.request(method, url, content=body, headers=headers)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} request failed: {exc}") from exc

        _LOGGER.debug("%s answered %s (%d bytes)", method, response.status_code, len(response.content))
        if response.status_code >= 400:
            raise TransportError(
                f"{method} request failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return TransportResponse(response.status_code, response.content)

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
