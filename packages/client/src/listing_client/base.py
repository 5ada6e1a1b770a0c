"""Shared httpx plumbing for the service clients.

Both remote services answer with an ``{success, message, data}`` envelope.
Transport failures and non-2xx responses are raised as ``NetworkError``.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from listing_common import NetworkError, get_logger

logger = get_logger(__name__)


class ServiceClient:
    """Lazily-created ``httpx.AsyncClient`` bound to one base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Service base URL
            timeout: Request timeout in seconds
            transport: Optional transport override (tests use ``httpx.MockTransport``)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the envelope's ``data`` field.

        Raises:
            NetworkError: On transport errors, non-2xx status, or a
                non-JSON body
        """
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("request_transport_failed", method=method, path=path, error=str(e))
            raise NetworkError(str(e) or type(e).__name__, endpoint=path) from e

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "request_failed",
                method=method,
                path=path,
                status=response.status_code,
                error=message,
            )
            raise NetworkError(message, status_code=response.status_code, endpoint=path)

        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError as e:
            raise NetworkError(
                f"Invalid JSON response: {e}", status_code=response.status_code, endpoint=path
            ) from e

        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body


def _error_message(response: httpx.Response) -> str:
    """Pull the service's error message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)
