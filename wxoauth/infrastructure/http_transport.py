"""
httpx implementation of the Transport port.
"""

import logging
from typing import Any, Mapping, Optional

import httpx

from wxoauth.core.exceptions import TransportError


logger = logging.getLogger(__name__)


class HttpxTransport:
    """
    Posts JSON to the exchange backend and returns the decoded response.

    A shared AsyncClient may be passed in; otherwise a short-lived client
    is opened per request.
    """

    def __init__(self, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client

    async def _send(self, client: httpx.AsyncClient, url: str, body: Mapping[str, Any]) -> Any:
        response = await client.post(url, json=dict(body), timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    async def post(self, url: str, body: Mapping[str, Any]) -> Any:
        """
        Send a JSON POST request.

        Args:
            url: Absolute URL of the exchange endpoint
            body: JSON-serializable request body

        Returns:
            Decoded JSON response

        Raises:
            TransportError: On network errors, non-2xx responses, or a
                response body that is not JSON
        """
        try:
            if self._client is not None:
                return await self._send(self._client, url, body)
            async with httpx.AsyncClient() as client:
                return await self._send(client, url, body)

        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Exchange request rejected: {e.response.status_code} {e.response.text}"
            ) from e
        except httpx.RequestError as e:
            raise TransportError(f"Network error during exchange: {e}") from e
        except ValueError as e:
            raise TransportError(f"Exchange response is not valid JSON: {e}") from e
