"""
Port definitions (interfaces) for the core domain.

Ports define the contracts between the login state machine and the outside
world: cookie-like storage, the HTTP transport used for the code exchange,
and the page's redirect surface. Infrastructure adapters implement these.
"""

from typing import Any, Mapping, Optional, Protocol


class Storage(Protocol):
    """
    Port (interface) for a key/value string store with per-key expiry.

    Implemented by StarletteCookieStorage. Path and domain scoping are a
    concern of the adapter, not of the core.
    """

    def get(self, name: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""
        ...

    def set(self, name: str, value: str, expires_days: int) -> None:
        """Store a value that expires after the given number of days."""
        ...

    def remove(self, name: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        ...


class Transport(Protocol):
    """
    Port (interface) for the request to the trusted exchange backend.

    Implementations raise TransportError on network failures and
    backend rejections.
    """

    async def post(self, url: str, body: Mapping[str, Any]) -> Any:
        """
        Send a JSON body and return the decoded JSON response.

        Args:
            url: Absolute URL of the exchange endpoint
            body: JSON-serializable request body

        Returns:
            The decoded response payload
        """
        ...


class Navigator(Protocol):
    """Port (interface) for reading the current page URL and leaving it."""

    def current_url(self) -> str:
        """Return the full URL of the current page, query string included."""
        ...

    def navigate(self, url: str) -> None:
        """Send the visitor to another URL with a full-page navigation."""
        ...
