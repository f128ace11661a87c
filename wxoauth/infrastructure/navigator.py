"""
Request-bound implementation of the Navigator port.

A server cannot move the browser directly: navigate() records the target
and the web layer answers the request with a 302 to it.
"""

from typing import Optional

from starlette.requests import Request


class RequestNavigator:
    """Exposes the requested URL and records the redirect target."""

    def __init__(self, request: Request, public_base_url: Optional[str] = None):
        self.request = request
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.location: Optional[str] = None

    def absolute_url(self, path: str) -> str:
        """Absolute URL for a path on this site, as the visitor sees it."""
        base = self.public_base_url or str(self.request.base_url).rstrip("/")
        return f"{base}{path}"

    def current_url(self) -> str:
        url = self.request.url
        if not self.public_base_url:
            return str(url)

        # Behind a proxy the provider must redirect to the public host
        path = url.path
        if url.query:
            path = f"{path}?{url.query}"
        return self.absolute_url(path)

    def navigate(self, url: str) -> None:
        self.location = url

    @property
    def redirected(self) -> bool:
        return self.location is not None
