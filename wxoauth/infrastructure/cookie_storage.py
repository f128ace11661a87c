"""
Cookie implementation of the Storage port for Starlette requests.

Reads come from the incoming request's cookies. Writes are staged and
copied onto the outgoing response by apply(), so reads made later in the
same request already see them.
"""

import logging
from typing import Optional
from urllib.parse import quote, unquote

from starlette.requests import Request
from starlette.responses import Response

from wxoauth.config import CookieSettings
from wxoauth.core.exceptions import StorageError


logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24

# Characters that never force quoting of a Set-Cookie value
_COOKIE_VALUE_SAFE = "!#$&'*+^`|:"

_REMOVED = object()


class StarletteCookieStorage:
    """Key/value store with per-key expiry, backed by browser cookies."""

    def __init__(self, request: Request, settings: Optional[CookieSettings] = None):
        self.request = request
        self.settings = settings or CookieSettings()
        # name -> (value, max_age) or _REMOVED
        self._pending: dict[str, object] = {}

    def get(self, name: str) -> Optional[str]:
        pending = self._pending.get(name)
        if pending is _REMOVED:
            return None
        if pending is not None:
            value, _ = pending
            return value

        raw = self.request.cookies.get(name)
        if raw is None:
            return None
        try:
            return unquote(raw, errors="strict")
        except UnicodeDecodeError:
            logger.warning(
                "Cookie value is not valid UTF-8, ignoring it",
                extra={"extra_fields": {"cookie": name}},
            )
            return None

    def set(self, name: str, value: str, expires_days: int) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Cookie '{name}' value must be a string")
        self._pending[name] = (value, expires_days * SECONDS_PER_DAY)

    def remove(self, name: str) -> None:
        self._pending[name] = _REMOVED

    def apply(self, response: Response) -> Response:
        """Write staged cookie changes onto the response."""
        for name, pending in self._pending.items():
            if pending is _REMOVED:
                # Only send a deletion for cookies the browser actually has
                if name in self.request.cookies:
                    response.delete_cookie(
                        name,
                        path=self.settings.path,
                        domain=self.settings.domain,
                    )
                continue

            value, max_age = pending
            response.set_cookie(
                name,
                quote(value, safe=_COOKIE_VALUE_SAFE),
                max_age=max_age,
                path=self.settings.path,
                domain=self.settings.domain,
                secure=self.settings.secure,
                samesite=self.settings.samesite,
            )
        return response
