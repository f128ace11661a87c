"""
Shared test configuration and fixtures.

In-memory fakes stand in for the cookie store, the exchange transport, and
the browser's redirect surface.
"""

from typing import Any, Mapping, Optional

import pytest

from wxoauth.config import ClientConfig
from wxoauth.core.controller import WxOAuthController


APP_ID = "wx123"
EXCHANGE_URL = "https://backend.example.com/wx/oauth"
PAGE_URL = "https://a.com/p?x=1"


class FakeStorage:
    """Dict-backed Storage that records every write."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.values: dict[str, str] = dict(initial or {})
        self.expires: dict[str, int] = {}
        self.writes: list[tuple[str, str]] = []

    def get(self, name: str) -> Optional[str]:
        return self.values.get(name)

    def set(self, name: str, value: str, expires_days: int) -> None:
        self.values[name] = value
        self.expires[name] = expires_days
        self.writes.append(("set", name))

    def remove(self, name: str) -> None:
        self.values.pop(name, None)
        self.writes.append(("remove", name))


class FakeTransport:
    """Transport returning a canned payload or raising a canned error."""

    def __init__(self, response: Any = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    async def post(self, url: str, body: Mapping[str, Any]) -> Any:
        self.calls.append((url, dict(body)))
        if self.error is not None:
            raise self.error
        return self.response


class FakeNavigator:
    """Navigator for a fixed page URL that records navigations."""

    def __init__(self, url: str = PAGE_URL):
        self.url = url
        self.navigations: list[str] = []

    def current_url(self) -> str:
        return self.url

    def navigate(self, url: str) -> None:
        self.navigations.append(url)


@pytest.fixture
def exchange_payload():
    """Backend response for a successful code exchange."""
    return {"openId": "oX1", "unionId": "uY2", "userInfo": {"nick": "A"}}


@pytest.fixture
def config():
    """Client config with a fixed state value."""
    return ClientConfig(app_id=APP_ID, exchange_url=EXCHANGE_URL, state="s1")


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def transport(exchange_payload):
    return FakeTransport(response=exchange_payload)


@pytest.fixture
def navigator():
    return FakeNavigator()


@pytest.fixture
def controller(config, storage, transport, navigator):
    """Controller wired with the in-memory fakes."""
    return WxOAuthController(config, storage, transport, navigator)
