"""
FastAPI dependencies for the WeChat OAuth endpoints.

Wires the login controller with request-bound adapters for every request.
"""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from starlette.responses import Response

from wxoauth.config import (
    ClientConfig,
    CookieSettings,
    get_client_config,
    get_cookie_settings,
    get_public_base_url,
)
from wxoauth.core.controller import WxOAuthController
from wxoauth.core.ports import Transport
from wxoauth.infrastructure.cookie_storage import StarletteCookieStorage
from wxoauth.infrastructure.http_transport import HttpxTransport
from wxoauth.infrastructure.navigator import RequestNavigator


logger = logging.getLogger(__name__)


@lru_cache()
def get_transport() -> Transport:
    """
    Provide the exchange transport dependency.

    Uses lru_cache for singleton behavior - same instance across requests.
    """
    return HttpxTransport()


class PageLogin:
    """
    The login controller for one request, with its adapters.

    Cookie changes made by the controller only reach the browser
    through respond().
    """

    def __init__(
        self,
        request: Request,
        config: ClientConfig,
        cookie_settings: CookieSettings,
        transport: Transport,
    ):
        self.request = request
        self.storage = StarletteCookieStorage(request, cookie_settings)
        self.navigator = RequestNavigator(request, get_public_base_url())
        self.controller = WxOAuthController(
            config=config,
            storage=self.storage,
            transport=transport,
            navigator=self.navigator,
        )

    def respond(self, response: Response) -> Response:
        """Apply staged cookie changes to the outgoing response."""
        return self.storage.apply(response)


def get_page_login(
    request: Request,
    config: Annotated[ClientConfig, Depends(get_client_config)],
    cookie_settings: Annotated[CookieSettings, Depends(get_cookie_settings)],
    transport: Annotated[Transport, Depends(get_transport)],
) -> PageLogin:
    """Provide the per-request login controller."""
    return PageLogin(request, config, cookie_settings, transport)


# Type alias for cleaner dependency injection
WxLogin = Annotated[PageLogin, Depends(get_page_login)]
