"""
Login state machine for the WeChat OAuth authorization code flow.

On each page load the controller decides from cookies and the current URL
whether the visitor is logged in. If not, it either exchanges the code
carried by the return leg or redirects the visitor to the provider.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from wxoauth.config import ClientConfig
from wxoauth.core.domain import CachedIdentity, LoginState
from wxoauth.core.exceptions import ExchangeFailure, StorageError
from wxoauth.core.ports import Navigator, Storage, Transport
from wxoauth.core.session_cache import SessionCache
from wxoauth.core.urls import build_authorize_url, parse_return_leg


logger = logging.getLogger(__name__)


def _redact(value: Optional[str]) -> str:
    if not value:
        return "<none>"
    return f"{value[:4]}..."


class WxOAuthController:
    """
    Drives the login flow for one page load.

    Dependencies are injected so each can be replaced in tests:
    storage holds the cached identity, transport talks to the exchange
    backend, and navigator exposes the current URL and the redirect.
    """

    def __init__(
        self,
        config: ClientConfig,
        storage: Storage,
        transport: Transport,
        navigator: Navigator,
    ):
        self.config = config
        self.cache = SessionCache(storage, config.app_id)
        self.transport = transport
        self.navigator = navigator
        self.state = LoginState.CHECKING
        self._in_flight = False

    def is_logged_in(self, identity: Optional[CachedIdentity] = None) -> bool:
        """
        Check the cached identity against the configured scope.

        Args:
            identity: Identity to check (reads the cache if not provided)
        """
        if identity is None:
            identity = self.cache.get()
        return identity is not None and identity.is_sufficient(self.config.scope)

    async def init(self) -> LoginState:
        """
        Entry point, called once per page load.

        Returns:
            The state the flow ended in: RESOLVED when logged in or after an
            exchange, REDIRECTING when the visitor is being sent away.
        """
        if self._in_flight:
            logger.warning("init() called while a login is in flight, ignoring")
            return self.state

        self.state = LoginState.CHECKING
        if self.is_logged_in():
            logger.debug(
                "Cached identity is sufficient",
                extra={"extra_fields": {"app_id": self.config.app_id}},
            )
            self.state = LoginState.RESOLVED
            return self.state

        self._in_flight = True
        try:
            await self.login()
        finally:
            self._in_flight = False
        return self.state

    async def login(self) -> None:
        """Exchange the return-leg code if there is one, otherwise redirect."""
        query = parse_return_leg(self.navigator.current_url())

        if query.has_code:
            await self.exchange(query.code, query.state)
            return

        self.oauth()

    async def exchange(self, code: str, state: Optional[str] = None) -> bool:
        """
        Exchange an authorization code for identity fields and cache them.

        Failures are reported to on_exchange_failure and never raised, with
        the exception of StorageError. The cache is only written once the
        success hook has produced an identity.

        Returns:
            True if an identity was cached
        """
        self.state = LoginState.EXCHANGING

        if self.config.state is not None and state != self.config.state:
            # Echoed state is logged but not enforced
            logger.warning(
                "Return leg state does not match the configured state",
                extra={"extra_fields": {"app_id": self.config.app_id}},
            )

        logger.info(
            "Exchanging authorization code",
            extra={
                "extra_fields": {
                    "app_id": self.config.app_id,
                    "code": _redact(code),
                }
            },
        )

        try:
            payload = await self.transport.post(
                self.config.exchange_url, {"code": code, "state": state}
            )
            identity = self._map_payload(payload)
            self.cache.set(identity, self.config.session_ttl_days)
        except StorageError:
            raise
        except Exception as e:
            self._report_failure(e)
            self.state = LoginState.RESOLVED
            return False

        logger.info(
            "Authorization code exchanged",
            extra={
                "extra_fields": {
                    "app_id": self.config.app_id,
                    "open_id": _redact(identity.primary_id),
                }
            },
        )
        self.state = LoginState.RESOLVED
        return True

    def _map_payload(self, payload: Any) -> CachedIdentity:
        result = self.config.on_exchange_success(payload)
        if isinstance(result, CachedIdentity):
            identity = result
        else:
            try:
                identity = CachedIdentity.model_validate(result)
            except ValidationError as e:
                raise ExchangeFailure(
                    f"Success hook returned an invalid identity: {e}"
                ) from e

        # An error payload such as {"errcode": 40029} maps to an empty identity
        if not identity.is_sufficient(self.config.scope):
            raise ExchangeFailure(
                f"Exchange response carries no identifier for scope {self.config.scope.value}"
            )
        return identity

    def _report_failure(self, error: Exception) -> None:
        if isinstance(error, ExchangeFailure):
            failure = error
        else:
            failure = ExchangeFailure(f"Code exchange failed: {error}")
            failure.__cause__ = error

        logger.error(
            f"Exchange with backend failed: {error}",
            extra={"extra_fields": {"app_id": self.config.app_id}},
        )

        try:
            self.config.on_exchange_failure(failure)
        except Exception as hook_error:
            logger.error(
                f"Exchange failure hook raised: {hook_error}", exc_info=True
            )

    def oauth(self, redirect_uri: Optional[str] = None) -> str:
        """
        Clear the cached identity and redirect to the provider.

        Also used for explicit account switching: without clearing, the
        next init() would accept the stale identity.

        Args:
            redirect_uri: Page the provider returns to (defaults to the
                current page)

        Returns:
            The authorize URL the visitor was sent to
        """
        self.cache.clear()

        url = build_authorize_url(
            app_id=self.config.app_id,
            redirect_uri=redirect_uri or self.navigator.current_url(),
            scope=self.config.scope,
            state=self.config.state,
        )

        logger.info(
            "Redirecting to provider",
            extra={
                "extra_fields": {
                    "app_id": self.config.app_id,
                    "scope": self.config.scope.value,
                }
            },
        )

        self.state = LoginState.REDIRECTING
        self.navigator.navigate(url)
        return url

    def get_user_info(self) -> Any:
        """Return the cached profile, or {} when there is none."""
        return self.cache.get_profile()
