"""
WeChat OAuth client configuration.

Loaded from environment variables by default. Embedders that need custom
exchange hooks construct ClientConfig directly.
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Mapping, Optional, Union
from urllib.parse import urlparse

from wxoauth.core.domain import CachedIdentity, Scope
from wxoauth.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_DAYS = 30
MAX_STATE_BYTES = 128

ExchangeSuccessHook = Callable[[Any], Union[CachedIdentity, Mapping[str, Any]]]
ExchangeFailureHook = Callable[[Exception], None]


def default_exchange_mapping(payload: Any) -> CachedIdentity:
    """
    Map a backend response to the cached identity fields.

    Expects openId, unionId and userInfo either at the top level or
    inside a "data" member.
    """
    if isinstance(payload, Mapping) and isinstance(payload.get("data"), Mapping):
        payload = payload["data"]
    return CachedIdentity.model_validate(payload)


def log_exchange_failure(error: Exception) -> None:
    """Default failure hook: log and leave the visitor unauthenticated."""
    logger.error(f"Code exchange failed: {error}")


@dataclass(frozen=True)
class ClientConfig:
    """
    OAuth client settings, fixed for the lifetime of the controller.

    Validates itself on construction and raises ConfigurationError when a
    setting is unusable.
    """

    app_id: str
    exchange_url: str
    scope: Scope = Scope.BASIC
    session_ttl_days: int = DEFAULT_SESSION_TTL_DAYS
    state: Optional[str] = None
    on_exchange_success: ExchangeSuccessHook = field(
        default=default_exchange_mapping, compare=False
    )
    on_exchange_failure: ExchangeFailureHook = field(
        default=log_exchange_failure, compare=False
    )

    def __post_init__(self):
        if not self.app_id:
            raise ConfigurationError("app_id is required")

        try:
            object.__setattr__(self, "scope", Scope(self.scope))
        except ValueError:
            raise ConfigurationError(
                f"Unsupported scope: {self.scope}. "
                f"Supported: {[s.value for s in Scope]}"
            )

        if (
            isinstance(self.session_ttl_days, bool)
            or not isinstance(self.session_ttl_days, int)
            or self.session_ttl_days <= 0
        ):
            raise ConfigurationError(
                f"session_ttl_days must be a positive integer, got {self.session_ttl_days!r}"
            )

        if self.state is not None and len(self.state.encode("utf-8")) > MAX_STATE_BYTES:
            raise ConfigurationError(f"state must be at most {MAX_STATE_BYTES} bytes")

        parsed = urlparse(self.exchange_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"exchange_url must be an absolute http(s) URL, got {self.exchange_url!r}"
            )

    @classmethod
    def from_env(
        cls,
        on_exchange_success: ExchangeSuccessHook = default_exchange_mapping,
        on_exchange_failure: ExchangeFailureHook = log_exchange_failure,
    ) -> "ClientConfig":
        """Load configuration from environment variables."""
        ttl = os.getenv("WX_SESSION_TTL_DAYS")
        try:
            session_ttl_days = int(ttl) if ttl else DEFAULT_SESSION_TTL_DAYS
        except ValueError:
            raise ConfigurationError(f"WX_SESSION_TTL_DAYS must be an integer, got {ttl!r}")

        return cls(
            app_id=os.getenv("WX_APP_ID", ""),
            exchange_url=os.getenv("WX_EXCHANGE_URL", ""),
            scope=os.getenv("WX_SCOPE") or Scope.BASIC,
            session_ttl_days=session_ttl_days,
            state=os.getenv("WX_OAUTH_STATE") or None,
            on_exchange_success=on_exchange_success,
            on_exchange_failure=on_exchange_failure,
        )


@dataclass(frozen=True)
class CookieSettings:
    """Cookie attributes used by the cookie storage adapter."""

    path: str = "/"
    domain: Optional[str] = None
    secure: bool = False
    samesite: str = "lax"

    @classmethod
    def from_env(cls) -> "CookieSettings":
        """Load cookie settings from environment variables."""
        return cls(
            path=os.getenv("WX_COOKIE_PATH", "/"),
            domain=os.getenv("WX_COOKIE_DOMAIN") or None,
            secure=os.getenv("WX_COOKIE_SECURE", "false").lower() == "true",
            samesite=os.getenv("WX_COOKIE_SAMESITE", "lax"),
        )


@lru_cache()
def get_client_config() -> ClientConfig:
    """Get client configuration singleton."""
    config = ClientConfig.from_env()
    logger.info(
        "Loaded WeChat OAuth configuration",
        extra={
            "extra_fields": {
                "app_id": config.app_id,
                "scope": config.scope.value,
                "session_ttl_days": config.session_ttl_days,
            }
        },
    )
    return config


@lru_cache()
def get_cookie_settings() -> CookieSettings:
    """Get cookie settings singleton."""
    return CookieSettings.from_env()


def get_public_base_url() -> Optional[str]:
    """Externally visible base URL when running behind a proxy."""
    return os.getenv("WX_PUBLIC_BASE_URL") or None
