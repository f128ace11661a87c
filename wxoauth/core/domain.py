"""
Core domain models for the WeChat OAuth login flow.

These models represent the visitor's identity and the transient data of a
single page load. They are independent of cookies, HTTP, or any framework.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Scope(str, Enum):
    """Authorization scope requested from the provider."""

    BASIC = "snsapi_base"
    USERINFO = "snsapi_userinfo"


class LoginState(str, Enum):
    """Observable states of the login state machine for one page load."""

    CHECKING = "checking"
    REDIRECTING = "redirecting"
    EXCHANGING = "exchanging"
    RESOLVED = "resolved"


class CachedIdentity(BaseModel):
    """
    Identity fields cached in the visitor's cookies.

    Any subset may be present when the cookies were edited outside this
    service, so every field is optional. Whether the identity is enough to
    count as logged in depends on the scope; see `is_sufficient`.

    Accepts the Python field names, the provider spelling (openId, unionId,
    userInfo) and the camelCase role names (primaryId, secondaryId,
    profile) so backend payloads and hook results validate directly.
    """

    primary_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("openId", "primaryId", "primary_id"),
        serialization_alias="openId",
        description="Per-app identifier (openid)",
    )
    secondary_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("unionId", "secondaryId", "secondary_id"),
        serialization_alias="unionId",
        description="Cross-app identifier (unionid)",
    )
    profile: Any = Field(
        default=None,
        validation_alias=AliasChoices("userInfo", "profile"),
        serialization_alias="userInfo",
        description="Opaque JSON-serializable profile",
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def is_sufficient(self, scope: Scope) -> bool:
        """
        Check whether this identity proves a login for the given scope.

        BASIC needs the primary id. USERINFO prefers the secondary id and
        falls back to the primary id.
        """
        if scope == Scope.BASIC:
            return bool(self.primary_id)
        return bool(self.secondary_id or self.primary_id)


class RedirectQuery(BaseModel):
    """The `code` and `state` parameters carried by the return leg."""

    code: Optional[str] = None
    state: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def has_code(self) -> bool:
        return bool(self.code)
