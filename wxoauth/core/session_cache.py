"""
Cookie-backed cache of the visitor's identity.

Three independent entries per application, all written with the same
expiry: wx_oauth_{app_id}_openId, wx_oauth_{app_id}_unionId and
wx_oauth_{app_id}_userInfo.
"""

import json
import logging
from typing import Any, Optional

from wxoauth.core.domain import CachedIdentity
from wxoauth.core.exceptions import SerializationError
from wxoauth.core.ports import Storage


logger = logging.getLogger(__name__)

OPEN_ID = "openId"
UNION_ID = "unionId"
USER_INFO = "userInfo"

CACHE_FIELDS = (UNION_ID, OPEN_ID, USER_INFO)


def cookie_name(app_id: str, field: str) -> str:
    """Namespaced entry name, so several apps can share one origin."""
    return f"wx_oauth_{app_id}_{field}"


def serialize_profile(profile: Any) -> Optional[str]:
    """
    Turn a profile into its stored string form.

    Raises:
        SerializationError: If the profile is not JSON-serializable
    """
    if profile is None:
        return None
    try:
        return json.dumps(profile, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Profile is not JSON-serializable: {e}") from e


class SessionCache:
    """
    Reads and writes the cached identity for one application.

    Storage errors are not caught here; they propagate to the caller.
    """

    def __init__(self, storage: Storage, app_id: str):
        self.storage = storage
        self.app_id = app_id

    def _name(self, field: str) -> str:
        return cookie_name(self.app_id, field)

    def get(self) -> Optional[CachedIdentity]:
        """
        Read whichever entries are present.

        Returns:
            A possibly partial identity, or None when no entry exists.
            The profile is returned in its stored string form; use
            get_profile() for the parsed value.
        """
        values = {field: self.storage.get(self._name(field)) for field in CACHE_FIELDS}
        if all(value is None for value in values.values()):
            return None
        return CachedIdentity.model_validate(values)

    def set(self, identity: CachedIdentity, ttl_days: int) -> None:
        """
        Write all three entries with the same expiry.

        The profile is serialized before anything is written, so a
        SerializationError leaves storage untouched. Fields that are None
        or empty are removed instead of written.

        Raises:
            SerializationError: If the profile cannot be serialized
        """
        values = {
            UNION_ID: identity.secondary_id or None,
            OPEN_ID: identity.primary_id or None,
            USER_INFO: serialize_profile(identity.profile),
        }

        for field, value in values.items():
            if value is None:
                self.storage.remove(self._name(field))
            else:
                self.storage.set(self._name(field), value, ttl_days)

        logger.debug(
            "Cached identity",
            extra={"extra_fields": {"app_id": self.app_id, "ttl_days": ttl_days}},
        )

    def clear(self) -> None:
        """Remove all three entries. Absent entries are fine."""
        for field in CACHE_FIELDS:
            self.storage.remove(self._name(field))

    def get_profile(self) -> Any:
        """
        Return the parsed profile, or {} when absent or unparseable.
        """
        raw = self.storage.get(self._name(USER_INFO))
        if not raw:
            return {}
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(
                "Cached profile is not valid JSON, ignoring it",
                extra={"extra_fields": {"app_id": self.app_id}},
            )
            return {}
