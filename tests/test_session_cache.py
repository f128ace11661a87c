"""
Tests for the cookie-backed identity cache.
"""

import pytest

from tests.conftest import FakeStorage
from wxoauth.core.domain import CachedIdentity
from wxoauth.core.exceptions import SerializationError
from wxoauth.core.session_cache import SessionCache, cookie_name


OPEN_ID = "wx_oauth_wx123_openId"
UNION_ID = "wx_oauth_wx123_unionId"
USER_INFO = "wx_oauth_wx123_userInfo"


@pytest.fixture
def cache(storage):
    return SessionCache(storage, "wx123")


def test_cookie_name_is_namespaced_by_app():
    assert cookie_name("wx123", "openId") == OPEN_ID
    assert cookie_name("wx456", "openId") != cookie_name("wx123", "openId")


class TestGet:
    """Tests for SessionCache.get."""

    def test_empty_storage_returns_none(self, cache):
        assert cache.get() is None

    def test_partial_identity(self):
        """Test that a subset of entries is returned as-is."""
        cache = SessionCache(FakeStorage({UNION_ID: "uY2"}), "wx123")

        identity = cache.get()

        assert identity is not None
        assert identity.secondary_id == "uY2"
        assert identity.primary_id is None

    def test_other_app_entries_are_ignored(self):
        cache = SessionCache(FakeStorage({"wx_oauth_wx999_openId": "oZ9"}), "wx123")

        assert cache.get() is None


class TestSet:
    """Tests for SessionCache.set."""

    def test_writes_all_three_entries_with_same_ttl(self, cache, storage):
        identity = CachedIdentity(
            primary_id="oX1", secondary_id="uY2", profile={"nick": "A"}
        )

        cache.set(identity, ttl_days=7)

        assert storage.values[OPEN_ID] == "oX1"
        assert storage.values[UNION_ID] == "uY2"
        assert storage.values[USER_INFO] == '{"nick":"A"}'
        assert storage.expires == {OPEN_ID: 7, UNION_ID: 7, USER_INFO: 7}

    def test_missing_fields_are_removed(self):
        """Test that stale entries do not survive a write without them."""
        storage = FakeStorage({UNION_ID: "stale", USER_INFO: '{"old":1}'})
        cache = SessionCache(storage, "wx123")

        cache.set(CachedIdentity(primary_id="oX1"), ttl_days=30)

        assert storage.values == {OPEN_ID: "oX1"}

    def test_unserializable_profile_leaves_storage_untouched(self, cache, storage):
        identity = CachedIdentity(primary_id="oX1", profile={"bad": object()})

        with pytest.raises(SerializationError):
            cache.set(identity, ttl_days=30)

        assert storage.writes == []

    def test_non_ascii_profile(self, cache, storage):
        cache.set(CachedIdentity(primary_id="oX1", profile={"nick": "小明"}), ttl_days=1)

        assert cache.get_profile() == {"nick": "小明"}


class TestClear:
    """Tests for SessionCache.clear."""

    def test_removes_all_entries(self):
        storage = FakeStorage({OPEN_ID: "oX1", UNION_ID: "uY2", USER_INFO: "{}"})
        cache = SessionCache(storage, "wx123")

        cache.clear()

        assert storage.values == {}

    def test_clearing_empty_storage_is_fine(self, cache, storage):
        cache.clear()

        assert sorted(name for _, name in storage.writes) == sorted(
            [OPEN_ID, UNION_ID, USER_INFO]
        )


class TestGetProfile:
    """Tests for SessionCache.get_profile."""

    def test_absent_profile(self, cache):
        assert cache.get_profile() == {}

    def test_unparseable_profile(self):
        cache = SessionCache(FakeStorage({USER_INFO: "{not json"}), "wx123")

        assert cache.get_profile() == {}

    def test_parsed_profile(self):
        cache = SessionCache(FakeStorage({USER_INFO: '{"nick":"A"}'}), "wx123")

        assert cache.get_profile() == {"nick": "A"}
