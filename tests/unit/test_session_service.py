"""Tests for session service."""

import json
from datetime import date

import pytest

from ecomlens_api.errors.exceptions import StoreDecodeError
from ecomlens_api.services.quota_service import QuotaService
from ecomlens_api.services.session_service import SessionService


class TestSessionService:
    """Tests for SessionService."""

    TODAY = date(2024, 3, 2)

    @pytest.fixture
    def sessions(self, storage):
        return SessionService(storage=storage, today=lambda: self.TODAY)

    @pytest.mark.asyncio
    async def test_no_session(self, sessions):
        assert await sessions.get_current("unknown-token") is None

    @pytest.mark.asyncio
    async def test_set_and_get(self, sessions, storage, make_user):
        user = await storage.users.create(make_user(last_reset_date=self.TODAY))

        await sessions.set_current("tok", user.id)

        assert await sessions.get_current("tok") == user

    @pytest.mark.asyncio
    async def test_set_overwrites_previous_pointer(self, sessions, storage, make_user):
        await storage.users.create(make_user(user_id="u1", email="a@x.com"))
        await storage.users.create(make_user(user_id="u2", email="b@x.com"))

        await sessions.set_current("tok", "u1")
        await sessions.set_current("tok", "u2")

        assert (await sessions.get_current("tok")).id == "u2"

    @pytest.mark.asyncio
    async def test_clear_leaves_store_untouched(self, sessions, storage, make_user):
        user = await storage.users.create(make_user())
        await sessions.set_current("tok", user.id)

        await sessions.clear_current("tok")

        assert await sessions.get_current("tok") is None
        assert await storage.users.get(user.id) is not None

    @pytest.mark.asyncio
    async def test_session_view_matches_store_after_increment(self, sessions, storage, make_user):
        """Test that the session always reflects the stored record."""
        user = await storage.users.create(make_user(last_reset_date=self.TODAY))
        await sessions.set_current("tok", user.id)

        await QuotaService(storage=storage).increment(user.id)

        current = await sessions.get_current("tok")
        assert current.usage_count == 1
        assert current == await storage.users.get(user.id)

    @pytest.mark.asyncio
    async def test_daily_reset_applies_to_session_and_store(self, sessions, storage, make_user):
        """Test that a stale session view resets both views."""
        user = await storage.users.create(
            make_user(usage_count=5, last_reset_date=date(2024, 3, 1))
        )
        await sessions.set_current("tok", user.id)

        current = await sessions.get_current("tok")

        assert current.usage_count == 0
        assert current.last_reset_date == self.TODAY
        stored = await storage.users.get(user.id)
        assert stored.usage_count == 0
        assert stored.last_reset_date == self.TODAY

    @pytest.mark.asyncio
    async def test_pointer_to_missing_user_clears_itself(self, sessions, storage):
        await sessions.set_current("tok", "ghost")

        assert await sessions.get_current("tok") is None
        assert await storage.blobs.get("ecomlens_current_user_v1:tok") is None

    @pytest.mark.asyncio
    async def test_legacy_session_blob(self, sessions, storage, make_user):
        """Test that a legacy full-record session still resolves."""
        user = await storage.users.create(make_user(user_id="u-7", last_reset_date=self.TODAY))
        await storage.blobs.set(
            "ecomlens_current_user_v1:tok",
            json.dumps({"id": "u-7", "email": user.email, "creditsUsed": 0}),
        )

        assert (await sessions.get_current("tok")).id == "u-7"

    @pytest.mark.asyncio
    async def test_malformed_session_raises_when_strict(self, sessions, storage):
        await storage.blobs.set("ecomlens_current_user_v1:tok", "{broken")

        with pytest.raises(StoreDecodeError):
            await sessions.get_current("tok")
        assert await storage.blobs.get("ecomlens_current_user_v1:tok") == "{broken"

    @pytest.mark.asyncio
    async def test_malformed_session_cleared_when_lenient(self, storage):
        """Test that lenient decoding treats a broken session as logged out."""
        sessions = SessionService(storage=storage, today=lambda: self.TODAY, strict=False)
        await storage.blobs.set("ecomlens_current_user_v1:tok", "{broken")

        assert await sessions.get_current("tok") is None
        assert await storage.blobs.get("ecomlens_current_user_v1:tok") is None

    def test_new_token_is_random(self):
        assert SessionService.new_token() != SessionService.new_token()
