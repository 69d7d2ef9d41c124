"""Tests for auth service."""

from datetime import date

import pytest
from conftest import SOURCE_IMAGE, FakeGenerationClient

from ecomlens_api.auth.auth_service import AuthService
from ecomlens_api.config import UserRole
from ecomlens_api.errors.exceptions import DuplicateUserError, UserNotFoundError
from ecomlens_api.services.session_service import SessionService
from ecomlens_api.services.studio_service import StudioService


class TestAuthService:
    """Tests for AuthService signup, login and logout."""

    TODAY = date(2024, 3, 2)
    YESTERDAY = date(2024, 3, 1)

    @pytest.fixture
    def sessions(self, storage):
        return SessionService(storage=storage, today=lambda: self.TODAY)

    @pytest.fixture
    def studio(self):
        return StudioService(client=FakeGenerationClient())

    @pytest.fixture
    def auth(self, storage, sessions, studio):
        return AuthService(
            storage=storage,
            sessions=sessions,
            studio=studio,
            today=lambda: self.TODAY,
        )

    @pytest.mark.asyncio
    async def test_signup_creates_standard_user(self, auth, storage, sessions):
        session = await auth.signup("New@Shop.com")

        assert session.user.email == "new@shop.com"
        assert session.user.role == UserRole.STANDARD.value
        assert session.user.usage_count == 0
        assert session.user.usage_limit == 5
        assert session.user.last_reset_date == self.TODAY
        assert (await sessions.get_current(session.session_token)).id == session.user.user_id
        assert await storage.users.get(session.user.user_id) is not None

    @pytest.mark.asyncio
    async def test_duplicate_signup_rejected(self, auth, storage):
        await auth.signup("shopper@shop.com")

        with pytest.raises(DuplicateUserError):
            await auth.signup("SHOPPER@shop.com")
        assert len(await storage.users.list()) == 1

    @pytest.mark.asyncio
    async def test_login_resets_stale_usage(self, auth, storage, make_user):
        """Test that logging in on a new day zeroes usage in the response and the store."""
        user = await storage.users.create(
            make_user(usage_count=5, last_reset_date=self.YESTERDAY)
        )

        session = await auth.login(user.email)

        assert session.user.usage_count == 0
        assert session.user.last_reset_date == self.TODAY
        assert session.user.can_generate is True
        stored = await storage.users.get(user.id)
        assert stored.usage_count == 0
        assert stored.last_reset_date == self.TODAY

    @pytest.mark.asyncio
    async def test_login_same_day_keeps_usage(self, auth, storage, make_user):
        user = await storage.users.create(make_user(usage_count=3, last_reset_date=self.TODAY))

        session = await auth.login(user.email)

        assert session.user.usage_count == 3
        assert (await storage.users.get(user.id)).usage_count == 3

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, auth):
        with pytest.raises(UserNotFoundError) as exc_info:
            await auth.login("ghost@shop.com")

        assert exc_info.value.details == {"email": "ghost@shop.com"}

    @pytest.mark.asyncio
    async def test_each_login_opens_new_session(self, auth, storage, make_user):
        user = await storage.users.create(make_user(last_reset_date=self.TODAY))

        first = await auth.login(user.email)
        second = await auth.login(user.email)

        assert first.session_token != second.session_token

    @pytest.mark.asyncio
    async def test_logout_clears_session_and_workspace(self, auth, sessions, studio, storage):
        session = await auth.signup("shopper@shop.com")
        studio.set_source_image(session.session_token, SOURCE_IMAGE, session.user.user_id)

        await auth.logout(session.session_token)

        assert await sessions.get_current(session.session_token) is None
        assert studio.active_workspaces == 0
        assert await storage.users.get(session.user.user_id) is not None
