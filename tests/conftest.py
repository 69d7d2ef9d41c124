"""Pytest configuration and fixtures."""

import os

# Tests run against the in-memory blob store
os.environ["REDIS_ENABLED"] = "false"

from collections.abc import Callable, Generator  # noqa: E402
from datetime import date  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from ecomlens_api.auth.auth_service import reset_auth_service  # noqa: E402
from ecomlens_api.config import STYLE_PRESETS, UserRole  # noqa: E402
from ecomlens_api.errors.exceptions import GenerationFailure  # noqa: E402
from ecomlens_api.main import create_app  # noqa: E402
from ecomlens_api.models.user import UserRecord  # noqa: E402
from ecomlens_api.services.admin_service import reset_admin_service  # noqa: E402
from ecomlens_api.services.generation_client import reset_generation_client  # noqa: E402
from ecomlens_api.services.quota_service import reset_quota_service  # noqa: E402
from ecomlens_api.services.session_service import reset_session_service  # noqa: E402
from ecomlens_api.services.studio_service import reset_studio_service  # noqa: E402
from ecomlens_api.storage.lua_scripts import lua_scripts  # noqa: E402
from ecomlens_api.storage.memory import InMemoryBlobStore, StorageManager  # noqa: E402

# 8-byte PNG signature
PNG_BASE64 = "iVBORw0KGgo="
PNG_BYTES = b"\x89PNG\r\n\x1a\n"
SOURCE_IMAGE = f"data:image/png;base64,{PNG_BASE64}"
GENERATED_IMAGE = f"data:image/png;base64,{PNG_BASE64}"


def preset_prompt(preset_id: str) -> str:
    """Prompt sent to the model for a style preset."""
    return next(p.prompt for p in STYLE_PRESETS if p.id == preset_id)


class FakeGenerationClient:
    """Stands in for the Gemini client. Fails for instructions in ``failing``."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.failing: set[str] = set()

    async def generate(self, source_image: str, instruction: str) -> str:
        self.calls.append((source_image, instruction))
        if instruction in self.failing:
            raise GenerationFailure()
        return GENERATED_IMAGE


@pytest.fixture
def reset_singletons():
    """Reset all singleton services before each test."""
    # Reset storage
    StorageManager.reset()
    lua_scripts.reset()

    # Reset services
    reset_auth_service()
    reset_session_service()
    reset_quota_service()
    reset_admin_service()
    reset_studio_service()
    reset_generation_client()

    yield

    # Cleanup after test
    StorageManager.reset()


@pytest.fixture
def fake_generator(monkeypatch) -> FakeGenerationClient:
    """Route all studio generation through a fake client."""
    fake = FakeGenerationClient()
    monkeypatch.setattr(
        "ecomlens_api.services.studio_service.get_generation_client", lambda: fake
    )
    return fake


@pytest.fixture
def app(reset_singletons, fake_generator):
    """Create FastAPI app for testing."""
    return create_app()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create test client. Entering it runs startup, which seeds the admin."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def storage() -> StorageManager:
    """Standalone storage on a fresh in-memory blob store."""
    return StorageManager(InMemoryBlobStore())


@pytest.fixture
def make_user() -> Callable[..., UserRecord]:
    """Build user records with sensible defaults."""

    def _make(
        user_id: str = "user-1",
        email: str = "shopper@shop.com",
        usage_count: int = 0,
        usage_limit: int = 5,
        last_reset_date: date | None = None,
        role: UserRole = UserRole.STANDARD,
    ) -> UserRecord:
        return UserRecord(
            id=user_id,
            email=email,
            role=role,
            usage_count=usage_count,
            usage_limit=usage_limit,
            last_reset_date=last_reset_date or date.today(),
        )

    return _make


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    redis = AsyncMock()
    redis.ping = AsyncMock(return_value=True)
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.eval = AsyncMock(return_value=1)
    redis.evalsha = AsyncMock(return_value=1)
    redis.script_load = AsyncMock(return_value="sha256hash")
    return redis


# Session fixtures
@pytest.fixture
def signup(client) -> Callable[[str], dict[str, str]]:
    """Sign up a user and return their session headers."""

    def _signup(email: str = "shopper@shop.com") -> dict[str, str]:
        response = client.post(
            "/v1/auth/signup",
            json={"email": email, "password": "secret"},
        )
        assert response.status_code == 201, response.text
        return {"X-Session-Token": response.json()["session_token"]}

    return _signup


@pytest.fixture
def user_headers(signup) -> dict[str, str]:
    """Headers for a freshly signed-up standard user."""
    return signup("shopper@shop.com")


@pytest.fixture
def admin_headers(client) -> dict[str, str]:
    """Headers for the seeded admin."""
    response = client.post(
        "/v1/auth/login",
        json={"email": "admin@admin.com", "password": "anything"},
    )
    assert response.status_code == 200, response.text
    return {"X-Session-Token": response.json()["session_token"]}


@pytest.fixture
def invalid_session_headers():
    """Headers with a token no session points at."""
    return {"X-Session-Token": "not-a-session"}


@pytest.fixture
def with_source_image(client, user_headers) -> dict[str, str]:
    """Upload the sample image for the standard user."""
    response = client.put(
        "/v1/studio/image",
        json={"image": SOURCE_IMAGE},
        headers=user_headers,
    )
    assert response.status_code == 200, response.text
    return user_headers
