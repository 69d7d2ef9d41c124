"""Application configuration, roles and style presets."""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_env: Environment = Environment.DEVELOPMENT
    api_prefix: str = "/v1"

    # Redis
    redis_enabled: bool = True
    redis_url: str = "redis://localhost:6379/0"
    redis_max_connections: int = 100

    # Blob storage
    users_storage_key: str = "ecomlens_users_v1"
    session_storage_key: str = "ecomlens_current_user_v1"
    strict_store_decoding: bool = True

    # Gemini
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash-image"

    # Quotas
    default_usage_limit: int = 5
    admin_email: str = "admin@admin.com"
    admin_usage_limit: int = 1000

    # Studio
    studio_max_workspaces: int = 500

    model_config = {"env_prefix": "", "case_sensitive": False}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class UserRole(str, Enum):
    """User roles."""

    ADMIN = "admin"
    STANDARD = "standard"


@dataclass(frozen=True)
class StylePreset:
    """A predefined product photography style."""

    id: str
    label: str
    description: str
    prompt: str


STYLE_PRESETS: tuple[StylePreset, ...] = (
    StylePreset(
        id="amazon",
        label="Amazon White",
        description="Pure white background compliant with e-commerce standards.",
        prompt=(
            "Place the product on a pure solid white background (RGB 255, 255, 255). "
            "Ensure professional studio lighting, sharp focus, and remove any original "
            "background artifacts. The product should look like a standard Amazon "
            "listing photo."
        ),
    ),
    StylePreset(
        id="lifestyle",
        label="Cozy Lifestyle",
        description="In a warm, home environment.",
        prompt=(
            "Place this product in a cozy, modern living room setting. Soft, warm "
            "lighting, shallow depth of field (bokeh) background. Make it look like a "
            "high-quality lifestyle Instagram photo."
        ),
    ),
    StylePreset(
        id="luxury",
        label="Luxury Studio",
        description="Dark, dramatic, and premium.",
        prompt=(
            "Place the product on a sleek, reflective black surface. Use dramatic rim "
            "lighting and cool tones to convey luxury and elegance. High contrast "
            "professional product photography."
        ),
    ),
    StylePreset(
        id="nature",
        label="Nature/Outdoor",
        description="Fresh, organic outdoor setting.",
        prompt=(
            "Place the product outdoors on a rustic wooden table with sunlight filtering "
            "through green leaves. Natural, organic, fresh vibe. Bright and airy."
        ),
    ),
    StylePreset(
        id="minimal",
        label="Pastel Minimal",
        description="Clean geometry with soft colors.",
        prompt=(
            "Place the product on a geometric podium with a soft pastel colored "
            "background (light blue or pink). Minimalist design, soft shadows, 3D "
            "render aesthetic."
        ),
    ),
)

CUSTOM_CATEGORY = "custom"

