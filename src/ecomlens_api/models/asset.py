"""Generated asset models."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class GeneratedAsset(BaseModel):
    """An image produced by the generation model.

    Assets live only in the in-memory studio workspace and are never persisted.
    """

    id: str = Field(..., description="Unique asset identifier")
    url: str = Field(..., description="Image payload as a data URI")
    prompt: str = Field(..., description="Preset label or custom instruction")
    category: str = Field(..., description="Preset ID, or 'custom'")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def download_filename(self) -> str:
        return f"ecomlens-{self.category}.png"
