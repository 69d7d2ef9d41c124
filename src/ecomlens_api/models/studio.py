"""Studio request and response models."""

from pydantic import BaseModel, Field, field_validator

from ecomlens_api.models.asset import GeneratedAsset


class SourceImageRequest(BaseModel):
    """Upload a product image."""

    image: str = Field(
        ...,
        min_length=1,
        description="Base64 image, optionally as a data:image/...;base64, URI",
    )


class CustomGenerationRequest(BaseModel):
    """Generate one image from a free-text instruction."""

    prompt: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Describe the edit, e.g. 'Place product on a marble table'",
    )

    @field_validator("prompt")
    @classmethod
    def strip_prompt(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Prompt must not be blank")
        return v


class PresetResponse(BaseModel):
    """Style preset description."""

    id: str
    label: str
    description: str


class StudioResponse(BaseModel):
    """Current studio workspace state."""

    has_source_image: bool
    assets: list[GeneratedAsset]


class BatchGenerationResponse(BaseModel):
    """Result of generating all preset styles."""

    assets: list[GeneratedAsset] = Field(..., description="Assets generated in this batch")
    failed: list[str] = Field(..., description="Preset IDs that produced no image")
    total_requested: int
    usage_count: int
    usage_limit: int
