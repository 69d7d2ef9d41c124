"""User models."""

from datetime import date

from pydantic import BaseModel, Field

from ecomlens_api.config import UserRole


class UserRecord(BaseModel):
    """Persisted user record."""

    id: str = Field(..., min_length=1, description="Unique, stable user identifier")
    email: str = Field(..., min_length=1, description="Lower-cased email address")
    role: UserRole = Field(default=UserRole.STANDARD)
    usage_count: int = Field(default=0, ge=0, description="Generations used today")
    usage_limit: int = Field(..., ge=0, description="Generations allowed per day")
    last_reset_date: date = Field(..., description="Day the usage count was last zeroed")

    model_config = {"from_attributes": True, "extra": "forbid"}

    @property
    def remaining(self) -> int:
        return max(0, self.usage_limit - self.usage_count)
