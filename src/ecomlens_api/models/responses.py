"""Standard API response models."""

from datetime import UTC, date, datetime
from typing import Any

from pydantic import BaseModel, Field

from ecomlens_api.models.user import UserRecord


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional error details")
    request_id: str | None = Field(default=None, description="Request ID for tracking")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall health status")
    version: str = Field(..., description="API version")
    components: dict[str, dict[str, Any]] = Field(
        default_factory=dict, description="Component health status"
    )
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class UserResponse(BaseModel):
    """User details with quota summary."""

    user_id: str
    email: str
    role: str
    usage_count: int
    usage_limit: int
    remaining: int
    can_generate: bool
    last_reset_date: date

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserResponse":
        """Create response from a user record."""
        return cls(
            user_id=user.id,
            email=user.email,
            role=user.role.value,
            usage_count=user.usage_count,
            usage_limit=user.usage_limit,
            remaining=user.remaining,
            can_generate=user.usage_count < user.usage_limit,
            last_reset_date=user.last_reset_date,
        )


class SessionResponse(BaseModel):
    """Issued session token and the logged-in user."""

    session_token: str = Field(..., description="Send as the X-Session-Token header")
    user: UserResponse


class UserListResponse(BaseModel):
    """All users, in storage order."""

    users: list[UserResponse]
    total: int
