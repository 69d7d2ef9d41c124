"""Authentication request models."""

from pydantic import BaseModel, EmailStr, Field


class CredentialsRequest(BaseModel):
    """Email and password for signup or login.

    The password is required but never verified.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="Account password")
