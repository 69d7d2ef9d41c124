"""Admin request models."""

from pydantic import BaseModel, Field


class SetLimitRequest(BaseModel):
    """Replace a user's daily limit. Negative values are stored as 0."""

    limit: int = Field(..., description="New daily generation limit")


class AdjustLimitRequest(BaseModel):
    """Raise or lower a user's daily limit."""

    delta: int = Field(..., description="Amount added to the current limit, e.g. 5 or -5")
