"""Pydantic models for the EcomLens API."""

from ecomlens_api.models.asset import GeneratedAsset
from ecomlens_api.models.responses import ErrorDetail, ErrorResponse, UserResponse
from ecomlens_api.models.user import UserRecord

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "GeneratedAsset",
    "UserRecord",
    "UserResponse",
]
