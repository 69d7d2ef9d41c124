"""Custom exception hierarchy for the EcomLens API."""

from typing import Any

from ecomlens_api.config import UserRole


class EcomLensError(Exception):
    """Base exception for all EcomLens API errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.__class__.message
        self.details = details or {}
        super().__init__(self.message)


# Authentication Errors (401)


class AuthenticationError(EcomLensError):
    """Base authentication error."""

    status_code = 401
    error_code = "AUTH_ERROR"
    message = "Authentication failed"


class MissingCredentialsError(AuthenticationError):
    """No session token provided."""

    error_code = "AUTH_MISSING_CREDENTIALS"
    message = "No session token provided"


class InvalidSessionError(AuthenticationError):
    """Session token does not point at a user."""

    error_code = "AUTH_INVALID_SESSION"
    message = "Session is invalid or has ended"


# Authorization Errors (403)


class AuthorizationError(EcomLensError):
    """Base authorization error."""

    status_code = 403
    error_code = "AUTH_FORBIDDEN"
    message = "Access denied"


class InsufficientRoleError(AuthorizationError):
    """User role does not allow this operation."""

    error_code = "AUTH_INSUFFICIENT_ROLE"
    message = "Your role does not allow this operation"

    def __init__(self, current_role: UserRole, required_role: UserRole):
        super().__init__(
            message=f"This operation requires the {required_role.value} role",
            details={
                "current_role": current_role.value,
                "required_role": required_role.value,
            },
        )


# Quota Errors (429)


class QuotaError(EcomLensError):
    """Base quota error."""

    status_code = 429
    error_code = "QUOTA_ERROR"
    message = "Quota exceeded"


class QuotaExceededError(QuotaError):
    """User has used up their daily generations."""

    error_code = "QUOTA_EXCEEDED"
    message = "You have reached your daily limit"

    def __init__(self, limit: int, used: int):
        super().__init__(
            message=(
                f"Daily generation limit reached ({used}/{limit}). "
                "Please contact admin for more access."
            ),
            details={"limit": limit, "used": used},
        )


# Account Errors


class DuplicateUserError(EcomLensError):
    """A user with this email already exists."""

    status_code = 409
    error_code = "USER_EXISTS"
    message = "User already exists"

    def __init__(self, email: str):
        super().__init__(details={"email": email})


class UserNotFoundError(EcomLensError):
    """No user matches the given email or ID."""

    status_code = 404
    error_code = "USER_NOT_FOUND"
    message = "User not found"

    def __init__(self, message: str | None = None, **details: Any):
        super().__init__(message=message, details=details)


# Studio Errors (400/404)


class ValidationError(EcomLensError):
    """Base validation error."""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    message = "Validation failed"


class InvalidImageError(ValidationError):
    """Uploaded image payload cannot be decoded."""

    error_code = "INVALID_IMAGE"
    message = "The image must be base64 encoded, optionally as a data URI"


class NoSourceImageError(ValidationError):
    """Generation requested before an image was uploaded."""

    error_code = "NO_SOURCE_IMAGE"
    message = "Upload a product image before generating"


class AssetNotFoundError(EcomLensError):
    """Generated asset not found in the workspace."""

    status_code = 404
    error_code = "ASSET_NOT_FOUND"
    message = "Asset not found"

    def __init__(self, asset_id: str):
        super().__init__(
            message=f"Asset '{asset_id}' not found",
            details={"asset_id": asset_id},
        )


# Generation Errors


class GenerationError(EcomLensError):
    """Base generation error."""

    status_code = 502
    error_code = "GENERATION_ERROR"
    message = "Image generation failed"


class GenerationFailure(GenerationError):
    """Upstream model returned no usable image."""

    error_code = "GENERATION_FAILED"
    message = "No image data found in response"


class UpstreamServiceError(GenerationError):
    """Upstream model call raised an error."""

    error_code = "UPSTREAM_ERROR"
    message = "The image generation service returned an error"


class ModelUnavailableError(GenerationError):
    """Model is not configured."""

    status_code = 503
    error_code = "MODEL_UNAVAILABLE"
    message = "The image generation model is not configured"


# Storage Errors


class StorageError(EcomLensError):
    """Base storage error."""

    status_code = 500
    error_code = "STORAGE_ERROR"
    message = "Storage operation failed"


class StoreDecodeError(StorageError):
    """Persisted blob is malformed or has an unknown schema."""

    error_code = "STORE_DECODE_ERROR"
    message = "Stored data could not be decoded"

    def __init__(self, key: str, reason: str):
        super().__init__(
            message=f"Stored data under '{key}' could not be decoded: {reason}",
            details={"key": key, "reason": reason},
        )


class StorageConflictError(StorageError):
    """Compare-and-set kept losing to concurrent writers."""

    status_code = 503
    error_code = "STORAGE_CONFLICT"
    message = "Too many concurrent writes, please try again"

    def __init__(self, key: str, attempts: int):
        super().__init__(details={"key": key, "attempts": attempts})
