"""Admin endpoints for managing user limits."""

from fastapi import APIRouter, Depends

from ecomlens_api.auth.dependencies import require_role
from ecomlens_api.config import UserRole
from ecomlens_api.models.admin import AdjustLimitRequest, SetLimitRequest
from ecomlens_api.models.responses import UserListResponse, UserResponse
from ecomlens_api.models.user import UserRecord
from ecomlens_api.services.admin_service import AdminService, get_admin_service

router = APIRouter(prefix="/admin", tags=["Admin"])

require_admin = require_role(UserRole.ADMIN)


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List Users",
    description="All users with their usage and limits. Admin only.",
)
async def list_users(
    admin: UserRecord = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> UserListResponse:
    users = await admin_service.list_all_users()
    return UserListResponse(
        users=[UserResponse.from_record(user) for user in users],
        total=len(users),
    )


@router.put(
    "/users/{user_id}/limit",
    response_model=UserResponse,
    summary="Set Daily Limit",
    description="Replace a user's daily limit. Negative values are stored as 0.",
)
async def set_limit(
    user_id: str,
    request: SetLimitRequest,
    admin: UserRecord = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> UserResponse:
    user = await admin_service.set_limit(user_id, request.limit)
    return UserResponse.from_record(user)


@router.post(
    "/users/{user_id}/limit/adjust",
    response_model=UserResponse,
    summary="Adjust Daily Limit",
    description="Add to a user's daily limit (e.g. +5 or -5). Never goes below 0.",
)
async def adjust_limit(
    user_id: str,
    request: AdjustLimitRequest,
    admin: UserRecord = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
) -> UserResponse:
    user = await admin_service.adjust_limit(user_id, request.delta)
    return UserResponse.from_record(user)
