"""Signup, login and session endpoints."""

from fastapi import APIRouter, Depends, Response, status

from ecomlens_api.auth.auth_service import AuthService, get_auth_service
from ecomlens_api.auth.dependencies import get_current_user, get_session_token
from ecomlens_api.models.auth import CredentialsRequest
from ecomlens_api.models.responses import SessionResponse, UserResponse
from ecomlens_api.models.user import UserRecord

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/signup",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign Up",
    description="Create a standard account with the default daily limit and log in.",
)
async def signup(
    request: CredentialsRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    """Returns 409 if the email (ignoring case) is already registered."""
    return await auth_service.signup(request.email)


@router.post(
    "/login",
    response_model=SessionResponse,
    summary="Log In",
    description="Log in by email. Usage is reset if the last reset was on another day.",
)
async def login(
    request: CredentialsRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    return await auth_service.login(request.email)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log Out",
    description="End the session and discard its studio workspace.",
)
async def logout(
    token: str = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> Response:
    await auth_service.logout(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current User",
    description="Get the logged-in user with their quota summary.",
)
async def me(user: UserRecord = Depends(get_current_user)) -> UserResponse:
    return UserResponse.from_record(user)
