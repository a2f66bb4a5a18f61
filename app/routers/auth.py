"""
Authentication and user administration endpoints.
Provides JWT login, token refresh, profile access and admin management of staff accounts.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from typing import Optional
from uuid import UUID

from app.config import settings
from app.models.user import User, UserRole
from app.services.auth import AuthService
from app.services.error_handler import get_error_responses
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    AccessTokenResponse,
    MessageResponse,
)
from app.schemas.user import (
    UserCreate,
    UserUpdate,
    UserStatusUpdate,
    UserResponse,
    UserListResponse,
    PasswordChangeRequest,
    PasswordResetResponse,
)
from app.utils.dependencies import (
    get_auth_service,
    get_current_active_user,
    get_current_admin_user,
)
from app.utils.exceptions import APIException, InvalidCredentialsError


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user with email and password, returns JWT tokens",
    responses=get_error_responses(400, 401)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Authenticate user and return JWT tokens.

    Args:
        login_data: Login credentials (email and password)
        auth_service: Authentication service

    Returns:
        Login response with user info and JWT tokens

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveUserError: If user account is inactive
    """
    try:
        user, access_token, refresh_token = await auth_service.login(
            email=login_data.email,
            password=login_data.password
        )

        return LoginResponse(
            user=UserResponse.model_validate(user.to_dict()),
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
            expires_in=settings.access_token_expire_minutes * 60
        )

    except APIException:
        raise
    except Exception:
        raise InvalidCredentialsError()


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    summary="Refresh access token",
    responses=get_error_responses(401)
)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AccessTokenResponse:
    access_token = await auth_service.refresh_access_token(refresh_data.refresh_token)
    return AccessTokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a staff account",
    description="Create a new user. Admin only.",
    responses=get_error_responses(400, 401, 403)
)
async def register(
    user_data: UserCreate,
    current_user: User = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.create_user(user_data, current_user)
    return UserResponse.model_validate(user.to_dict())


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    responses=get_error_responses(401)
)
async def get_current_user_info(
    current_user: User = Depends(get_current_active_user)
) -> UserResponse:
    return UserResponse.model_validate(current_user.to_dict())


@router.put(
    "/change-password",
    response_model=MessageResponse,
    summary="Change own password",
    responses=get_error_responses(400, 401)
)
async def change_password(
    password_data: PasswordChangeRequest,
    current_user: User = Depends(get_current_active_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth_service.change_password(current_user, password_data.current_password, password_data.new_password)
    return MessageResponse(message="Password updated successfully")


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List users",
    responses=get_error_responses(401, 403)
)
async def list_users(
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserListResponse:
    users, total = await auth_service.list_users(role=role, is_active=is_active, skip=offset, limit=limit)
    return UserListResponse(
        users=[UserResponse.model_validate(user.to_dict()) for user in users],
        total=total
    )


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Get a user",
    responses=get_error_responses(401, 403, 404)
)
async def get_user(
    user_id: UUID,
    current_user: User = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.get_user_by_id(user_id)
    return UserResponse.model_validate(user.to_dict())


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
    description="Admins may update any account; other users only their own profile fields.",
    responses=get_error_responses(400, 401, 403, 404)
)
async def update_user(
    user_id: UUID,
    update_data: UserUpdate,
    current_user: User = Depends(get_current_active_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.update_user(user_id, update_data, current_user)
    return UserResponse.model_validate(user.to_dict())


@router.put(
    "/users/{user_id}/status",
    response_model=UserResponse,
    summary="Activate or deactivate a user",
    responses=get_error_responses(400, 401, 403, 404)
)
async def update_user_status(
    user_id: UUID,
    status_data: UserStatusUpdate,
    current_user: User = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.update_user_status(user_id, status_data.is_active, current_user)
    return UserResponse.model_validate(user.to_dict())


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    responses=get_error_responses(400, 401, 403, 404)
)
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> Response:
    await auth_service.delete_user(user_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/reset-password/{user_id}",
    response_model=PasswordResetResponse,
    summary="Reset a user's password",
    description="Replace the password with a random 8 character temporary one. Admin only.",
    responses=get_error_responses(401, 403, 404)
)
async def reset_password(
    user_id: UUID,
    current_user: User = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> PasswordResetResponse:
    temp_password = await auth_service.reset_password(user_id, current_user)
    return PasswordResetResponse(message="Password reset successfully", temp_password=temp_password)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="User logout",
    description="Tokens are stateless; the client discards them."
)
async def logout(current_user: User = Depends(get_current_active_user)) -> MessageResponse:
    return MessageResponse(message="Successfully logged out")
