"""User management router (API endpoints)."""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.dependencies import get_db_session
from src.features.auth.dependencies import get_current_user, require_role, require_self_or_admin
from src.features.auth.jwt_utils import AccessClaims
from src.features.auth.policy import has_role
from src.shared.pagination.pagination import PaginationParams

from .exceptions import CannotDeleteOwnAccount, CannotModifyField, UserNotFound
from .models import User, UserRole
from .schemas import (
    ForgotPasswordRequest,
    UserListResponse,
    UserRegisterRequest,
    UserResponse,
    UserUpdateRequest,
)
from .service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["User Management"])


# Public endpoints
@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserRegisterRequest, session: AsyncSession = Depends(get_db_session)):
    """Register a new local account with the USER role."""
    user = await UserService.register_user(session, data)
    await session.commit()
    return UserResponse.model_validate(user)


@router.post("/forgot-password")
async def forgot_password(data: ForgotPasswordRequest):
    """Password reset placeholder. Always answers the same way to avoid account enumeration."""
    return {"message": f"If {data.username} exists, a reset link will be sent."}


# Authenticated endpoints
@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return UserResponse.model_validate(current_user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: UserUpdateRequest,
    claims: AccessClaims = Depends(require_self_or_admin("user_id")),
    session: AsyncSession = Depends(get_db_session),
):
    """Update a user (the account owner or an admin).

    Only admins may change `role`.
    """
    if data.role is not None and not has_role(claims, UserRole.ADMIN):
        raise CannotModifyField("role")

    user = await UserService.get_user(session, user_id)
    if not user:
        raise UserNotFound()

    user = await UserService.update_user(session, user, data)
    await session.commit()

    logger.info(f"User {user.username} updated by user_id={claims.sub}")
    return UserResponse.model_validate(user)


# Admin endpoints
@router.get("", response_model=UserListResponse, dependencies=[Depends(require_role(UserRole.ADMIN))])
async def list_users(
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db_session),
):
    """List all users (admin only).

    - `page`: Page number (1-indexed, default: 1)
    - `page_size`: Items per page (default: 50, max: 1000)
    """
    users, total = await UserService.get_users(session, pagination)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=pagination.page or 1,
        page_size=pagination.page_size or len(users),
    )


@router.get("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_role(UserRole.ADMIN))])
async def get_user(user_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get user by ID (admin only)."""
    user = await UserService.get_user(session, user_id)

    if not user:
        raise UserNotFound()

    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    claims: AccessClaims = Depends(require_role(UserRole.ADMIN)),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete user (admin only). Existing sessions expire on their own."""
    if claims.sub == str(user_id):
        raise CannotDeleteOwnAccount()

    success = await UserService.delete_user(session, user_id)
    await session.commit()

    if not success:
        raise UserNotFound()

    logger.info(f"User deleted by admin user_id={claims.sub}: {user_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
