"""User service layer."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.base import utcnow
from src.shared.pagination.pagination import PaginationParams

from .exceptions import (
    CannotChangeFederatedPassword,
    EmailAlreadyExists,
    UsernameAlreadyExists,
)
from .models import OAuthProvider, User, UserRole, UserStatus
from .schemas import UserRegisterRequest, UserUpdateRequest

logger = logging.getLogger(__name__)


class UserService:
    """Service for user operations."""

    @staticmethod
    async def _username_taken(session: AsyncSession, username: str) -> bool:
        result = await session.execute(select(User.id).where(User.username == username))
        return result.first() is not None

    @staticmethod
    async def _email_taken(session: AsyncSession, email: str) -> bool:
        result = await session.execute(select(User.id).where(User.email == email))
        return result.first() is not None

    @staticmethod
    async def register_user(session: AsyncSession, data: UserRegisterRequest) -> User:
        """Register a new local user.

        Args:
            session: Database session
            data: User registration data

        Returns:
            Created User object

        Raises:
            UsernameAlreadyExists: If username already exists
            EmailAlreadyExists: If email already exists

        """
        if await UserService._username_taken(session, data.username):
            raise UsernameAlreadyExists()

        if data.email is not None and await UserService._email_taken(session, data.email):
            raise EmailAlreadyExists()

        user = User(
            username=data.username,
            email=data.email,
            full_name=data.full_name,
            hashed_password=User.hash_password(data.password),
            oauth_provider=OAuthProvider.LOCAL.value,
            role=UserRole.USER.value,
            status=UserStatus.ACTIVE.value,
        )

        session.add(user)
        await session.flush()
        await session.refresh(user)
        logger.info(f"New user registered: {user.username}")

        return user

    @staticmethod
    async def get_user(session: AsyncSession, user_id: int) -> User | None:
        """Get user by ID."""
        stmt = select(User).where(User.id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_users(session: AsyncSession, pagination: PaginationParams) -> tuple[list[User], int]:
        """Get paginated users list.

        Args:
            session: Database session
            pagination: PaginationParams with page and page_size

        Returns:
            Tuple of (users, total_count)

        """
        count_stmt = select(func.count()).select_from(User)
        total_result = await session.execute(count_stmt)
        total = total_result.scalar_one()

        result = await session.execute(pagination.apply(select(User).order_by(User.id)))
        users = list(result.scalars().all())

        return users, total

    @staticmethod
    async def update_user(session: AsyncSession, user: User, data: UserUpdateRequest) -> User:
        """Update user fields.

        Role changes are authorized by the caller; this method only applies them.

        Raises:
            UsernameAlreadyExists: If username is being changed to an existing one
            EmailAlreadyExists: If email is being changed to an existing one
            CannotChangeFederatedPassword: If a password is set on a federated account

        """
        if data.username is not None and data.username != user.username:
            if await UserService._username_taken(session, data.username):
                raise UsernameAlreadyExists()
            user.username = data.username

        if data.email is not None and data.email != user.email:
            if await UserService._email_taken(session, data.email):
                raise EmailAlreadyExists()
            user.email = data.email

        if data.full_name is not None:
            user.full_name = data.full_name

        if data.password is not None:
            if not user.is_local:
                raise CannotChangeFederatedPassword()
            user.hashed_password = User.hash_password(data.password)

        if data.role is not None:
            user.role = data.role.value

        user.updated_at = utcnow()
        logger.info(f"User updated: {user.username}")
        return user

    @staticmethod
    async def delete_user(session: AsyncSession, user_id: int) -> bool:
        """Delete user by ID."""
        user = await UserService.get_user(session, user_id)

        if user:
            await session.delete(user)
            logger.info(f"User deleted: {user.username}")
            return True
        return False
