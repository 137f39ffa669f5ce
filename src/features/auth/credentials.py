"""Credential store consumed by the authenticator."""

import logging
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.base import utcnow
from src.features.user.exceptions import EmailAlreadyExists
from src.features.user.models import OAuthProvider, User, UserRole, UserStatus

from .exceptions import UpstreamUnavailable
from .external_identity import ExternalIdentity

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    async def get_by_username(self, username: str) -> User | None: ...

    async def get_by_oauth_id(self, provider: str, provider_id: str) -> User | None: ...

    async def create_from_oauth(self, identity: ExternalIdentity) -> User: ...

    async def record_login(self, user: User) -> None: ...


class SqlCredentialStore:
    """Credential store over the users table.

    Database faults are logged and raised as UpstreamUnavailable so they are
    never confused with a failed credential check.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_username(self, username: str) -> User | None:
        """Look up a local account by username."""
        stmt = select(User).where(User.username == username, User.oauth_provider == OAuthProvider.LOCAL.value)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception(f"Credential lookup failed: {exc}")
            raise UpstreamUnavailable() from exc
        return result.scalar_one_or_none()

    async def get_by_oauth_id(self, provider: str, provider_id: str) -> User | None:
        """Look up a federated account by (provider, provider subject id)."""
        stmt = select(User).where(User.oauth_provider == provider, User.oauth_provider_id == provider_id)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception(f"Federated identity lookup failed: {exc}")
            raise UpstreamUnavailable() from exc
        return result.scalar_one_or_none()

    async def _available_username(self, identity: ExternalIdentity) -> str:
        base = identity.email.split("@")[0] or identity.provider
        candidate = base
        stmt = select(User.id).where(User.username == candidate)
        if (await self.session.execute(stmt)).first() is not None:
            candidate = f"{base}-{identity.provider_subject_id[-6:]}"
        return candidate

    async def create_from_oauth(self, identity: ExternalIdentity) -> User:
        """Provision a federated account with the default role.

        Raises:
            EmailAlreadyExists: If a different account already owns the email

        """
        try:
            stmt = select(User.id).where(User.email == identity.email)
            if (await self.session.execute(stmt)).first() is not None:
                raise EmailAlreadyExists()

            user = User(
                username=await self._available_username(identity),
                email=identity.email,
                full_name=identity.name,
                hashed_password=None,
                oauth_provider=identity.provider,
                oauth_provider_id=identity.provider_subject_id,
                role=UserRole.USER.value,
                status=UserStatus.ACTIVE.value,
            )
            self.session.add(user)
            await self.session.flush()
        except SQLAlchemyError as exc:
            logger.exception(f"Federated account provisioning failed: {exc}")
            raise UpstreamUnavailable() from exc

        logger.info(f"Provisioned {identity.provider} account: {user.username}")
        return user

    async def record_login(self, user: User) -> None:
        user.last_login_at = utcnow()
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            logger.exception(f"Failed to record login: {exc}")
            raise UpstreamUnavailable() from exc
