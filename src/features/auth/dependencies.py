"""Authentication dependencies for FastAPI."""

from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.cache.base import SessionStore
from src.cache.dependencies import get_session_store
from src.config.settings import settings
from src.database.dependencies import get_db_session
from src.features.user.models import User, UserRole

from .credentials import SqlCredentialStore
from .exceptions import InsufficientPermissions, InvalidOrExpiredToken, UpstreamUnavailable
from .external_identity import ExternalIdentityVerifier, GoogleIdentityVerifier
from .guard import AccessGuard
from .jwt_utils import AccessClaims, TokenIssuer
from .policy import has_any_role, is_self_or_admin
from .service import AuthPolicy, AuthService

security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Process-wide token issuer built from the signing configuration."""
    return TokenIssuer(settings.token_config())


@lru_cache
def get_identity_verifier() -> ExternalIdentityVerifier:
    return GoogleIdentityVerifier(settings.google_client_id)


def get_auth_policy() -> AuthPolicy:
    return AuthPolicy(
        session_idle_seconds=settings.session_idle_timeout_seconds,
        refresh_token_ttl_seconds=settings.refresh_token_expire_days * 24 * 60 * 60,
        federated_refresh_token_ttl_seconds=settings.federated_refresh_token_expire_minutes * 60,
    )


async def get_auth_service(
    session: AsyncSession = Depends(get_db_session),
    store: SessionStore = Depends(get_session_store),
    issuer: TokenIssuer = Depends(get_token_issuer),
    identity_verifier: ExternalIdentityVerifier = Depends(get_identity_verifier),
) -> AuthService:
    return AuthService(SqlCredentialStore(session), store, issuer, identity_verifier, get_auth_policy())


async def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    issuer: TokenIssuer = Depends(get_token_issuer),
    store: SessionStore = Depends(get_session_store),
) -> AccessClaims:
    """Access guard: verify the bearer token and attach its claims to the request.

    Args:
        request: Incoming request; claims are stored on request.state.identity
        credentials: Bearer credentials, None if the header is missing or not Bearer

    Returns:
        Verified AccessClaims

    Raises:
        NoToken: No bearer token
        InvalidOrExpiredToken: Verification failed
        TokenRevoked: Token was revoked by logout

    """
    token = credentials.credentials if credentials else None
    claims = await AccessGuard(issuer, store).check(token)
    request.state.identity = claims
    return claims


async def get_current_user(
    claims: AccessClaims = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    """Load the user behind the verified access token.

    Raises:
        InvalidOrExpiredToken: If the account no longer exists

    """
    try:
        result = await session.execute(select(User).where(User.id == int(claims.sub)))
    except SQLAlchemyError as exc:
        raise UpstreamUnavailable() from exc
    user = result.scalar_one_or_none()

    if user is None:
        raise InvalidOrExpiredToken(detail="User not found")

    return user


def require_role(*required_roles: UserRole):
    """Dependency factory to require specific roles.

    Usage:
        # For single role
        Depends(require_role(UserRole.ADMIN))

        # For multiple roles (OR logic - identity needs ANY of these)
        Depends(require_role(UserRole.ADMIN, UserRole.USER))
    """

    async def role_checker(claims: AccessClaims = Depends(get_current_identity)) -> AccessClaims:
        if not has_any_role(claims, required_roles):
            raise InsufficientPermissions()
        return claims

    return role_checker


def require_self_or_admin(param: str = "user_id"):
    """Dependency factory allowing the resource owner or an admin.

    Usage:
        Depends(require_self_or_admin("user_id"))
    """

    async def owner_checker(request: Request, claims: AccessClaims = Depends(get_current_identity)) -> AccessClaims:
        if not is_self_or_admin(claims, request.path_params.get(param, "")):
            raise InsufficientPermissions(detail="Access denied: not your resource or admin")
        return claims

    return owner_checker
