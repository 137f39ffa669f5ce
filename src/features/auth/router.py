"""Authentication router (session and token lifecycle endpoints)."""

import logging

from fastapi import APIRouter, Cookie, Depends, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.database.dependencies import get_db_session

from .dependencies import get_auth_service, get_current_identity, security
from .exceptions import AuthenticationException, UpstreamUnavailable
from .schemas import OAuthLoginRequest, TokenResponse, UserLoginRequest
from .service import AuthService, IssuedTokens

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


def set_refresh_cookie(response: Response, refresh_token: str) -> None:
    """Write the refresh token as an HttpOnly, strict same-site cookie.

    max_age follows the session idle window; the server-side session record
    remains the authority on whether the token is still usable.
    """
    response.set_cookie(
        settings.refresh_cookie_name,
        value=refresh_token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        max_age=settings.session_idle_timeout_seconds,
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        settings.refresh_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


def _token_response(tokens: IssuedTokens) -> TokenResponse:
    return TokenResponse(access_token=tokens.access_token, expires_in=tokens.expires_in, jti=tokens.jti)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: UserLoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    session: AsyncSession = Depends(get_db_session),
):
    """Login with username and password.

    Returns the access token in the body and sets the refresh token cookie.
    """
    tokens = await auth.login(data.username, data.password)
    await session.commit()

    set_refresh_cookie(response, tokens.refresh_token or "")
    return _token_response(tokens)


@router.post("/oauth-login", response_model=TokenResponse)
async def oauth_login(
    data: OAuthLoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    session: AsyncSession = Depends(get_db_session),
):
    """Login with an identity provider ID token, creating the account on first use."""
    tokens = await auth.federated_login(data.id_token)
    await session.commit()

    set_refresh_cookie(response, tokens.refresh_token or "")
    return _token_response(tokens)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    refresh_token: str | None = Cookie(default=None, alias=settings.refresh_cookie_name),
    auth: AuthService = Depends(get_auth_service),
):
    """Mint a new access token from the refresh token cookie.

    The refresh token itself is not rotated. Any rejection is an empty 401.
    """
    try:
        tokens = await auth.refresh(refresh_token)
    except UpstreamUnavailable:
        raise
    except AuthenticationException as exc:
        logger.info(f"Refresh rejected: {exc.detail}")
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)
    return _token_response(tokens)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(get_current_identity)])
async def logout(
    refresh_token: str | None = Cookie(default=None, alias=settings.refresh_cookie_name),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    auth: AuthService = Depends(get_auth_service),
):
    """Destroy the refresh session, clear its cookie, and revoke the access token."""
    access_token = credentials.credentials if credentials else None
    await auth.logout(refresh_token, access_token)

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    if refresh_token:
        clear_refresh_cookie(response)
    return response
