"""Authentication service layer.

Refresh-token lifecycle:

    issued -> active (session record exists)
           -> renewed by refresh (TTL slides, token unchanged)
           -> destroyed by logout | expired by TTL

Destroyed and expired are terminal. Refresh tokens are not rotated and
concurrent refreshes with the same token both succeed; there is no reuse
detection.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from src.cache.base import SessionStore
from src.features.user.models import User, pwd_hasher

from .credentials import CredentialStore
from .exceptions import (
    InvalidCredentials,
    InvalidExternalToken,
    InvalidSignature,
    MalformedAccessToken,
    NoToken,
    SessionNotFound,
    UpstreamUnavailable,
)
from .external_identity import ExternalIdentityVerifier, ExternalVerificationError
from .jwt_utils import TokenIssuer, VerificationFailed
from .sessions import SessionRecord, create_session, destroy_session, revoke_access_token, verify_and_renew_session

logger = logging.getLogger(__name__)

# Verified against when the username is unknown so that response time does
# not reveal whether an account exists.
_DUMMY_HASH = pwd_hasher.hash("storefront-timing-equalizer")


@dataclass(frozen=True)
class AuthPolicy:
    """Lifetimes the authenticator applies when creating sessions."""

    session_idle_seconds: int = 24 * 60 * 60
    refresh_token_ttl_seconds: int = 7 * 24 * 60 * 60
    federated_refresh_token_ttl_seconds: int = 60 * 60


@dataclass(frozen=True)
class IssuedTokens:
    """Result of a successful login or refresh."""

    access_token: str
    expires_in: int
    jti: str
    refresh_token: str | None = None


@dataclass(frozen=True)
class LogoutOutcome:
    session_destroyed: bool = False
    access_token_revoked: bool = False


class AuthService:
    """Orchestrates login, federated login, refresh, and logout."""

    def __init__(
        self,
        credentials: CredentialStore,
        store: SessionStore,
        issuer: TokenIssuer,
        identity_verifier: ExternalIdentityVerifier,
        policy: AuthPolicy | None = None,
    ):
        self.credentials = credentials
        self.store = store
        self.issuer = issuer
        self.identity_verifier = identity_verifier
        self.policy = policy or AuthPolicy()

    async def _start_session(self, user: User, refresh_ttl_seconds: int) -> IssuedTokens:
        subject, role = str(user.id), str(user.role)
        access = self.issuer.issue_access_token(subject, role)
        refresh_token = self.issuer.issue_refresh_token(subject, role, ttl_seconds=refresh_ttl_seconds)

        await create_session(
            self.store,
            refresh_token,
            SessionRecord(sub=subject, role=role),
            self.policy.session_idle_seconds,
        )
        await self.credentials.record_login(user)

        return IssuedTokens(
            access_token=access.token,
            expires_in=access.expires_in,
            jti=access.jti,
            refresh_token=refresh_token,
        )

    async def authenticate_user(self, username: str, password: str) -> User | None:
        """Check local credentials with timing equalization.

        Returns:
            User object if authentication successful, None otherwise

        """
        user = await self.credentials.get_by_username(username)

        if user is None or not user.is_local or user.hashed_password is None:
            pwd_hasher.verify(password, _DUMMY_HASH)
            return None

        if not user.verify_password(password):
            return None

        if not user.is_active:
            logger.warning(f"Login attempt for inactive account: {username}")
            return None

        return user

    async def login(self, username: str, password: str) -> IssuedTokens:
        """Authenticate a local account and open a refresh session.

        Raises:
            InvalidCredentials: Unknown user, non-local account, inactive account, or wrong password

        """
        user = await self.authenticate_user(username, password)
        if user is None:
            raise InvalidCredentials()

        tokens = await self._start_session(user, self.policy.refresh_token_ttl_seconds)
        logger.info(f"User logged in: user_id={user.id} jti={tokens.jti}")
        return tokens

    async def federated_login(self, id_token: str) -> IssuedTokens:
        """Authenticate with an identity provider token, provisioning the account on first use.

        Raises:
            InvalidExternalToken: If the provider token fails verification

        """
        try:
            identity = await self.identity_verifier.verify(id_token)
        except ExternalVerificationError as err:
            logger.warning(f"Federated login rejected: {err}")
            raise InvalidExternalToken() from err

        user = await self.credentials.get_by_oauth_id(identity.provider, identity.provider_subject_id)
        if user is None:
            user = await self.credentials.create_from_oauth(identity)

        if not user.is_active:
            logger.warning(f"Federated login for inactive account: user_id={user.id}")
            raise InvalidExternalToken()

        tokens = await self._start_session(user, self.policy.federated_refresh_token_ttl_seconds)
        logger.info(f"User logged in via {identity.provider}: user_id={user.id} jti={tokens.jti}")
        return tokens

    async def refresh(self, refresh_token: str | None) -> IssuedTokens:
        """Mint a new access token from a refresh token.

        The token is accepted only if its signature and expiry verify AND a
        live session record exists for its exact value. Either check alone
        is insufficient.

        Raises:
            NoToken: No refresh token supplied
            InvalidSignature: Signature, type, or expiry check failed
            SessionNotFound: No live session record for this token

        """
        if not refresh_token:
            raise NoToken()

        try:
            self.issuer.verify_refresh_token(refresh_token)
        except VerificationFailed as err:
            raise InvalidSignature() from err

        record = await verify_and_renew_session(self.store, refresh_token, self.policy.session_idle_seconds)
        if record is None:
            raise SessionNotFound()

        access = self.issuer.issue_access_token(record.sub, record.role)
        logger.info(f"Access token refreshed: user_id={record.sub} jti={access.jti}")
        return IssuedTokens(access_token=access.token, expires_in=access.expires_in, jti=access.jti)

    async def logout(self, refresh_token: str | None, access_token: str | None) -> LogoutOutcome:
        """Destroy the refresh session and blacklist the access token.

        The two steps are independent and idempotent. Each is attempted even
        if the other fails; a store fault in either is re-raised afterwards
        so the client may retry. A crash between the steps leaves only
        artifacts that expire on their own.

        Raises:
            MalformedAccessToken: Access token present but undecodable
            UpstreamUnavailable: The session store failed during either step;
                takes precedence over MalformedAccessToken

        """
        session_destroyed = False
        access_token_revoked = False
        upstream_error: UpstreamUnavailable | None = None

        if refresh_token:
            try:
                await destroy_session(self.store, refresh_token)
                session_destroyed = True
                logger.info(f"Refresh session destroyed for token={refresh_token[:10]}...")
            except UpstreamUnavailable as exc:
                upstream_error = exc
        else:
            logger.info("Logout without refresh token cookie")

        if access_token:
            try:
                claims = self.issuer.verify_access_token(access_token, verify_exp=False)
            except VerificationFailed as err:
                logger.info(f"Logout could not decode access token: {err}")
                if upstream_error is not None:
                    raise upstream_error
                raise MalformedAccessToken() from err

            if claims.jti and claims.exp:
                ttl = claims.exp - int(datetime.now(UTC).timestamp())
                try:
                    access_token_revoked = await revoke_access_token(self.store, claims.jti, ttl)
                except UpstreamUnavailable as exc:
                    upstream_error = upstream_error or exc
                if access_token_revoked:
                    logger.info(f"Access token revoked: user_id={claims.sub} jti={claims.jti} ttl={ttl}")

        if upstream_error is not None:
            raise upstream_error

        return LogoutOutcome(session_destroyed=session_destroyed, access_token_revoked=access_token_revoked)
