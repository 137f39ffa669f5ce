"""Access guard for protected requests."""

import logging

from src.cache.base import SessionStore

from .exceptions import InvalidOrExpiredToken, NoToken, TokenRevoked
from .jwt_utils import AccessClaims, TokenIssuer, VerificationFailed
from .sessions import is_access_token_revoked

logger = logging.getLogger(__name__)


class AccessGuard:
    """Verify a bearer access token before any handler logic runs.

    Checks run in order: presence, signature/expiry/type, revocation. Expired
    and tampered tokens produce the same error.
    """

    def __init__(self, issuer: TokenIssuer, store: SessionStore):
        self.issuer = issuer
        self.store = store

    async def check(self, token: str | None) -> AccessClaims:
        """Return verified claims for token.

        Raises:
            NoToken: token is missing
            InvalidOrExpiredToken: signature, type, or expiry check failed
            TokenRevoked: the token's jti is blacklisted

        """
        if not token:
            logger.debug("No bearer token provided")
            raise NoToken()

        try:
            claims = self.issuer.verify_access_token(token)
        except VerificationFailed as err:
            logger.info(f"Access token verification failed: {err}")
            raise InvalidOrExpiredToken() from err

        if claims.jti:
            if await is_access_token_revoked(self.store, claims.jti):
                logger.info(f"Rejected revoked access token jti={claims.jti}")
                raise TokenRevoked()
        else:
            logger.debug("Access token carries no jti")

        return claims
