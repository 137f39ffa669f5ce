"""JWT utilities for authentication.

Access and refresh tokens are signed with separate secrets so that leaking
one secret does not allow forging the other token class. The secrets arrive
through an injected TokenConfig rather than module globals.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt
from jwt.exceptions import InvalidTokenError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class VerificationFailed(Exception):
    """Raised for any structural, signature, type, or expiry problem."""

    pass


@dataclass(frozen=True)
class TokenConfig:
    """Signing configuration, read once at startup."""

    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_token_ttl_seconds: int = 15 * 60
    refresh_token_ttl_seconds: int = 7 * 24 * 60 * 60


@dataclass(frozen=True)
class IssuedAccessToken:
    """A freshly signed access token and the metadata returned to clients."""

    token: str
    jti: str
    expires_in: int
    expires_at: datetime


@dataclass(frozen=True)
class AccessClaims:
    """Verified access-token claims attached to the request context."""

    sub: str
    role: str
    jti: str | None
    exp: int

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AccessClaims":
        return cls(sub=str(payload["sub"]), role=payload["role"], jti=payload.get("jti"), exp=int(payload["exp"]))


@dataclass(frozen=True)
class RefreshClaims:
    """Verified refresh-token claims."""

    sub: str
    role: str
    exp: int


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenIssuer:
    """Signs and verifies access and refresh tokens."""

    def __init__(self, config: TokenConfig, clock: Callable[[], datetime] = _utcnow):
        self.config = config
        self._clock = clock

    @property
    def access_token_ttl(self) -> int:
        return self.config.access_token_ttl_seconds

    def _encode(self, claims: dict[str, Any], secret: str, ttl_seconds: int) -> tuple[str, datetime]:
        issued_at = self._clock()
        expires_at = issued_at + timedelta(seconds=ttl_seconds)
        to_encode = {**claims, "iat": issued_at, "exp": expires_at}
        return jwt.encode(to_encode, secret, algorithm=self.config.algorithm), expires_at

    def _decode(self, token: str, secret: str, expected_type: str, verify_exp: bool = True) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                options={"verify_exp": verify_exp, "require": ["sub", "exp", "iat"]},
            )
        except InvalidTokenError as err:
            raise VerificationFailed(str(err)) from err

        if payload.get("type") != expected_type or "role" not in payload:
            raise VerificationFailed("Unexpected token type or missing claims")
        return payload

    def issue_access_token(self, subject: str, role: str) -> IssuedAccessToken:
        """Sign a 15-minute access token carrying a fresh random jti.

        Args:
            subject: User id, stored as the "sub" claim
            role: User role

        Returns:
            IssuedAccessToken with the encoded token, jti, and lifetime

        """
        jti = uuid4().hex
        ttl = self.config.access_token_ttl_seconds
        token, expires_at = self._encode(
            {"sub": str(subject), "role": role, "jti": jti, "type": ACCESS_TOKEN_TYPE},
            self.config.access_secret,
            ttl,
        )
        return IssuedAccessToken(token=token, jti=jti, expires_in=ttl, expires_at=expires_at)

    def issue_refresh_token(self, subject: str, role: str, ttl_seconds: int | None = None) -> str:
        """Sign a refresh token. It carries no jti; the session record is its identity."""
        ttl = ttl_seconds if ttl_seconds is not None else self.config.refresh_token_ttl_seconds
        token, _ = self._encode(
            {"sub": str(subject), "role": role, "type": REFRESH_TOKEN_TYPE},
            self.config.refresh_secret,
            ttl,
        )
        return token

    def verify_access_token(self, token: str, verify_exp: bool = True) -> AccessClaims:
        """Verify an access token.

        Args:
            token: Encoded JWT
            verify_exp: Pass False to accept expired but authentic tokens (logout)

        Raises:
            VerificationFailed: On any verification problem

        """
        return AccessClaims.from_payload(self._decode(token, self.config.access_secret, ACCESS_TOKEN_TYPE, verify_exp))

    def verify_refresh_token(self, token: str) -> RefreshClaims:
        """Verify a refresh token's signature, type, and expiry."""
        payload = self._decode(token, self.config.refresh_secret, REFRESH_TOKEN_TYPE)
        return RefreshClaims(sub=str(payload["sub"]), role=payload["role"], exp=int(payload["exp"]))
