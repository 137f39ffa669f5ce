"""Federated identity verification.

The authenticator only depends on the ExternalIdentityVerifier protocol.
GoogleIdentityVerifier checks a Google-issued ID token against Google's
published signing keys, the configured audience, and the issuer.
"""

from dataclasses import dataclass
from typing import Protocol

import jwt
from fastapi.concurrency import run_in_threadpool
from jwt import PyJWKClient
from jwt.exceptions import InvalidTokenError, PyJWKClientError


GOOGLE_PROVIDER = "google"
GOOGLE_JWKS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class ExternalVerificationError(Exception):
    """Raised when an identity provider token cannot be trusted."""

    pass


@dataclass(frozen=True)
class ExternalIdentity:
    """Identity asserted by an external provider."""

    provider: str
    provider_subject_id: str
    email: str
    name: str | None = None


class ExternalIdentityVerifier(Protocol):
    async def verify(self, token: str) -> ExternalIdentity: ...


class GoogleIdentityVerifier:
    """Verify Google ID tokens (RS256) for a single OAuth client id."""

    def __init__(self, client_id: str | None, jwks_client: PyJWKClient | None = None):
        self.client_id = client_id
        self.jwks_client = jwks_client or PyJWKClient(GOOGLE_JWKS_URL, cache_keys=True)

    def _verify_sync(self, token: str) -> ExternalIdentity:
        if not self.client_id:
            raise ExternalVerificationError("Google login is not configured")

        try:
            signing_key = self.jwks_client.get_signing_key_from_jwt(token)
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self.client_id,
                options={"require": ["sub", "exp", "iss", "aud"]},
            )
        except (InvalidTokenError, PyJWKClientError) as err:
            raise ExternalVerificationError(str(err)) from err

        if payload.get("iss") not in GOOGLE_ISSUERS:
            raise ExternalVerificationError("Unexpected token issuer")
        email = payload.get("email")
        if not email or payload.get("email_verified") is False:
            raise ExternalVerificationError("Token does not carry a verified email")

        return ExternalIdentity(
            provider=GOOGLE_PROVIDER,
            provider_subject_id=str(payload["sub"]),
            email=email,
            name=payload.get("name"),
        )

    async def verify(self, token: str) -> ExternalIdentity:
        """Verify a token without blocking the event loop on the JWKS fetch."""
        return await run_in_threadpool(self._verify_sync, token)
