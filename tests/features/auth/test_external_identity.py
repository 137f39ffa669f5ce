"""Tests for Google ID token verification."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.exceptions import PyJWKClientError

from src.features.auth.external_identity import (
    GOOGLE_PROVIDER,
    ExternalVerificationError,
    GoogleIdentityVerifier,
)

CLIENT_ID = "storefront-web.apps.googleusercontent.com"


@pytest.fixture(scope="module")
def signing_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


class StaticJWKClient:
    """Stands in for PyJWKClient with a single known key."""

    def __init__(self, public_key, fail: bool = False):
        self.public_key = public_key
        self.fail = fail

    def get_signing_key_from_jwt(self, token):
        if self.fail:
            raise PyJWKClientError("Unable to find a signing key that matches")
        return SimpleNamespace(key=self.public_key)


@pytest.fixture
def verifier(signing_key) -> GoogleIdentityVerifier:
    return GoogleIdentityVerifier(CLIENT_ID, jwks_client=StaticJWKClient(signing_key.public_key()))


def google_token(signing_key, **overrides) -> str:
    now = datetime.now(UTC)
    claims = {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "110169484474386276334",
        "email": "shopper@gmail.com",
        "email_verified": True,
        "name": "Shop Per",
        "iat": now,
        "exp": now + timedelta(hours=1),
    }
    claims.update(overrides)
    return jwt.encode({k: v for k, v in claims.items() if v is not None}, signing_key, algorithm="RS256")


async def test_valid_token(verifier, signing_key):
    identity = await verifier.verify(google_token(signing_key))

    assert identity.provider == GOOGLE_PROVIDER
    assert identity.provider_subject_id == "110169484474386276334"
    assert identity.email == "shopper@gmail.com"
    assert identity.name == "Shop Per"


async def test_bare_issuer_accepted(verifier, signing_key):
    identity = await verifier.verify(google_token(signing_key, iss="accounts.google.com"))
    assert identity.email == "shopper@gmail.com"


@pytest.mark.parametrize(
    "overrides",
    [
        {"aud": "someone-else.apps.googleusercontent.com"},
        {"iss": "https://evil.example.com"},
        {"email_verified": False},
        {"email": None},
        {"exp": datetime.now(UTC) - timedelta(minutes=5), "iat": datetime.now(UTC) - timedelta(hours=1)},
    ],
    ids=["audience", "issuer", "unverified-email", "no-email", "expired"],
)
async def test_rejected_claims(verifier, signing_key, overrides):
    with pytest.raises(ExternalVerificationError):
        await verifier.verify(google_token(signing_key, **overrides))


async def test_wrong_signing_key(verifier):
    impostor = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    with pytest.raises(ExternalVerificationError):
        await verifier.verify(google_token(impostor))


async def test_unknown_key_id(signing_key):
    verifier = GoogleIdentityVerifier(CLIENT_ID, jwks_client=StaticJWKClient(signing_key.public_key(), fail=True))
    with pytest.raises(ExternalVerificationError):
        await verifier.verify(google_token(signing_key))


async def test_not_configured(signing_key):
    verifier = GoogleIdentityVerifier(None, jwks_client=StaticJWKClient(signing_key.public_key()))
    with pytest.raises(ExternalVerificationError, match="not configured"):
        await verifier.verify(google_token(signing_key))


async def test_garbage_token(verifier):
    with pytest.raises(ExternalVerificationError):
        await verifier.verify("not-a-token")
