"""Authentication schemas (DTOs)."""

from pydantic import BaseModel, ConfigDict, Field


# Request schemas
class UserLoginRequest(BaseModel):
    """Username/password login request.

    No strength validation here: a login attempt must fail with the same
    401 whatever the submitted password looks like.
    """

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=255)


class OAuthLoginRequest(BaseModel):
    """Federated login request carrying the provider's ID token."""

    model_config = ConfigDict(populate_by_name=True)

    id_token: str = Field(..., alias="idToken", min_length=1)


# Response schemas
class TokenResponse(BaseModel):
    """Access token response. The refresh token travels only in the cookie."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")
    expires_in: int = Field(..., alias="expiresIn")  # seconds
    jti: str
