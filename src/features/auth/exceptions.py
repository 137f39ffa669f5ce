"""Authentication exceptions.

All of these are terminal from the caller's point of view: the only recovery
is to re-authenticate. Messages are deliberately coarse so that responses do
not reveal which individual check failed.
"""

from fastapi import HTTPException, status


class AuthenticationException(HTTPException):
    """Base authentication exception.

    Rendered as ``{body_key: detail}`` by the handler registered in main.
    """

    body_key = "message"

    def __init__(self, detail: str = "Authentication failed", status_code: int = status.HTTP_401_UNAUTHORIZED):
        super().__init__(
            status_code=status_code,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None,
        )


class InvalidCredentials(AuthenticationException):
    """Raised when username or password is incorrect, or the account cannot log in locally."""

    def __init__(self):
        super().__init__(detail="Invalid credentials")


class InvalidExternalToken(AuthenticationException):
    """Raised when the identity provider token fails verification."""

    body_key = "error"

    def __init__(self):
        super().__init__(detail="Invalid identity provider token")


class NoToken(AuthenticationException):
    """Raised when a required token (bearer header or refresh cookie) is missing."""

    def __init__(self):
        super().__init__(detail="No token provided")


class InvalidOrExpiredToken(AuthenticationException):
    """Raised when a token fails signature, type, or expiry verification."""

    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(detail=detail)


class InvalidSignature(InvalidOrExpiredToken):
    """Raised when a refresh token fails signature or expiry verification."""

    pass


class SessionNotFound(AuthenticationException):
    """Raised when a refresh token has no live session record."""

    def __init__(self):
        super().__init__(detail="Session not found")


class TokenRevoked(AuthenticationException):
    """Raised when an access token's jti is on the revocation list."""

    def __init__(self):
        super().__init__(detail="Token has been revoked")


class MalformedAccessToken(AuthenticationException):
    """Raised at logout when a bearer token is present but cannot be decoded."""

    def __init__(self):
        super().__init__(detail="Malformed access token", status_code=status.HTTP_400_BAD_REQUEST)


class InsufficientPermissions(AuthenticationException):
    """Raised when the identity lacks the required role or ownership."""

    def __init__(self, detail: str = "Access denied: insufficient permissions"):
        super().__init__(detail=detail, status_code=status.HTTP_403_FORBIDDEN)


class UpstreamUnavailable(AuthenticationException):
    """Raised when the credential store or session store fails unexpectedly."""

    def __init__(self):
        super().__init__(detail="Service temporarily unavailable", status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
