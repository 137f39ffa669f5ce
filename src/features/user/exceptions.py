"""User-related exceptions.

Rendered by FastAPI's default handler as ``{"detail": ...}``.
"""

from fastapi import HTTPException, status


class UserException(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "User operation failed"

    def __init__(self, detail: str | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.detail)


class UserNotFound(UserException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "User not found"


class UserAlreadyExists(UserException):
    """A unique account attribute is already taken."""

    status_code = status.HTTP_409_CONFLICT
    field = "user"

    def __init__(self):
        super().__init__(f"{self.field.capitalize()} already exists")


class UsernameAlreadyExists(UserAlreadyExists):
    field = "username"


class EmailAlreadyExists(UserAlreadyExists):
    field = "email"


class CannotDeleteOwnAccount(UserException):
    detail = "Cannot delete your own account"


class CannotModifyField(UserException):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, field: str):
        super().__init__(f"You do not have permission to modify '{field}' field")


class CannotChangeFederatedPassword(UserException):
    """Federated accounts authenticate through their provider and have no local password."""

    detail = "Password cannot be set on a federated account"
