"""User schemas (DTOs)."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.shared.validators.password import validate_password_strength

from .models import OAuthProvider, UserRole, UserStatus


# Request schemas
class UserRegisterRequest(BaseModel):
    """Self-service registration request. New accounts always get the USER role."""

    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9._-]+$")
    password: str = Field(..., min_length=8, max_length=255, description="Password must be at least 8 characters")
    email: EmailStr | None = None
    full_name: str | None = Field(None, min_length=1, max_length=200)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value):
        """Validate password strength using shared validator."""
        return validate_password_strength(value)


class UserUpdateRequest(BaseModel):
    """User update request. Only admins may change role."""

    username: str | None = Field(None, min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9._-]+$")
    full_name: str | None = Field(None, min_length=1, max_length=200)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8, max_length=255)
    role: UserRole | None = None

    @field_validator("password")
    @classmethod
    def password_strength(cls, value):
        """Validate password strength using shared validator."""
        if value is None:
            return value
        return validate_password_strength(value)


class ForgotPasswordRequest(BaseModel):
    """Password reset request (stub)."""

    username: str = Field(..., min_length=1, max_length=100)


# Response schemas
class UserResponse(BaseModel):
    """User response."""

    id: int
    username: str
    email: EmailStr | None = None
    full_name: str | None = None
    role: UserRole
    oauth_provider: OAuthProvider
    status: UserStatus
    created_at: datetime
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    """User list response."""

    users: list[UserResponse]
    total: int
    page: int
    page_size: int
