"""User domain models."""

from datetime import datetime
from enum import StrEnum

from pwdlib import PasswordHash
from sqlalchemy import CheckConstraint, DateTime, Enum, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, TimestampMixin


class UserRole(StrEnum):
    """User roles for RBAC.

    USER: Customer account. Can read and edit its own profile.
    ADMIN: Site administrator. Can manage every account.
    """

    USER = "user"
    ADMIN = "admin"


class UserStatus(StrEnum):
    """User account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class OAuthProvider(StrEnum):
    """Where the account's credentials live."""

    LOCAL = "local"
    GOOGLE = "google"


pwd_hasher = PasswordHash.recommended()


class User(Base, TimestampMixin):
    """User model for authentication and authorization.

    A local account has a password hash and no provider id; a federated
    account has a provider id and no password hash. The check constraint
    keeps the two kinds from mixing.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("oauth_provider", "oauth_provider_id", name="uq_users_oauth_identity"),
        CheckConstraint(
            "(oauth_provider = 'local' AND hashed_password IS NOT NULL AND oauth_provider_id IS NULL)"
            " OR (oauth_provider <> 'local' AND oauth_provider_id IS NOT NULL)",
            name="credential_kind",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Identity (globally unique)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Authentication
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    oauth_provider: Mapped[str] = mapped_column(
        Enum(OAuthProvider, native_enum=False, length=30, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OAuthProvider.LOCAL.value,
        server_default=OAuthProvider.LOCAL.value,
    )
    oauth_provider_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Authorization
    role: Mapped[str] = mapped_column(
        Enum(UserRole, native_enum=False, length=30, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER.value,
        server_default=UserRole.USER.value,
    )

    # Status
    status: Mapped[str] = mapped_column(
        Enum(UserStatus, native_enum=False, length=50, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserStatus.ACTIVE.value,
        server_default=UserStatus.ACTIVE.value,
        index=True,
    )

    # Audit
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_active(self) -> bool:
        """Computed property: user is active if status is ACTIVE."""
        return self.status == UserStatus.ACTIVE.value

    @property
    def is_local(self) -> bool:
        return self.oauth_provider == OAuthProvider.LOCAL.value

    def verify_password(self, plain_password: str) -> bool:
        """Verify a password against the hash using Argon2.

        Federated accounts have no hash and never match.
        """
        if self.hashed_password is None:
            return False
        return pwd_hasher.verify(plain_password, self.hashed_password)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using Argon2.

        Salt is automatically generated and embedded in the returned hash.
        """
        return pwd_hasher.hash(password)

    def has_role(self, role: UserRole) -> bool:
        """Check if user has a specific role."""
        return self.role == role.value
