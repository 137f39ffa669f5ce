"""Authorization predicates over verified access claims."""

from src.features.user.models import UserRole

from .jwt_utils import AccessClaims


def has_role(claims: AccessClaims, role: UserRole) -> bool:
    return claims.role == role.value


def has_any_role(claims: AccessClaims, roles: tuple[UserRole, ...]) -> bool:
    return any(has_role(claims, role) for role in roles)


def is_self(claims: AccessClaims, user_id: int | str) -> bool:
    """True if the identity is acting on its own resource."""
    return claims.sub == str(user_id)


def is_self_or_admin(claims: AccessClaims, user_id: int | str) -> bool:
    return is_self(claims, user_id) or has_role(claims, UserRole.ADMIN)
