"""Password validation functions."""

_RULES = (
    (str.isupper, "Password must contain at least one uppercase letter"),
    (str.islower, "Password must contain at least one lowercase letter"),
    (str.isdigit, "Password must contain at least one digit"),
)


def validate_password_strength(password: str) -> str:
    """Validate password strength requirements for new passwords.

    Requirements:
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - Not only whitespace at either end

    Length limits are enforced by the schema Field.

    Examples:
        >>> validate_password_strength("SecurePass123")
        'SecurePass123'
        >>> validate_password_strength("weakpass")
        Traceback (most recent call last):
        ...
        ValueError: Password must contain at least one uppercase letter

    """
    for predicate, message in _RULES:
        if not any(predicate(c) for c in password):
            raise ValueError(message)
    if password != password.strip():
        raise ValueError("Password must not start or end with whitespace")
    return password
