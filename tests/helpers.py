"""Helpers shared by HTTP-level tests."""

from httpx import Response

REFRESH_COOKIE = "refreshToken"


def refresh_cookie_from(response: Response) -> str | None:
    """Extract the refresh token value from the response's Set-Cookie headers."""
    for header in response.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        if name.strip() == REFRESH_COOKIE:
            return rest.split(";", 1)[0].strip('"') or None
    return None


def set_cookie_header(response: Response) -> str:
    """The raw Set-Cookie header for the refresh cookie."""
    for header in response.headers.get_list("set-cookie"):
        if header.startswith(f"{REFRESH_COOKIE}="):
            return header
    raise AssertionError("refresh cookie not set")


def refresh_cookie_header(token: str) -> dict[str, str]:
    return {"Cookie": f"{REFRESH_COOKIE}={token}"}


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
