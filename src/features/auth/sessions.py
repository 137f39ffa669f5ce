"""Refresh-session records and access-token revocation entries.

Key layout in the session store:

    sess:<refresh token>  -> JSON {"sub": ..., "role": ...}, TTL = idle window
    bl:<jti>              -> "1", TTL = seconds until the access token expires

The two key families are independent; no operation here spans more than one
key. Store faults surface as UpstreamUnavailable.
"""

import json
import logging
from dataclasses import dataclass

from src.cache.base import SessionStore, SessionStoreError

from .exceptions import UpstreamUnavailable

logger = logging.getLogger(__name__)

SESSION_PREFIX = "sess:"
REVOCATION_PREFIX = "bl:"


@dataclass(frozen=True)
class SessionRecord:
    """Identity stored against a live refresh token."""

    sub: str
    role: str


def session_key(refresh_token: str) -> str:
    return SESSION_PREFIX + refresh_token


def revocation_key(jti: str) -> str:
    return REVOCATION_PREFIX + jti


async def create_session(store: SessionStore, refresh_token: str, record: SessionRecord, ttl_seconds: int) -> None:
    """Create the session record for a newly issued refresh token."""
    try:
        await store.set(session_key(refresh_token), json.dumps({"sub": record.sub, "role": record.role}), ttl_seconds)
    except SessionStoreError as exc:
        logger.exception(f"Failed to create session record: {exc}")
        raise UpstreamUnavailable() from exc


async def verify_and_renew_session(store: SessionStore, refresh_token: str, ttl_seconds: int) -> SessionRecord | None:
    """Return the live session record and slide its expiry, or None if absent.

    A record that expires between the read and the renewal is treated as
    absent, so an expired session is never resurrected.
    """
    key = session_key(refresh_token)
    try:
        data = await store.get(key)
        if data is None:
            return None
        if not await store.renew_ttl(key, ttl_seconds):
            return None
    except SessionStoreError as exc:
        logger.exception(f"Failed to read session record: {exc}")
        raise UpstreamUnavailable() from exc

    payload = json.loads(data)
    return SessionRecord(sub=str(payload["sub"]), role=payload["role"])


async def destroy_session(store: SessionStore, refresh_token: str) -> None:
    """Delete a session record. Idempotent."""
    try:
        await store.delete(session_key(refresh_token))
    except SessionStoreError as exc:
        logger.exception(f"Failed to delete session record: {exc}")
        raise UpstreamUnavailable() from exc


async def revoke_access_token(store: SessionStore, jti: str, ttl_seconds: int) -> bool:
    """Blacklist a jti for the remaining lifetime of its token.

    Returns:
        True if an entry was written, False if the token had already expired

    """
    if ttl_seconds <= 0:
        return False
    try:
        await store.set(revocation_key(jti), "1", ttl_seconds)
    except SessionStoreError as exc:
        logger.exception(f"Failed to write revocation entry: {exc}")
        raise UpstreamUnavailable() from exc
    return True


async def is_access_token_revoked(store: SessionStore, jti: str) -> bool:
    """Check the revocation set for a jti."""
    try:
        return await store.exists(revocation_key(jti))
    except SessionStoreError as exc:
        logger.exception(f"Failed to check revocation entry: {exc}")
        raise UpstreamUnavailable() from exc
