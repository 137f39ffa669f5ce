"""Test configuration and fixtures.

Each test gets its own in-memory SQLite database and in-memory session store:
1. The schema is created per test on a StaticPool engine, so every connection
   sees the same database
2. Route handlers share the test's AsyncSession through a dependency override
3. The session store is an InMemorySessionStore, so sessions and revocations
   can be inspected directly
4. Federated login uses a fake identity verifier; no network access
"""

from collections.abc import AsyncGenerator
from pathlib import Path

from dotenv import load_dotenv

# Load test environment variables before any settings are read
test_env_path = Path(__file__).parent.parent / ".env.test"
load_dotenv(test_env_path, override=True)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.cache.dependencies import get_session_store  # noqa: E402
from src.cache.memory import InMemorySessionStore  # noqa: E402
from src.database.base import Base  # noqa: E402
from src.database.dependencies import get_db_session  # noqa: E402
from src.features.auth.dependencies import get_identity_verifier, get_token_issuer  # noqa: E402
from src.features.auth.external_identity import (  # noqa: E402
    GOOGLE_PROVIDER,
    ExternalIdentity,
    ExternalVerificationError,
)
from src.features.auth.jwt_utils import TokenIssuer  # noqa: E402
from src.features.user.models import OAuthProvider, User, UserRole, UserStatus  # noqa: E402
from src.main import app  # noqa: E402


class FakeIdentityVerifier:
    """Identity verifier that trusts a fixed table of tokens."""

    def __init__(self):
        self.identities: dict[str, ExternalIdentity] = {}

    def register(self, token: str, subject_id: str, email: str, name: str | None = None) -> ExternalIdentity:
        identity = ExternalIdentity(provider=GOOGLE_PROVIDER, provider_subject_id=subject_id, email=email, name=name)
        self.identities[token] = identity
        return identity

    async def verify(self, token: str) -> ExternalIdentity:
        try:
            return self.identities[token]
        except KeyError:
            raise ExternalVerificationError("Unknown token") from None


# Database Fixtures - Function Scope (fresh database per test)


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a database session per test."""
    async_session = AsyncSession(bind=db_engine, expire_on_commit=False)
    try:
        yield async_session
    finally:
        await async_session.close()


@pytest_asyncio.fixture
async def store() -> AsyncGenerator[InMemorySessionStore]:
    """Session store shared by the test and the app."""
    memory_store = InMemorySessionStore()
    yield memory_store
    await memory_store.close()


@pytest.fixture
def issuer() -> TokenIssuer:
    """The token issuer the app signs and verifies with."""
    return get_token_issuer()


@pytest.fixture
def identity_verifier() -> FakeIdentityVerifier:
    return FakeIdentityVerifier()


# FastAPI Client & Dependency Overrides


@pytest_asyncio.fixture(autouse=True)
async def override_dependencies(
    session: AsyncSession,
    store: InMemorySessionStore,
    identity_verifier: FakeIdentityVerifier,
):
    """Route handlers use the test's database session, session store, and verifier."""

    async def _get_test_session():
        yield session

    async def _get_test_store():
        return store

    app.dependency_overrides[get_db_session] = _get_test_session
    app.dependency_overrides[get_session_store] = _get_test_store
    app.dependency_overrides[get_identity_verifier] = lambda: identity_verifier
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP test client.

    The refresh cookie is Secure, so the client never replays it over
    http://test on its own; tests send it explicitly (see tests/helpers.py).
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Test User Factories


@pytest_asyncio.fixture
async def make_user(session: AsyncSession):
    """Factory fixture to create test users with custom fields.

    Usage:
        user = await make_user()                              # local USER
        admin = await make_user(role=UserRole.ADMIN)          # admin
        gone = await make_user(status=UserStatus.INACTIVE)    # inactive
        fed = await make_user(oauth_provider_id="g-123")      # federated (no password)
    """
    counter = 0

    async def _factory(
        username=None,
        email=None,
        full_name="Test User",
        password="TestPass123",
        role=UserRole.USER,
        status=UserStatus.ACTIVE,
        oauth_provider_id=None,
        **kwargs,
    ) -> User:
        nonlocal counter
        counter += 1

        if username is None:
            username = f"testuser{counter}"
        if email is None:
            email = f"testuser{counter}@example.com"

        if oauth_provider_id is None:
            provider = OAuthProvider.LOCAL.value
            hashed_password = User.hash_password(password)
        else:
            provider = OAuthProvider.GOOGLE.value
            hashed_password = None

        user = User(
            username=username,
            email=email,
            full_name=full_name,
            hashed_password=hashed_password,
            oauth_provider=provider,
            oauth_provider_id=oauth_provider_id,
            role=role.value,
            status=status.value,
            **kwargs,
        )

        session.add(user)
        await session.flush()
        await session.refresh(user)
        return user

    yield _factory


@pytest.fixture
def auth_headers(issuer: TokenIssuer):
    """Build a bearer Authorization header for a user without hitting /login."""

    def _headers(user: User) -> dict[str, str]:
        access = issuer.issue_access_token(str(user.id), str(user.role))
        return {"Authorization": f"Bearer {access.token}"}

    return _headers

