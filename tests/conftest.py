"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own app with create_app(test settings) pointing at
   sqlite+aiosqlite in memory (StaticPool → one shared connection), and
   creates the tables. Disposing the engine afterwards drops everything.
2. httpx.AsyncClient talks to the app in-process through ASGITransport.
   Lifespan does not run, so no startup DB check is involved.
3. Google verification is swapped for a fake through dependency_overrides;
   everything else (bcrypt, JWT, the auth gate) is the real pipeline.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pathix.auth.dependencies import get_identity_verifier
from pathix.auth.google import ExternalIdentity
from pathix.config import Settings
from pathix.db.models import Base
from pathix.errors import InvalidIdentityToken
from pathix.main import create_app


class FakeGoogleVerifier:
    """Accepts only credentials registered with `add`; `reject` fails one with a given error."""

    def __init__(self):
        self.identities: dict[str, ExternalIdentity] = {}
        self.errors: dict[str, Exception] = {}

    def add(self, credential: str, email: str, subject: str | None = None) -> str:
        self.identities[credential] = ExternalIdentity(
            email=email, subject=subject or uuid.uuid4().hex
        )
        return credential

    def reject(self, credential: str, error: Exception) -> str:
        self.errors[credential] = error
        return credential

    def verify(self, token: str) -> ExternalIdentity:
        if token in self.errors:
            raise self.errors[token]
        try:
            return self.identities[token]
        except KeyError:
            raise InvalidIdentityToken()


@pytest.fixture()
def settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        google_client_id="test-client.apps.googleusercontent.com",
        frontend_url="https://maps.example.com",
    )


@pytest.fixture()
def google():
    return FakeGoogleVerifier()


@pytest_asyncio.fixture()
async def app(settings, google):
    app = create_app(settings)
    async with app.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    app.dependency_overrides[get_identity_verifier] = lambda: google
    yield app
    app.dependency_overrides.clear()
    await app.state.engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def db_session(app):
    """A separate session on the same database, for direct inspection."""
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture()
def login(client):
    """Register (if needed) + sign in; returns Authorization headers."""

    async def _login(email: str | None = None, password: str = "secret123") -> dict:
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/auth/signup", json={"email": email, "password": password}
        )
        assert r.status_code in (201, 409), r.text
        r = await client.post(
            "/api/auth/signin", json={"email": email, "password": password}
        )
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}

    return _login


@pytest_asyncio.fixture()
async def theme(client):
    """A theme to reference from maps."""
    r = await client.post(
        "/api/themes",
        json={
            "name": "Night Trail",
            "assets": [{"name": "camp", "icon": "⛺"}],
            "fonts": ["Inter"],
            "roadStyle": {"color": "#ff00aa", "width": 4, "lineCap": "round"},
            "animations": {"glowingRoad": True},
        },
    )
    assert r.status_code == 201, r.text
    return r.json()
