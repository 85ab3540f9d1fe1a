"""Test fixtures — a fresh app and SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own app with create_app(settings), pointed at a
   SQLite file (aiosqlite) in pytest's tmp_path. Tables are created with
   Database.create_all(); the file vanishes with tmp_path.
2. httpx's ASGITransport does not run the lifespan, so Redis stays None
   and rate limiting is skipped unless a test installs a client itself.
3. Nothing is overridden: tests register real users through the API and
   send the real JWT they get back, so the auth, tenancy and role gates
   all run exactly as in production.
"""

import uuid
from dataclasses import dataclass

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from taskflow.config import Settings
from taskflow.main import create_app

DEFAULT_PASSWORD = "Password1"


@dataclass
class Account:
    """A registered user plus the bearer token the API issued for them."""

    id: str
    email: str
    name: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'taskflow.db'}",
        redis_url="",
        jwt_secret="test-secret-key",
        environment="development",
        log_level="warning",
    )


@pytest_asyncio.fixture()
async def app(settings):
    """App with its own database; tables created, pool disposed afterwards."""
    application = create_app(settings)
    await application.state.db.create_all()
    try:
        yield application
    finally:
        await application.state.db.dispose()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ─── Factories ──────────────────────────────────────────


@pytest.fixture()
def register_user(client):
    """Register a user through the API and return an Account."""

    async def _register(email=None, name="Test User", password=DEFAULT_PASSWORD):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/auth/register",
            json={"email": email, "name": name, "password": password},
        )
        assert r.status_code == 201, r.text
        data = r.json()["data"]
        return Account(
            id=data["user"]["id"], email=email, name=name, token=data["token"]
        )

    return _register


@pytest.fixture()
def create_org(client):
    """Create an organization owned by `account`; returns the response data."""

    async def _create(account, name="Acme Corp", slug=None):
        slug = slug or f"org-{uuid.uuid4().hex[:8]}"
        r = await client.post(
            "/api/organizations",
            json={"name": name, "slug": slug},
            headers=account.headers,
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]

    return _create


@pytest.fixture()
def add_member(client):
    """Have `inviter` add `account` to the organization with `role`."""

    async def _add(inviter, org_id, account, role="MEMBER"):
        r = await client.post(
            f"/api/organizations/{org_id}/members",
            json={"email": account.email, "role": role},
            headers=inviter.headers,
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]

    return _add


@pytest.fixture()
def create_project(client):
    async def _create(account, org_id, name="Website", **fields):
        r = await client.post(
            f"/api/organizations/{org_id}/projects",
            json={"name": name, **fields},
            headers=account.headers,
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]

    return _create


@pytest.fixture()
def create_task(client):
    async def _create(account, org_id, project_id, title="Fix bug", **fields):
        r = await client.post(
            f"/api/organizations/{org_id}/projects/{project_id}/tasks",
            json={"title": title, **fields},
            headers=account.headers,
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]

    return _create


@pytest_asyncio.fixture()
async def owner(register_user):
    return await register_user(name="Olivia Owner")


@pytest_asyncio.fixture()
async def org(owner, create_org):
    return await create_org(owner)
