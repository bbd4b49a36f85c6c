import datetime as dt
import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from app.core import db as db_module
from app.core.errors import UpstreamError
from app.core.security import hash_password
from app.main import app
from app.models.team import Team
from app.models.user import Role, User
from app.services.notifier import Notifier, set_notifier


TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL

DEFAULT_PASSWORD = "UserPass!23"


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


class RecordingNotifier(Notifier):
    """Keeps every email instead of delivering it; can be told to fail."""

    def __init__(self):
        self.sent = []
        self.fail = False

    @property
    def name(self) -> str:
        return "Recording"

    async def send(self, message) -> None:
        if self.fail:
            raise UpstreamError(f"Failed to send {message.tag} to {message.to}: provider down")
        self.sent.append(message)

    def recipients(self) -> list[str]:
        return [m.to for m in self.sent]


@pytest.fixture(autouse=True)
def notifier():
    """
    Replace the email gateway for every test so nothing leaves the process.
    """
    recorder = RecordingNotifier()
    set_notifier(recorder)
    yield recorder
    set_notifier(None)


@pytest_asyncio.fixture
async def db():
    """
    Fresh database for service-level tests that do not need the HTTP client.
    """
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client():
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    await _init_test_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest.fixture
def create_user():
    """
    Factory fixture to create users directly via ORM.
    """

    async def _create_user(
        role: Role = Role.IC,
        email: str | None = None,
        name: str | None = None,
        password: str = DEFAULT_PASSWORD,
        team: Team | None = None,
        is_active: bool = True,
    ) -> User:
        return await User.create(
            email=email or f"{role.value}_{uuid.uuid4().hex[:6]}@example.com",
            name=name,
            password_hash=hash_password(password),
            role=role,
            team_id=team.id if team else None,
            is_active=is_active,
        )

    return _create_user


@pytest.fixture
def create_team_with(create_user):
    """
    Factory fixture for a team: a manager plus ICs already pointing at it.
    """

    async def _create(manager: User | None = None, ics: int = 1, name: str = "Platform"):
        manager = manager or await create_user(Role.MANAGER, name="Maggie Manager")
        team = await Team.create(name=name, manager=manager)
        members = []
        for i in range(ics):
            members.append(await create_user(Role.IC, name=f"IC {i}", team=team))
        return team, manager, members

    return _create


@pytest.fixture
def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(user: User, password: str = DEFAULT_PASSWORD) -> dict[str, str]:
        resp = await client.post(
            "/api/auth/login",
            json={"email": user.email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers


@pytest.fixture
def week():
    """A Monday-to-Sunday week."""
    start = dt.date(2024, 6, 3)
    return start, start + dt.timedelta(days=6)
