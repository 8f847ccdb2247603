"""
Общие фикстуры для тестов API.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("CREATE_TABLES", "false")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_session

# Важно: импортируем все модели до create_all,
# чтобы SQLAlchemy могла разрешить relationships
from app.friends.models import Friend  # noqa: F401
from app.messages.models import Message  # noqa: F401
from app.posts.models import Post, Like, Comment  # noqa: F401
from app.users.models import User

from app.main import app
from app.messages.push import PushRegistry, get_push_registry


class FakeWebSocket:
    """Подписчик push-канала, запоминающий всё, что ему отправили."""

    def __init__(self, name: str = "ws", fail: bool = False):
        self.name = name
        self.fail = fail
        self.accepted = False
        self.closed = False
        self.sent: list[dict] = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError(f"{self.name} is gone")
        self.sent.append(data)

    async def close(self, code: int = 1000):
        self.closed = True


@pytest_asyncio.fixture
async def session_maker():
    """In-memory SQLite, одно соединение на все сессии теста."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def fake_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def push():
    return PushRegistry(fanout="parties")


@pytest_asyncio.fixture
async def client(session_maker, push):
    async def get_test_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = get_test_session
    app.dependency_overrides[get_push_registry] = lambda: push

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    def _auth(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}
    return _auth


@pytest.fixture
def fake_ws():
    return FakeWebSocket


@pytest.fixture
def make_user(client):
    """Регистрирует и логинит пользователя, возвращает (token, profile)."""

    async def _make_user(username: str, email: str | None = None, password: str = "pw123456"):
        email = email or f"{username}@example.com"
        resp = await client.post("/api/register", json={"username": username, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        resp = await client.post("/api/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        return data["token"], data["user"]

    return _make_user


@pytest_asyncio.fixture
async def bulk_users(fake_session):
    """Пользователи без регистрации через API (для поиска и т.п.)."""

    async def _bulk_users(*usernames: str) -> list[User]:
        users = [User(username=name, email=f"{name}@example.com", password="x") for name in usernames]
        fake_session.add_all(users)
        await fake_session.commit()
        for user in users:
            await fake_session.refresh(user)
        return users

    return _bulk_users
