import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
import pytest

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# Test environment (applied before the application package is imported)
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("SERVER_HOST", "http://testserver")
os.environ.setdefault("CLIENT_HOST", "http://client.test")
os.environ.setdefault("CORS_ORIGINS", "*")

# Make the 'news_api' package importable without installing it
backend_path = Path(__file__).resolve().parents[1]
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from news_api.main import app
from news_api.database import Base, enable_sqlite_foreign_keys
from news_api.database import get_db as real_get_db
from news_api.mail import get_mailer
from news_api.storage import FileStore, get_file_store
from news_api.auth.service import TokenType, create_token
from news_api.users import service as user_service
from news_api.users.models import UserRole

PASSWORD = "Qwerty123"


class FakeMailer:
    def __init__(self):
        self.sent = []

    async def send(self, to: str, subject: str, html: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "html": html})
        return True

    def last_link_token(self, path: str) -> str:
        match = re.search(rf"{path}/([^\"<\s]+)", self.sent[-1]["html"])
        assert match, f"no {path} link in {self.sent[-1]['html']!r}"
        return match.group(1)


@dataclass
class Account:
    id: int
    username: str
    email: str
    token: str

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture()
async def test_engine():
    # In-memory SQLite shared by every connection of one test
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db(test_engine):
    async_session = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def file_store(tmp_path):
    return FileStore(tmp_path / "images")


@pytest.fixture(autouse=True)
async def override_dependencies(db, mailer, file_store):
    async def _get_db():
        yield db
    app.dependency_overrides[real_get_db] = _get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_file_store] = lambda: file_store
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_user(db):
    """Insert an activated account and hand back its id, email and session token."""
    async def _make_user(username: str, role: UserRole = UserRole.MEMBER, is_activated: bool = True) -> Account:
        user = await user_service.create_user(
            db,
            username=username,
            email=f"{username.lower()}@example.com",
            password=PASSWORD,
            role=role,
            is_activated=is_activated,
        )
        return Account(
            id=user.id,
            username=user.username,
            email=user.email,
            token=create_token(user, TokenType.ACCESS),
        )
    return _make_user


@pytest.fixture()
async def alice(make_user):
    return await make_user("Alice")


@pytest.fixture()
async def bob(make_user):
    return await make_user("Bob")


@pytest.fixture()
async def admin(make_user):
    return await make_user("Root", role=UserRole.ADMIN)


@pytest.fixture()
def create_news(client):
    async def _create_news(account: Account, title: str = "Hello world", body: str = "Some body text", files=None):
        response = await client.post(
            "/api/news/",
            data={"title": title, "body": body},
            files=files,
            headers=account.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _create_news
