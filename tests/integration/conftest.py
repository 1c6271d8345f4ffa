from datetime import datetime, timedelta
from typing import List, Optional, Tuple

import bcrypt
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from tests.fixtures.json_loader import TestDataLoader
from config import ApplicationConfig
from src.depends import get_clock, get_notifier, get_unit_of_work
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.notifier import INotifier
from src.core.result import Error, Result, Return
from src.domain.entities import User


class IntegrationConfig(ApplicationConfig):
    BCRYPT_ROUNDS = 4
    RESPONSE_MODE = "rest"
    REVEAL_ACCOUNT_EXISTENCE = False
    REQUIRE_EMAIL_VERIFIED = True
    RESET_TOKEN_TTL_SECONDS = 3600


class InteractiveConfig(IntegrationConfig):
    RESPONSE_MODE = "interactive"
    REVEAL_ACCOUNT_EXISTENCE = True


class RecordingNotifier(INotifier):
    def __init__(self):
        self.sent: List[Tuple[Optional[str], str, str]] = []
        self.fail = False

    async def send_reset_link(
        self, display_name: Optional[str], email: str, token: str
    ) -> Result[None]:
        if self.fail:
            return Return.err(Error("MAIL_DELIVERY_FAILED", "connection refused"))
        self.sent.append((display_name, email, token))
        return Return.ok(None)

    @property
    def last_token(self) -> str:
        return self.sent[-1][2]


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest_asyncio.fixture
def test_data():
    return TestDataLoader()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
def notifier():
    return RecordingNotifier()


@pytest_asyncio.fixture
def clock():
    return MutableClock(datetime(2024, 1, 1, 12, 0, 0))


@pytest_asyncio.fixture
def create_user(db_session, test_data):
    """Insert the named test-data account with password 'OldPass123!'"""

    async def _create_user(key: str = "verified_account", **overrides) -> User:
        fields = test_data.get_copy(key)
        fields.update(overrides)
        salt = bcrypt.gensalt(4)
        user = User(
            password_salt=salt.decode(),
            password_hash=bcrypt.hashpw(b"OldPass123!", salt).decode(),
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _create_user


def _build_app(config, db_session, notifier, clock):
    from src.api.app import create_app

    app = create_app(config)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_clock] = lambda: clock
    return app


def _client(app) -> AsyncClient:
    from httpx import ASGITransport

    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest_asyncio.fixture
async def client(db_session, notifier, clock):
    async with _client(_build_app(IntegrationConfig, db_session, notifier, clock)) as ac:
        yield ac


@pytest_asyncio.fixture
def interactive_app(db_session, notifier, clock):
    return _build_app(InteractiveConfig, db_session, notifier, clock)


@pytest_asyncio.fixture
async def interactive_client(interactive_app):
    async with _client(interactive_app) as ac:
        yield ac
