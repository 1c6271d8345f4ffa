from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from src.adapter.services.bcrypt_credential_hasher import BcryptCredentialHasher
from src.adapter.services.token_codec import UrlSafeTokenCodec
from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.app.repositories.user_repository import IUserRepository
from src.app.services.unit_of_work import UnitOfWork
from src.core.result import Return
from src.domain.entities import AuditEvent, User


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock()
    uow.users.get_by_reset_token = AsyncMock()
    uow.users.update = AsyncMock(side_effect=lambda user: user)
    uow.users.compare_and_update = AsyncMock()

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()
    return uow


class InMemoryUserRepository(IUserRepository):
    """Stores row snapshots so callers never share entity instances"""

    def __init__(self, rows: Dict[UUID, Dict[str, Any]]):
        self.rows = rows

    def _load(self, row: Optional[Dict[str, Any]]) -> Optional[User]:
        return User(**row) if row is not None else None

    async def get_by_email(self, email: str) -> Optional[User]:
        return self._load(next((r for r in self.rows.values() if r["email"] == email), None))

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        return self._load(self.rows.get(user_id))

    async def get_by_reset_token(self, token: str) -> Optional[User]:
        return self._load(
            next((r for r in self.rows.values() if r["reset_token"] == token), None)
        )

    async def create(self, user: User) -> User:
        self.rows[user.id] = user.model_dump()
        return self._load(self.rows[user.id])

    async def update(self, user: User) -> User:
        return await self.create(user)

    async def compare_and_update(
        self, user_id: UUID, expected_token: str, **values: Any
    ) -> Optional[User]:
        row = self.rows.get(user_id)
        if row is None or row["reset_token"] != expected_token:
            return None
        row.update(values)
        return self._load(row)


class InMemoryAuditEventRepository(IAuditEventRepository):
    def __init__(self, events: List[AuditEvent]):
        self.events = events

    async def create(self, event: AuditEvent) -> AuditEvent:
        self.events.append(event)
        return event

    async def list_by_user(self, user_id: UUID) -> List[AuditEvent]:
        return [e for e in self.events if e.user_id == user_id]


class InMemoryUnitOfWork(UnitOfWork):
    def __init__(self):
        self.rows: Dict[UUID, Dict[str, Any]] = {}
        self.events: List[AuditEvent] = []
        self.users = InMemoryUserRepository(self.rows)
        self.audit_events = InMemoryAuditEventRepository(self.events)
        self.commits = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        pass


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def memory_uow():
    return InMemoryUnitOfWork()


@pytest.fixture
def clock():
    return MutableClock(datetime(2024, 1, 1, 12, 0, 0))


@pytest.fixture
def codec():
    return UrlSafeTokenCodec()


@pytest.fixture
def hasher():
    # Minimum bcrypt cost keeps the suite fast
    return BcryptCredentialHasher(default_rounds=4)


@pytest.fixture
def notifier():
    notifier = MagicMock()
    notifier.send_reset_link = AsyncMock(return_value=Return.ok(None))
    return notifier


@pytest.fixture
def add_user(memory_uow, hasher):
    """Insert a user with password 'OldPass123!' into the in-memory store"""

    def _add_user(email: str = "a@x.com", **overrides) -> User:
        salt, hashed = hasher.hash("OldPass123!")
        fields = dict(
            email=email,
            name="Alice",
            password_salt=salt,
            password_hash=hashed,
            email_verified=True,
        )
        fields.update(overrides)
        user = User(**fields)
        memory_uow.rows[user.id] = user.model_dump()
        return user

    return _add_user
