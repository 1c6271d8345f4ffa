from typing import Any, Optional
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.base import translate_store_errors
from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_store_errors
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        stmt = select(User).where(User.email == email)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    @translate_store_errors
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    @translate_store_errors
    async def get_by_reset_token(self, token: str) -> Optional[User]:
        """Get user holding the given pending reset token"""
        stmt = select(User).where(User.reset_token == token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    @translate_store_errors
    async def create(self, user: User) -> User:
        """Create a new user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    @translate_store_errors
    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    @translate_store_errors
    async def compare_and_update(
        self, user_id: UUID, expected_token: str, **values: Any
    ) -> Optional[User]:
        """Single-statement conditional update keyed on the stored token"""
        stmt = (
            update(User)
            .where(User.id == user_id, User.reset_token == expected_token)
            .values(**values)
            .execution_options(synchronize_session="evaluate")
        )
        result = await self.session.exec(stmt)
        if result.rowcount != 1:
            return None

        user = await self.session.get(User, user_id)
        await self.session.refresh(user)
        return user
