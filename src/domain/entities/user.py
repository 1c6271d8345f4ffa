"""
User Entity

Account record whose credential can be recovered through a reset token.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class User(SQLModel, table=True):
    """
    User entity - account record owned by the account system.

    Business Rules:
    - Email must be unique across all users
    - Password stored as bcrypt hash; the salt carries the cost factor
    - password_rounds is legacy cost metadata reused when rehashing
    - reset_token and reset_token_expires_at are both set or both empty
    - At most one pending reset token per user (a new one overwrites it)
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: Optional[str] = Field(default=None, max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)

    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars
    password_salt: str = Field(max_length=29)  # Bcrypt salt is 29 chars
    password_rounds: Optional[int] = Field(default=None)

    account_invalid: bool = Field(default=False)
    email_verified: bool = Field(default=False)

    # Password recovery
    reset_token: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=128
    )
    reset_token_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )

    # Timestamps
    created_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime)
    )

    __table_args__ = (
        Index("idx_user_email_verified", "email_verified"),
        CheckConstraint(
            "(reset_token IS NULL) = (reset_token_expires_at IS NULL)",
            name="ck_user_reset_token_pair",
        ),
    )

    def reset_token_expired(self, now: datetime) -> bool:
        """The expiry instant itself already counts as expired"""
        return self.reset_token_expires_at is not None and now >= self.reset_token_expires_at
