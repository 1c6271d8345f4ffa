"""
Password Reset Use Case DTOs (Data Transfer Objects)

Policy, outcome and lifecycle-event models shared by the reset token
manager and the response router.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.domain.base import utcnow
from src.domain.entities import ErrorCategory, OutcomeKind, User


# ============================================================================
# Policy
# ============================================================================


class ResetPolicy(BaseModel):
    """Deployment policy applied by the reset token manager"""

    token_ttl: timedelta = timedelta(hours=1)
    require_email_verified: bool = True
    min_password_length: int = 8
    max_password_bytes: int = 72  # bcrypt input limit


# ============================================================================
# Outcomes
# ============================================================================


class ResetOutcome(BaseModel):
    """
    Result of one step of the reset state machine.

    Holds plain values only; the user record it was built from is not
    usable once the unit of work has closed.
    """

    kind: OutcomeKind
    message: str
    user_id: Optional[UUID] = None
    name: Optional[str] = None
    email: Optional[str] = None
    token: Optional[str] = None

    @classmethod
    def for_user(cls, kind: OutcomeKind, message: str, user: User, **fields: Any) -> "ResetOutcome":
        """Copy the record's identity while its session is still open"""
        fields.setdefault("email", user.email)
        return cls(kind=kind, message=message, user_id=user.id, name=user.name, **fields)

    @property
    def category(self) -> Optional[ErrorCategory]:
        return self.kind.category


class LifecycleEvent(BaseModel):
    """Notification emitted once for every dispatched outcome"""

    kind: OutcomeKind
    category: Optional[ErrorCategory] = None
    user_id: Optional[UUID] = None
    email: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=utcnow)
