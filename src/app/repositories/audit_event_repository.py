from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.domain.entities import AuditEvent


class IAuditEventRepository(ABC):
    """AuditEvent repository interface - application layer"""

    @abstractmethod
    async def create(self, event: AuditEvent) -> AuditEvent:
        """Create a new audit event"""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: UUID) -> List[AuditEvent]:
        """List audit events for a user, oldest first"""
        pass
