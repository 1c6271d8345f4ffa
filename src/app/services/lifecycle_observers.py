"""
Lifecycle observers for password recovery outcomes.

Observers are async callables receiving one LifecycleEvent per dispatched
outcome; the response router calls them in registration order.
"""

import logging

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.password_reset.dtos import LifecycleEvent
from src.domain.entities import AuditEvent

logger = logging.getLogger(__name__)


class LoggingObserver:
    """Logs every lifecycle event"""

    def __init__(self, log: logging.Logger = logger):
        self.log = log

    async def __call__(self, event: LifecycleEvent) -> None:
        if event.category is None:
            self.log.info(f"Password reset {event.kind.value}: user={event.user_id}")
        else:
            self.log.warning(
                f"Password reset {event.kind.value} ({event.category.value}): user={event.user_id}"
            )


class AuditTrailObserver:
    """Persists every lifecycle event as an AuditEvent"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def __call__(self, event: LifecycleEvent) -> None:
        async with self.uow:
            audit_event = AuditEvent(
                user_id=event.user_id,
                action=f"password_reset.{event.kind.value.lower()}",
                event_metadata={
                    "category": event.category.value if event.category else None,
                    "email": event.email,
                    **event.context,
                },
                created_at=event.occurred_at,
            )
            await self.uow.audit_events.create(audit_event)
            await self.uow.commit()
