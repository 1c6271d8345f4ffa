"""
Password Recovery Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    ErrorCategory,
    OutcomeKind,
    ResponseMode,
)

# Export all entities
from .user import User
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "ErrorCategory",
    "OutcomeKind",
    "ResponseMode",
    # Entities
    "User",
    "AuditEvent",
]
