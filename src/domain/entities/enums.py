"""
Password Recovery Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """Failure taxonomy for reset outcomes"""

    validation = "validation"
    not_found = "not_found"
    expired = "expired"
    policy_blocked = "policy_blocked"
    dependency = "dependency"


class OutcomeKind(str, Enum):
    """Every result the reset state machine can produce"""

    RESET_REQUESTED = "RESET_REQUESTED"
    INVALID_EMAIL = "INVALID_EMAIL"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    ACCOUNT_INVALID = "ACCOUNT_INVALID"
    EMAIL_UNVERIFIED = "EMAIL_UNVERIFIED"
    NOTIFICATION_FAILED = "NOTIFICATION_FAILED"
    TOKEN_VALID = "TOKEN_VALID"
    TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    CREDENTIAL_CHANGED = "CREDENTIAL_CHANGED"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"

    @property
    def category(self) -> Optional[ErrorCategory]:
        """Error category, or None for successful outcomes"""
        return _CATEGORIES.get(self)

    @property
    def succeeded(self) -> bool:
        return self.category is None


_CATEGORIES = {
    OutcomeKind.INVALID_EMAIL: ErrorCategory.validation,
    OutcomeKind.INVALID_CREDENTIAL: ErrorCategory.validation,
    OutcomeKind.ACCOUNT_NOT_FOUND: ErrorCategory.not_found,
    OutcomeKind.TOKEN_NOT_FOUND: ErrorCategory.not_found,
    OutcomeKind.TOKEN_EXPIRED: ErrorCategory.expired,
    OutcomeKind.ACCOUNT_INVALID: ErrorCategory.policy_blocked,
    OutcomeKind.EMAIL_UNVERIFIED: ErrorCategory.policy_blocked,
    OutcomeKind.NOTIFICATION_FAILED: ErrorCategory.dependency,
    OutcomeKind.STORE_UNAVAILABLE: ErrorCategory.dependency,
}


class ResponseMode(str, Enum):
    """Boundary representation selected per deployment"""

    rest = "rest"
    interactive = "interactive"
