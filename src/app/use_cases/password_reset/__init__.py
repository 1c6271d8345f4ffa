"""
Password Reset Use Cases

Reset token state machine and boundary response routing.
"""

from .dtos import LifecycleEvent, ResetOutcome, ResetPolicy
from .reset_token_manager import ResetTokenManager
from .response_router import (
    BoundaryResponse,
    ResponseRouter,
    ResponseStrategy,
    RestResponse,
    RestResponseStrategy,
    ViewResponse,
    ViewResponseStrategy,
    build_strategy,
)

__all__ = [
    # Use Cases
    "ResetTokenManager",
    "ResponseRouter",
    # Strategies
    "ResponseStrategy",
    "RestResponseStrategy",
    "ViewResponseStrategy",
    "build_strategy",
    # DTOs
    "ResetPolicy",
    "ResetOutcome",
    "LifecycleEvent",
    "RestResponse",
    "ViewResponse",
    "BoundaryResponse",
]
