"""
Use Cases

Organized into domain folders:
- password_reset/: Password recovery token lifecycle
"""

from .password_reset import (
    ResetTokenManager,
    ResponseRouter,
)

__all__ = [
    "ResetTokenManager",
    "ResponseRouter",
]
