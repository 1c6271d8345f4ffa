"""
Result types for explicit, exception-free error handling.

Use cases return ``Result[T]``: either ``Return.ok(value)`` or
``Return.err(Error(code, message))``. The API layer decides how each error
code is surfaced.

Usage:
    result = await use_case.execute(...)
    if result.is_err():
        return present_error(result.error)
    return result.value
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Error:
    """Error payload carried by a failed Result"""

    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of an operation: a value or an Error, never both"""

    value: Optional[T] = None
    error: Optional[Error] = None

    def is_ok(self) -> bool:
        return self.error is None

    def is_err(self) -> bool:
        return self.error is not None


class Return:
    """Factory helpers for Result"""

    @staticmethod
    def ok(value: T) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result[Any]:
        return Result(error=error)
