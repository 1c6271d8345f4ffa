"""
Response Router

Maps reset outcomes to a boundary representation and notifies lifecycle
observers. The representation is chosen once per deployment:

- REST: status code plus a structured payload, no view names
- Interactive: a named view plus its rendering context
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Union

from pydantic import BaseModel, Field

from src.app.repositories.errors import StoreError
from src.core.result import Result
from src.domain.entities import OutcomeKind, ResponseMode
from .dtos import LifecycleEvent, ResetOutcome

logger = logging.getLogger(__name__)

Observer = Callable[[LifecycleEvent], Awaitable[None]]


class RestResponse(BaseModel):
    """Machine-readable result; payload is None for 204 responses"""

    status_code: int
    payload: Optional[Dict[str, Any]] = None


class ViewResponse(BaseModel):
    """Instruction to render a named view"""

    view: str
    context: Dict[str, Any] = Field(default_factory=dict)
    status_code: int = 200


BoundaryResponse = Union[RestResponse, ViewResponse]


class ResponseStrategy(ABC):
    mode: ResponseMode

    @abstractmethod
    def present(self, outcome: ResetOutcome) -> BoundaryResponse:
        pass

    @abstractmethod
    def request_form(self, email: Optional[str] = None) -> Optional[BoundaryResponse]:
        """Initial 'forgot password' form, or None when the mode has none"""
        pass


_REST_STATUS = {
    OutcomeKind.INVALID_EMAIL: 403,
    OutcomeKind.ACCOUNT_NOT_FOUND: 403,
    OutcomeKind.ACCOUNT_INVALID: 403,
    OutcomeKind.EMAIL_UNVERIFIED: 403,
    OutcomeKind.NOTIFICATION_FAILED: 500,
    OutcomeKind.TOKEN_NOT_FOUND: 404,
    OutcomeKind.TOKEN_EXPIRED: 403,
    OutcomeKind.INVALID_CREDENTIAL: 403,
    OutcomeKind.STORE_UNAVAILABLE: 500,
}


class RestResponseStrategy(ResponseStrategy):
    mode = ResponseMode.rest

    def present(self, outcome: ResetOutcome) -> RestResponse:
        if outcome.kind.succeeded:
            return RestResponse(status_code=204)

        status_code = _REST_STATUS[outcome.kind]
        # Dependency failures stay generic
        message = "Internal server error" if status_code == 500 else outcome.message
        return RestResponse(
            status_code=status_code,
            payload={"error": message, "code": outcome.kind.value},
        )

    def request_form(self, email: Optional[str] = None) -> None:
        return None


DEFAULT_VIEWS = {
    "forgot_password": "get-forgot-password",
    "sent_email": "post-forgot-password",
    "resend_verification": "resend-verification",
    "new_password": "get-new-password",
    "link_expired": "link-expired",
    "changed_password": "change-password-success",
    "not_found": "not-found",
    "error": "error",
}


class ViewResponseStrategy(ResponseStrategy):
    mode = ResponseMode.interactive

    def __init__(self, views: Optional[Dict[str, str]] = None):
        self.views = {**DEFAULT_VIEWS, **(views or {})}

    def present(self, outcome: ResetOutcome) -> ViewResponse:
        kind = outcome.kind
        error = None if kind.succeeded else outcome.message

        if kind == OutcomeKind.RESET_REQUESTED:
            return self._view("sent_email", "Forgot password")

        if kind == OutcomeKind.NOTIFICATION_FAILED:
            return self._view("sent_email", "Forgot password", error=error)

        if kind in (
            OutcomeKind.INVALID_EMAIL,
            OutcomeKind.ACCOUNT_NOT_FOUND,
            OutcomeKind.ACCOUNT_INVALID,
        ):
            return self._view(
                "forgot_password", "Forgot password", 403, error=error, email=outcome.email
            )

        if kind == OutcomeKind.EMAIL_UNVERIFIED:
            return self._view(
                "resend_verification",
                "Resend verification email",
                403,
                error=error,
                email=outcome.email,
            )

        if kind == OutcomeKind.TOKEN_VALID:
            return self._view("new_password", "Choose a new password", token=outcome.token)

        if kind == OutcomeKind.INVALID_CREDENTIAL:
            return self._view(
                "new_password", "Choose a new password", 403, error=error, token=outcome.token
            )

        if kind == OutcomeKind.TOKEN_EXPIRED:
            return self._view("link_expired", "Forgot password - Link expired")

        if kind == OutcomeKind.CREDENTIAL_CHANGED:
            return self._view("changed_password", "Password changed")

        if kind == OutcomeKind.TOKEN_NOT_FOUND:
            return self._view("not_found", "Not found", 404, error=error)

        return self._view("error", "Error", 500, error="Internal server error")

    def request_form(self, email: Optional[str] = None) -> ViewResponse:
        return self._view("forgot_password", "Forgot password", email=email)

    def _view(self, key: str, title: str, status_code: int = 200, **context: Any) -> ViewResponse:
        context = {k: v for k, v in context.items() if v is not None}
        return ViewResponse(
            view=self.views[key],
            context={"title": title, **context},
            status_code=status_code,
        )


def build_strategy(mode: Union[str, ResponseMode], views: Optional[Dict[str, str]] = None) -> ResponseStrategy:
    """Select the response strategy for a deployment"""
    if ResponseMode(mode) == ResponseMode.interactive:
        return ViewResponseStrategy(views)
    return RestResponseStrategy()


class ResponseRouter:
    """
    Wraps every reset outcome for the boundary.

    Each dispatch notifies every observer exactly once with the true
    outcome; an observer whose store write fails is logged and skipped.
    Whether a missing account is concealed is decided by the
    caller and passed in; a concealed ACCOUNT_NOT_FOUND is presented
    exactly like RESET_REQUESTED.
    """

    def __init__(self, strategy: ResponseStrategy, observers: Iterable[Observer] = ()):
        self.strategy = strategy
        self.observers = list(observers)

    @property
    def mode(self) -> ResponseMode:
        return self.strategy.mode

    async def dispatch(
        self, result: Result[ResetOutcome], conceal_missing_account: bool = False
    ) -> BoundaryResponse:
        outcome = self._outcome_of(result)
        await self._notify(outcome)

        if conceal_missing_account and outcome.kind == OutcomeKind.ACCOUNT_NOT_FOUND:
            outcome = ResetOutcome(
                kind=OutcomeKind.RESET_REQUESTED,
                message="If the email exists, a password reset link has been sent",
                email=outcome.email,
            )

        return self.strategy.present(outcome)

    def request_form(self, email: Optional[str] = None) -> Optional[BoundaryResponse]:
        return self.strategy.request_form(email)

    @staticmethod
    def _outcome_of(result: Result[ResetOutcome]) -> ResetOutcome:
        if result.is_ok():
            return result.value
        return ResetOutcome(kind=OutcomeKind.STORE_UNAVAILABLE, message=result.error.message)

    async def _notify(self, outcome: ResetOutcome) -> None:
        event = LifecycleEvent(
            kind=outcome.kind,
            category=outcome.category,
            user_id=outcome.user_id,
            email=outcome.email,
            context={"message": outcome.message, "mode": self.mode.value},
        )
        # The outcome is already final; a failing observer must not replace it
        for observer in self.observers:
            try:
                await observer(event)
            except StoreError as exc:
                logger.error(f"Lifecycle observer failed for {event.kind.value}: {exc}")
