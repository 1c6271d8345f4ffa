"""
Reset Token Manager

Password recovery state machine: issues reset tokens, checks expiry,
enforces single use and finalizes the credential change.

Per-user states are implicit in the token fields:
NoPendingReset -> PendingReset -> (Consumed | Expired), where both terminal
states are NoPendingReset again.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Tuple

from email_validator import EmailNotValidError, validate_email

from src.app.repositories.errors import StoreError
from src.app.services.credential_hasher import ICredentialHasher
from src.app.services.notifier import INotifier
from src.app.services.token_codec import ITokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.core.result import Error, Result, Return
from src.domain.base import utcnow
from src.domain.entities import OutcomeKind, User
from .dtos import ResetOutcome, ResetPolicy

logger = logging.getLogger(__name__)


class ResetTokenManager:
    """
    Manager for the password reset token lifecycle.

    Business Rules:
    - Token is generated by the token codec and stored on the user record
    - Token expires after the policy TTL; expiry is checked lazily
    - Issuing a new token overwrites (invalidates) any pending token
    - Malformed tokens are rejected without a store lookup
    - Expired tokens are cleared when presented
    - Token is cleared when consumed (single-use)
    - Clearing is a compare-and-swap on the stored token, so concurrent
      presentations of one token cannot both succeed
    - A failed notification never invalidates the persisted token
    """

    def __init__(
        self,
        uow: UnitOfWork,
        codec: ITokenCodec,
        hasher: ICredentialHasher,
        notifier: INotifier,
        policy: Optional[ResetPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.codec = codec
        self.hasher = hasher
        self.notifier = notifier
        self.policy = policy or ResetPolicy()
        self.clock = clock

    async def request_reset(self, email: str) -> Result[ResetOutcome]:
        """
        Issue a reset token for the account registered under email.

        Args:
            email: Email address submitted by the caller

        Returns:
            Result with the outcome, or Error when the store fails

        Outcomes:
            - RESET_REQUESTED: Token stored and notification sent
            - INVALID_EMAIL: Email missing or malformed
            - ACCOUNT_NOT_FOUND: No account for this email
            - ACCOUNT_INVALID: Account flagged invalid
            - EMAIL_UNVERIFIED: Email not verified and policy requires it
            - NOTIFICATION_FAILED: Token stored but delivery failed
        """
        if not self._email_is_valid(email):
            return Return.ok(
                ResetOutcome(kind=OutcomeKind.INVALID_EMAIL, message="Email is invalid", email=email)
            )

        try:
            async with self.uow:
                user = await self.uow.users.get_by_email(email)

                if user is None:
                    return Return.ok(
                        ResetOutcome(
                            kind=OutcomeKind.ACCOUNT_NOT_FOUND,
                            message="That account does not exist",
                            email=email,
                        )
                    )

                if user.account_invalid:
                    return Return.ok(
                        ResetOutcome.for_user(
                            OutcomeKind.ACCOUNT_INVALID,
                            "That account is invalid",
                            user,
                            email=email,
                        )
                    )

                if self.policy.require_email_verified and not user.email_verified:
                    return Return.ok(
                        ResetOutcome.for_user(
                            OutcomeKind.EMAIL_UNVERIFIED,
                            "This email has not been verified",
                            user,
                            email=email,
                        )
                    )

                # Token and expiry are written in one row update; any
                # previously pending token stops validating here
                token = self.codec.generate()
                user.reset_token = token
                user.reset_token_expires_at = self.clock() + self.policy.token_ttl
                user = await self.uow.users.update(user)

                await self.uow.commit()

                sent = ResetOutcome.for_user(
                    OutcomeKind.RESET_REQUESTED,
                    "A password reset link has been sent",
                    user,
                    token=token,
                )
        except StoreError as exc:
            return self._store_failure("request_reset", exc)

        delivery = await self.notifier.send_reset_link(sent.name, sent.email, token)
        if delivery.is_err():
            logger.warning(
                f"Reset link delivery failed for user {sent.user_id}: {delivery.error.code}"
            )
            return Return.ok(
                sent.model_copy(
                    update={
                        "kind": OutcomeKind.NOTIFICATION_FAILED,
                        "message": "Error connecting to the mail server. Please notify the administrator.",
                    }
                )
            )

        return Return.ok(sent)

    async def inspect_token(self, raw: str) -> Result[ResetOutcome]:
        """
        Check a presented token without consuming it.

        Outcomes:
            - TOKEN_VALID: Token pending and not expired
            - TOKEN_NOT_FOUND: Malformed, unknown or already cleared
            - TOKEN_EXPIRED: Token lapsed; it has now been cleared
        """
        try:
            async with self.uow:
                user, outcome = await self._find_pending(raw)
                if outcome is not None:
                    return Return.ok(outcome)

                return Return.ok(
                    ResetOutcome.for_user(
                        OutcomeKind.TOKEN_VALID, "Choose a new password", user, token=raw
                    )
                )
        except StoreError as exc:
            return self._store_failure("inspect_token", exc)

    async def consume_token(self, raw: str, new_password: str) -> Result[ResetOutcome]:
        """
        Consume a token and replace the user's password.

        Args:
            raw: Reset token from the link
            new_password: New plaintext password

        Outcomes:
            - CREDENTIAL_CHANGED: Password replaced, token cleared
            - TOKEN_NOT_FOUND: Malformed, unknown or already consumed
            - TOKEN_EXPIRED: Token lapsed; it has now been cleared
            - INVALID_CREDENTIAL: Password rejected; token stays pending
        """
        try:
            async with self.uow:
                user, outcome = await self._find_pending(raw)
                if outcome is not None:
                    return Return.ok(outcome)

                rejection = self._validate_password(new_password)
                if rejection is not None:
                    return Return.ok(
                        ResetOutcome.for_user(
                            OutcomeKind.INVALID_CREDENTIAL, rejection, user, token=raw
                        )
                    )

                # Legacy records keep their stored cost factor
                salt, hashed = self.hasher.hash(new_password, rounds=user.password_rounds)

                updated = await self._clear_token(
                    user, raw, password_salt=salt, password_hash=hashed
                )
                if updated is None:
                    return Return.ok(self._not_found())

                return Return.ok(
                    ResetOutcome.for_user(OutcomeKind.CREDENTIAL_CHANGED, "Password changed", updated)
                )
        except StoreError as exc:
            return self._store_failure("consume_token", exc)

    async def _find_pending(self, raw: str) -> Tuple[Optional[User], Optional[ResetOutcome]]:
        """
        Shared lookup for inspect and consume.

        Returns (user, None) for a pending, unexpired token, otherwise
        (None, outcome) with TOKEN_NOT_FOUND or TOKEN_EXPIRED.
        """
        # No store round trip for malformed input
        if not self.codec.is_well_formed(raw):
            return None, self._not_found()

        user = await self.uow.users.get_by_reset_token(raw)
        if user is None:
            return None, self._not_found()

        if user.reset_token_expired(self.clock()):
            expired = await self._clear_token(user, raw)
            if expired is None:
                return None, self._not_found()
            return None, ResetOutcome.for_user(OutcomeKind.TOKEN_EXPIRED, "link expired", expired)

        return user, None

    async def _clear_token(self, user: User, raw: str, **values: Any) -> Optional[User]:
        """
        Clear the token pair together with any extra field changes.

        Used both for expiry and for consumption. Returns None when another
        request cleared or replaced the token first.
        """
        updated = await self.uow.users.compare_and_update(
            user.id,
            raw,
            reset_token=None,
            reset_token_expires_at=None,
            **values,
        )
        if updated is None:
            await self.uow.rollback()
            return None

        await self.uow.commit()
        return updated

    def _validate_password(self, password: str) -> Optional[str]:
        """Return a rejection message, or None if the password is acceptable"""
        if not isinstance(password, str) or not password:
            return "Please enter a password"

        if len(password) < self.policy.min_password_length:
            return f"Password must be at least {self.policy.min_password_length} characters long"

        if len(password.encode()) > self.policy.max_password_bytes:
            return f"Password must be at most {self.policy.max_password_bytes} bytes long"

        return None

    @staticmethod
    def _email_is_valid(email: str) -> bool:
        if not isinstance(email, str) or not email:
            return False
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            return False
        return True

    @staticmethod
    def _not_found() -> ResetOutcome:
        return ResetOutcome(
            kind=OutcomeKind.TOKEN_NOT_FOUND,
            message="Invalid or expired password reset link",
        )

    @staticmethod
    def _store_failure(operation: str, exc: StoreError) -> Result[ResetOutcome]:
        logger.error(f"Store failure during {operation}: {exc}")
        return Return.err(
            Error(
                OutcomeKind.STORE_UNAVAILABLE.value,
                "The account store is unavailable",
                {"operation": operation},
            )
        )
