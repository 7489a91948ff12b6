"""
Reset Password Use Case

Sets a new password using a reset token.
"""

from datetime import datetime
from typing import Callable

from libs.result import Error, Result, Return
from src.app.services import opaque_tokens
from src.app.services.auth_settings import AuthSettings
from src.app.services.password_hasher import PasswordHasher
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditAction, AuditEvent
from .dtos import MessageResponse, ResetPasswordCommand
from .password_policy import rotate_password, validate_new_password

INVALID_OR_EXPIRED_TOKEN = Error("INVALID_OR_EXPIRED_TOKEN", "Invalid or expired reset token")


class ResetPasswordUseCase:
    """
    Use case for confirming a password reset.

    Business Rules:
    - New password and confirmation must match and meet complexity rules
    - Token digest must match an account whose reset expiry is in the future
    - Unknown and expired tokens report the same error; an expired token
      is cleared on sight
    - Token is cleared on success, so it works exactly once
    - Clears the must-change-password flag and ends open sessions
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: AuthSettings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.settings = settings
        self.clock = clock
        self.hasher = PasswordHasher(settings.bcrypt_rounds)

    async def execute(self, command: ResetPasswordCommand) -> Result[MessageResponse]:
        """
        Errors:
            - VALIDATION_ERROR: mismatch or weak new password
            - INVALID_OR_EXPIRED_TOKEN: token unknown, consumed or expired
            - PASSWORD_REUSED: new password matches a recent one
        """
        validation = validate_new_password(command.new_password, command.confirm_password)
        if validation.is_err():
            return Return.err(validation.error)

        async with self.uow:
            account = await self.uow.accounts.get_by_reset_token_hash(
                opaque_tokens.digest(command.token)
            )
            if account is None:
                return Return.err(INVALID_OR_EXPIRED_TOKEN)

            now = self.clock()
            if account.reset_expires_at is None or account.reset_expires_at <= now:
                account.reset_token_hash = None
                account.reset_expires_at = None
                await self.uow.accounts.update(account)
                await self.uow.commit()
                return Return.err(INVALID_OR_EXPIRED_TOKEN)

            history = list(account.password_history or []) + [account.password_hash]
            if self.hasher.is_reused(
                command.new_password, history, self.settings.password_history_size + 1
            ):
                return Return.err(
                    Error("PASSWORD_REUSED", "New password must differ from recent passwords")
                )

            rotate_password(
                account,
                self.hasher.hash(command.new_password),
                self.settings.password_history_size,
                self.settings.password_max_age,
                now,
            )
            account.reset_token_hash = None
            account.reset_expires_at = None
            await self.uow.accounts.update(account)

            ended = await self.uow.sessions.end_all_for_account(account.id, now)

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    action=AuditAction.password_reset,
                    event_metadata={"sessions_ended": ended},
                )
            )
            await self.uow.commit()

            return Return.ok(MessageResponse(message="Password reset successfully"))
