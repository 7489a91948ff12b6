"""
Change Password Use Case

Replaces the password of the signed-in account.
"""

from datetime import datetime
from typing import Callable
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.auth_settings import AuthSettings
from src.app.services.password_hasher import PasswordHasher
from src.app.services.token_issuer import AccessClaims
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditAction, AuditEvent
from .dtos import ChangePasswordCommand, MessageResponse
from .password_policy import rotate_password, validate_new_password


class ChangePasswordUseCase:
    """
    Use case for changing a password.

    Business Rules:
    - New password and confirmation must match and meet complexity rules
    - Current password must verify
    - New password may not repeat one of the recent passwords
    - Clears the must-change-password flag
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

    async def execute(
        self, claims: AccessClaims, command: ChangePasswordCommand
    ) -> Result[MessageResponse]:
        """
        Errors:
            - VALIDATION_ERROR: mismatch or weak new password
            - NOT_FOUND: account behind the token no longer exists
            - INVALID_CREDENTIALS: current password is wrong
            - PASSWORD_REUSED: new password matches a recent one
        """
        validation = validate_new_password(command.new_password, command.confirm_password)
        if validation.is_err():
            return Return.err(validation.error)

        async with self.uow:
            account = await self.uow.accounts.get_by_id(UUID(claims.id))
            if account is None:
                return Return.err(Error("NOT_FOUND", "User not found"))

            if not self.hasher.verify(command.current_password, account.password_hash):
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Current password is incorrect")
                )

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
                self.clock(),
            )
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(account_id=account.id, action=AuditAction.password_changed)
            )
            await self.uow.commit()

            return Return.ok(MessageResponse(message="Password changed successfully"))
