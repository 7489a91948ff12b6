"""
Request Password Reset Use Case

Issues a single-use password reset token.
"""

import logging
from datetime import datetime
from typing import Callable

from libs.result import Result, Return
from src.app.services import opaque_tokens
from src.app.services.auth_settings import AuthSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditAction, AuditEvent
from .dtos import RequestPasswordResetResponse

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "If the email exists in our system, a password reset link has been sent."


class RequestPasswordResetUseCase:
    """
    Use case for requesting password reset.

    Business Rules:
    - Token is secrets.token_urlsafe(32); only its SHA-256 digest is stored
    - Token expires in 1 hour and replaces any earlier token
    - No email enumeration: the same message whether or not the email exists
    - The plain token is echoed only when debug tokens are exposed
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

    async def execute(self, email: str) -> Result[RequestPasswordResetResponse]:
        async with self.uow:
            account = await self.uow.accounts.get_by_email(email)

            if account is None:
                return Return.ok(RequestPasswordResetResponse(message=GENERIC_MESSAGE))

            reset_token, token_hash = opaque_tokens.generate()
            account.reset_token_hash = token_hash
            account.reset_expires_at = self.clock() + self.settings.reset_token_ttl
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    action=AuditAction.password_reset_requested,
                )
            )
            await self.uow.commit()

            # NOTE: delivery of the token (email) happens out-of-band
            logger.info("Password reset token issued for account %s", account.id)

            return Return.ok(
                RequestPasswordResetResponse(
                    message=GENERIC_MESSAGE,
                    reset_token=reset_token if self.settings.expose_debug_tokens else None,
                )
            )
