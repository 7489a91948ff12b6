"""
Resend Verification Email Use Case

Issues a fresh email verification token.
"""

from datetime import datetime
from typing import Callable

from libs.result import Result, Return
from src.app.services import opaque_tokens
from src.app.services.auth_settings import AuthSettings
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditAction, AuditEvent
from .dtos import ResendVerificationResponse

GENERIC_MESSAGE = "If the email exists and is unverified, a verification link has been sent."


class ResendVerificationUseCase:
    """
    Use case for resending email verification.

    Business Rules:
    - Unverified account: new token replaces the old one, expiry reset
    - Unknown or already verified email: nothing happens
    - Same message in every case (no enumeration)
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

    async def execute(self, email: str) -> Result[ResendVerificationResponse]:
        async with self.uow:
            account = await self.uow.accounts.get_by_email(email)

            if account is None or account.is_verified:
                return Return.ok(ResendVerificationResponse(message=GENERIC_MESSAGE))

            token, token_hash = opaque_tokens.generate()
            account.verification_token_hash = token_hash
            account.verification_expires_at = self.clock() + self.settings.verification_token_ttl
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(account_id=account.id, action=AuditAction.verification_resent)
            )
            await self.uow.commit()

            return Return.ok(
                ResendVerificationResponse(
                    message=GENERIC_MESSAGE,
                    verification_token=token if self.settings.expose_debug_tokens else None,
                )
            )
