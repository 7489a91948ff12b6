"""
Verify Email Use Case

Handles email verification via single-use token.
"""

from datetime import datetime
from typing import Callable

from libs.result import Error, Result, Return
from src.app.services import opaque_tokens
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditAction, AuditEvent
from .dtos import MessageResponse


class VerifyEmailUseCase:
    """
    Use case for email verification.

    Business Rules:
    - Token digest must match an account's verification token
    - Token must not be expired
    - Sets is_verified and clears the token (single-use)
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(self, token: str) -> Result[MessageResponse]:
        """
        Errors:
            - INVALID_OR_EXPIRED_TOKEN: token unknown, consumed or expired
        """
        async with self.uow:
            account = await self.uow.accounts.get_by_verification_token_hash(
                opaque_tokens.digest(token)
            )

            if (
                account is None
                or account.verification_expires_at is None
                or account.verification_expires_at <= self.clock()
            ):
                return Return.err(
                    Error(
                        "INVALID_OR_EXPIRED_TOKEN",
                        "Invalid or expired verification token",
                    )
                )

            account.is_verified = True
            account.verification_token_hash = None
            account.verification_expires_at = None
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(account_id=account.id, action=AuditAction.email_verified)
            )
            await self.uow.commit()

            return Return.ok(MessageResponse(message="Email verified successfully"))
