"""
Refresh Token Use Case

Mints a new access token from a valid refresh token.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.auth_settings import AuthSettings
from src.app.services.token_issuer import InvalidTokenError, TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AccountStatus, AuditAction, AuditEvent
from .dtos import RefreshTokenResponse

INVALID_TOKEN = Error("INVALID_TOKEN", "Invalid refresh token")


class RefreshTokenUseCase:
    """
    Use case for refreshing JWT access tokens.

    Business Rules:
    - Refresh token must verify against the refresh secret
    - Account must still exist and be active
    - Every failure reports the same INVALID_TOKEN error
    - The refresh token is not rotated; the caller keeps the one it sent
    """

    def __init__(self, uow: UnitOfWork, settings: AuthSettings):
        self.uow = uow
        self.tokens = TokenIssuer(settings)

    async def execute(self, refresh_token: Optional[str]) -> Result[RefreshTokenResponse]:
        if not refresh_token:
            return Return.err(INVALID_TOKEN)

        try:
            claims = self.tokens.verify_refresh_token(refresh_token)
            account_id = UUID(claims.id)
        except (InvalidTokenError, ValueError):
            return Return.err(INVALID_TOKEN)

        async with self.uow:
            account = await self.uow.accounts.get_by_id(account_id)
            if account is None or account.status != AccountStatus.active:
                return Return.err(INVALID_TOKEN)

            await self.uow.audit_events.create(
                AuditEvent(account_id=account.id, action=AuditAction.token_refresh)
            )
            await self.uow.commit()

            return Return.ok(
                RefreshTokenResponse(
                    access_token=self.tokens.issue_access_token(account),
                    refresh_token=refresh_token,
                )
            )
