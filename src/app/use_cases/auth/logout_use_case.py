"""
Logout Use Case

Ends a login session. Idempotent.
"""

from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from libs.result import Result, Return
from src.app.services.token_issuer import AccessClaims
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditAction, AuditEvent
from .dtos import MessageResponse


class LogoutUseCase:
    """
    Use case for logout.

    Business Rules:
    - Caller is already authenticated by a valid access token
    - Only sessions owned by the caller are ended
    - Unknown, foreign or already-ended sessions are not an error
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(
        self, claims: AccessClaims, session_id: Optional[str]
    ) -> Result[MessageResponse]:
        response = MessageResponse(message="Logged out successfully")

        parsed_session_id = _parse_uuid(session_id)
        account_id = _parse_uuid(claims.id)
        if parsed_session_id is None or account_id is None:
            return Return.ok(response)

        async with self.uow:
            ended = await self.uow.sessions.end(parsed_session_id, account_id, self.clock())
            if ended:
                await self.uow.audit_events.create(
                    AuditEvent(
                        account_id=account_id,
                        action=AuditAction.logout,
                        event_metadata={"session_id": str(parsed_session_id)},
                    )
                )
                await self.uow.commit()

        return Return.ok(response)


def _parse_uuid(value: Optional[str]) -> Optional[UUID]:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        return None
