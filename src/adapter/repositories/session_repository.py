from datetime import datetime
from uuid import UUID

from sqlalchemy import update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def end(self, session_id: UUID, account_id: UUID, now: datetime) -> bool:
        """End a specific open session owned by the account"""
        stmt = (
            update(Session)
            .where(
                Session.id == session_id,
                Session.account_id == account_id,
                Session.ended_at.is_(None),
            )
            .values(ended_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def end_all_for_account(self, account_id: UUID, now: datetime) -> int:
        """End all open sessions for an account"""
        stmt = (
            update(Session)
            .where(Session.account_id == account_id, Session.ended_at.is_(None))
            .values(ended_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
