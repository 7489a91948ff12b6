from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def end(self, session_id: UUID, account_id: UUID, now: datetime) -> bool:
        """End an open session owned by the account. Returns True if one was ended."""
        pass

    @abstractmethod
    async def end_all_for_account(self, account_id: UUID, now: datetime) -> int:
        """End all open sessions for an account. Returns count ended."""
        pass
