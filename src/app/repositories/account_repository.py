from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import Account


class AccountConflictError(Exception):
    """Username or email unique constraint violated on insert"""


class IAccountRepository(ABC):
    """Account repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[Account]:
        """Get account by username (case-insensitive)"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by email address (case-insensitive)"""
        pass

    @abstractmethod
    async def get_by_reset_token_hash(self, token_hash: str) -> Optional[Account]:
        """Get account by password reset token digest"""
        pass

    @abstractmethod
    async def get_by_verification_token_hash(self, token_hash: str) -> Optional[Account]:
        """Get account by email verification token digest"""
        pass

    @abstractmethod
    async def create(self, account: Account) -> Account:
        """Create a new account. Raises AccountConflictError on duplicates."""
        pass

    @abstractmethod
    async def update(self, account: Account) -> Account:
        """Update existing account"""
        pass

    @abstractmethod
    async def increment_failed_logins(self, account_id: UUID, now: datetime) -> int:
        """Atomically add one failed attempt. Returns the new count."""
        pass

    @abstractmethod
    async def lock(self, account_id: UUID, locked_until: datetime) -> bool:
        """Set status=locked until the given time unless already locked. Returns True if applied."""
        pass
