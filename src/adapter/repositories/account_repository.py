from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.account_repository import AccountConflictError, IAccountRepository
from src.domain.entities import Account, AccountStatus


class AccountRepository(IAccountRepository):
    """Account repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        stmt = select(Account).where(Account.id == account_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_username(self, username: str) -> Optional[Account]:
        """Get account by username (stored lowercased)"""
        stmt = select(Account).where(Account.username == username.lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by email address (stored lowercased)"""
        stmt = select(Account).where(Account.email == email.lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_reset_token_hash(self, token_hash: str) -> Optional[Account]:
        stmt = select(Account).where(Account.reset_token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_verification_token_hash(self, token_hash: str) -> Optional[Account]:
        stmt = select(Account).where(Account.verification_token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, account: Account) -> Account:
        """Create a new account"""
        account.username = account.username.lower()
        account.email = account.email.lower()
        self.session.add(account)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise AccountConflictError("Username or email already exists") from exc
        await self.session.refresh(account)
        return account

    async def update(self, account: Account) -> Account:
        """Update existing account"""
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def increment_failed_logins(self, account_id: UUID, now: datetime) -> int:
        """
        Single-statement increment so concurrent failures never lose a count.

        The row stays write-locked until commit, so the re-read sees our own
        increment plus any that committed before it.
        """
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(
                failed_login_attempts=Account.failed_login_attempts + 1,
                last_failed_login_at=now,
            )
        )
        await self.session.execute(stmt)
        await self.session.flush()

        count_stmt = select(Account.failed_login_attempts).where(Account.id == account_id)
        result = await self.session.exec(count_stmt)
        return result.one()

    async def lock(self, account_id: UUID, locked_until: datetime) -> bool:
        stmt = (
            update(Account)
            .where(Account.id == account_id, Account.status != AccountStatus.locked)
            .values(status=AccountStatus.locked, locked_until=locked_until)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0
