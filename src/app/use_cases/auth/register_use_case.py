"""
Register Use Case

Creates an account and signs it in straight away.
"""

import logging
from datetime import datetime
from typing import Callable

from libs.result import Error, Result, Return
from src.app.repositories.account_repository import AccountConflictError
from src.app.services import opaque_tokens
from src.app.services.auth_settings import AuthSettings
from src.app.services.password_hasher import PasswordHasher
from src.app.services.token_issuer import TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import (
    Account,
    AccountStatus,
    AuditAction,
    AuditEvent,
    DEFAULT_ROLES,
)
from .dtos import AccountView, RegisterCommand, RegisterResponse
from .password_policy import validate_password

logger = logging.getLogger(__name__)


class RegisterUseCase:
    """
    Register Use Case

    Business Logic:
    1. Password must satisfy the complexity policy
    2. Username is checked for duplicates before email (both lowercased)
    3. Password hashed with bcrypt before the account is stored
    4. Account created active, unverified, with the default User role
    5. Email verification token issued (digest stored, 24h expiry)
    6. Access and refresh tokens issued immediately; login is not gated
       on email verification
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
        self.tokens = TokenIssuer(settings)

    async def execute(self, command: RegisterCommand) -> Result[RegisterResponse]:
        """
        Execute register use case

        Returns:
            Result[RegisterResponse] with sanitized account and tokens, or
            Error(VALIDATION_ERROR | DUPLICATE_USERNAME | DUPLICATE_EMAIL |
            DUPLICATE_ACCOUNT)
        """
        password_check = validate_password(command.password)
        if password_check.is_err():
            return Return.err(password_check.error)

        username = command.username.strip().lower()
        email = command.email.strip().lower()

        async with self.uow:
            if await self.uow.accounts.get_by_username(username):
                return Return.err(Error("DUPLICATE_USERNAME", "Username already exists"))

            if await self.uow.accounts.get_by_email(email):
                return Return.err(Error("DUPLICATE_EMAIL", "Email already exists"))

            now = self.clock()
            verification_token, verification_hash = opaque_tokens.generate()

            account = Account(
                username=username,
                email=email,
                password_hash=self.hasher.hash(command.password),
                password_expires_at=now + self.settings.password_max_age,
                first_name=command.first_name,
                last_name=command.last_name,
                full_name=_full_name(command.first_name, command.last_name),
                phone_number=command.phone_number,
                job_title=command.job_title,
                department=command.department,
                roles=list(DEFAULT_ROLES),
                status=AccountStatus.active,
                is_verified=False,
                verification_token_hash=verification_hash,
                verification_expires_at=now + self.settings.verification_token_ttl,
            )

            try:
                account = await self.uow.accounts.create(account)
            except AccountConflictError:
                # Lost a race with a concurrent registration
                return Return.err(
                    Error("DUPLICATE_ACCOUNT", "Username or email already exists")
                )

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    action=AuditAction.register,
                    event_metadata={"username": username},
                )
            )

            await self.uow.commit()

            logger.info("Account registered: %s", account.id)

            return Return.ok(
                RegisterResponse(
                    user=AccountView.from_account(account),
                    access_token=self.tokens.issue_access_token(account),
                    refresh_token=self.tokens.issue_refresh_token(account),
                    verification_token=(
                        verification_token if self.settings.expose_debug_tokens else None
                    ),
                )
            )


def _full_name(first_name, last_name):
    if first_name and last_name:
        return f"{first_name} {last_name}".strip()
    return first_name or last_name
