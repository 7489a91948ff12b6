"""
Login Use Case

Authenticates by username or email, enforces lockout and returns JWTs.
"""

import logging
from datetime import datetime
from typing import Callable

from libs.result import Error, Result, Return
from src.app.services.auth_settings import AuthSettings
from src.app.services.lockout import LockoutPolicy, LockState
from src.app.services.password_hasher import PasswordHasher
from src.app.services.token_issuer import TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AccountStatus, AuditAction, AuditEvent, Session
from .dtos import AccountView, LoginCommand, LoginResponse

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = Error("INVALID_CREDENTIALS", "Invalid credentials")
ACCOUNT_LOCKED = Error(
    "ACCOUNT_LOCKED",
    "Account is locked due to too many failed login attempts. Please try again later.",
)


class LoginUseCase:
    """
    Use case for login and JWT issuance.

    Business Rules:
    - Exactly one of username/email identifies the account
    - Unknown identifier and wrong password produce the same error, and
      both pay for one bcrypt verification
    - A live lock is rejected before the password is looked at
    - An expired lock is released and the attempt proceeds normally
    - Only active accounts may sign in
    - Failed attempts are counted atomically; reaching the threshold locks
    - Success resets the counter, records a session and issues tokens
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
        self.lockout = LockoutPolicy(settings.lock_threshold, settings.lock_duration)

    async def execute(self, command: LoginCommand) -> Result[LoginResponse]:
        """
        Execute login use case.

        Returns:
            Result with LoginResponse, or Error(VALIDATION_ERROR |
            INVALID_CREDENTIALS | ACCOUNT_LOCKED | ACCOUNT_NOT_ACTIVE |
            ACCESS_DENIED)
        """
        if bool(command.username) == bool(command.email):
            return Return.err(
                Error("VALIDATION_ERROR", "Please provide either username or email")
            )

        async with self.uow:
            if command.username:
                account = await self.uow.accounts.get_by_username(command.username)
            else:
                account = await self.uow.accounts.get_by_email(command.email)

            if account is None:
                self.hasher.verify_dummy(command.password)
                return Return.err(INVALID_CREDENTIALS)

            now = self.clock()

            lock_state = self.lockout.evaluate(account, now)
            if lock_state == LockState.locked:
                return Return.err(ACCOUNT_LOCKED)
            if lock_state == LockState.lock_expired:
                self.lockout.release(account)

            if account.status != AccountStatus.active:
                return Return.err(
                    Error(
                        "ACCOUNT_NOT_ACTIVE",
                        "Account is not active. Please contact administrator.",
                    )
                )

            if self.settings.ip_restrictions_enabled and not account.ip_allowed(
                command.ip_address
            ):
                return Return.err(
                    Error("ACCESS_DENIED", "Login is not permitted from this address")
                )

            if not self.hasher.verify(command.password, account.password_hash):
                return await self._record_failure(account, command, lock_state, now)

            self.lockout.record_success(account)
            account.last_login_at = now
            account.last_login_ip = command.ip_address
            account.last_login_user_agent = command.user_agent
            account = await self.uow.accounts.update(account)

            session = Session(
                account_id=account.id,
                ip_address=command.ip_address,
                user_agent=command.user_agent,
                created_at=now,
                expires_at=now + self.settings.session_ttl,
            )
            session = await self.uow.sessions.create(session)

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    action=AuditAction.login,
                    ip_address=command.ip_address,
                    user_agent=command.user_agent,
                    event_metadata={"session_id": str(session.id)},
                )
            )

            await self.uow.commit()

            return Return.ok(
                LoginResponse(
                    user=AccountView.from_account(account),
                    session_id=str(session.id),
                    access_token=self.tokens.issue_access_token(account),
                    refresh_token=self.tokens.issue_refresh_token(account),
                )
            )

    async def _record_failure(self, account, command, lock_state, now) -> Result:
        if lock_state == LockState.lock_expired:
            # Persist the release before counting from zero again
            await self.uow.accounts.update(account)

        attempts = await self.uow.accounts.increment_failed_logins(account.id, now)

        await self.uow.audit_events.create(
            AuditEvent(
                account_id=account.id,
                action=AuditAction.login_failed,
                ip_address=command.ip_address,
                user_agent=command.user_agent,
                event_metadata={"reason": "invalid_password", "attempts": attempts},
            )
        )

        locked = self.lockout.should_lock(attempts)
        locked_until = self.lockout.lock_expiry(now)
        # Concurrent failures may race past the threshold; only the first one locks
        if locked and await self.uow.accounts.lock(account.id, locked_until):
            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    action=AuditAction.account_locked,
                    ip_address=command.ip_address,
                    user_agent=command.user_agent,
                    event_metadata={
                        "attempts": attempts,
                        "locked_until": locked_until.isoformat(),
                    },
                )
            )
            logger.warning(
                "Account %s locked after %d failed logins", account.id, attempts
            )

        await self.uow.commit()

        return Return.err(ACCOUNT_LOCKED if locked else INVALID_CREDENTIALS)
