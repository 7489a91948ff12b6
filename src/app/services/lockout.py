"""
Account lockout state machine.

    active --(threshold failed logins)--> locked
    locked --(lock expired, next login attempt)--> active

Locked is always recoverable by time. The lock is checked before any
password verification so a locked account never reaches the hasher.
"""

from datetime import datetime, timedelta
from enum import Enum

from src.domain.entities import Account, AccountStatus


class LockState(str, Enum):
    open = "open"
    locked = "locked"
    lock_expired = "lock_expired"


class LockoutPolicy:
    def __init__(self, threshold: int, duration: timedelta):
        self.threshold = threshold
        self.duration = duration

    def evaluate(self, account: Account, now: datetime) -> LockState:
        if account.status != AccountStatus.locked:
            return LockState.open
        if account.locked_until is not None and account.locked_until > now:
            return LockState.locked
        return LockState.lock_expired

    def release(self, account: Account) -> None:
        """Expired lock: back to active as if never locked"""
        account.status = AccountStatus.active
        account.locked_until = None
        account.failed_login_attempts = 0

    def should_lock(self, failed_attempts: int) -> bool:
        return failed_attempts >= self.threshold

    def lock_expiry(self, now: datetime) -> datetime:
        return now + self.duration

    def record_success(self, account: Account) -> None:
        account.failed_login_attempts = 0
        account.last_failed_login_at = None
