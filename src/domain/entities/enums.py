"""
Auth Service Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class AccountStatus(str, Enum):
    """Account lifecycle status"""

    active = "active"
    inactive = "inactive"
    locked = "locked"
    suspended = "suspended"


class AuditAction(str, Enum):
    """Authentication events recorded in the audit log"""

    register = "register"
    login = "login"
    login_failed = "login_failed"
    account_locked = "account_locked"
    logout = "logout"
    token_refresh = "token_refresh"
    password_changed = "password_changed"
    password_reset_requested = "password_reset_requested"
    password_reset = "password_reset"
    email_verified = "email_verified"
    verification_resent = "verification_resent"
