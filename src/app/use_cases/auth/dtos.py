"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the auth domain.
Responses serialize with camelCase keys.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.domain.base import CamelModel


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    """Registration intent, already shape-validated by the API layer"""

    username: str
    email: str
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    job_title: Optional[str] = None
    department: Optional[str] = None


class LoginCommand(BaseModel):
    """Exactly one of username/email must be set"""

    username: Optional[str] = None
    email: Optional[str] = None
    password: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class ChangePasswordCommand(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


class ResetPasswordCommand(BaseModel):
    token: str
    new_password: str
    confirm_password: str


# ============================================================================
# Response DTOs
# ============================================================================


class AccountView(CamelModel):
    """
    Sanitized account - the only shape an account leaves the service in.

    Password hash and history, MFA secret and backup codes, reset and
    verification tokens have no field here.
    """

    id: str
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    job_title: Optional[str] = None
    department: Optional[str] = None
    roles: List[str] = []
    permissions: List[str] = []
    status: str
    is_verified: bool
    mfa_enabled: bool = False
    must_change_password: bool = False
    password_expires_at: Optional[datetime] = None
    failed_login_attempts: int = 0
    locked_until: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_account(cls, account) -> "AccountView":
        return cls(
            id=str(account.id),
            username=account.username,
            email=account.email,
            first_name=account.first_name,
            last_name=account.last_name,
            full_name=account.full_name,
            phone_number=account.phone_number,
            job_title=account.job_title,
            department=account.department,
            roles=list(account.roles or []),
            permissions=list(account.permissions or []),
            status=getattr(account.status, "value", account.status),
            is_verified=account.is_verified,
            mfa_enabled=account.mfa_enabled,
            must_change_password=account.must_change_password,
            password_expires_at=account.password_expires_at,
            failed_login_attempts=account.failed_login_attempts,
            locked_until=account.locked_until,
            last_login_at=account.last_login_at,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class RegisterResponse(CamelModel):
    """Response for registration use case"""

    user: AccountView
    access_token: str
    refresh_token: str
    # Only set when debug tokens are exposed
    verification_token: Optional[str] = None


class LoginResponse(CamelModel):
    """Response for login use case"""

    user: AccountView
    session_id: str
    access_token: str
    refresh_token: str


class RefreshTokenResponse(CamelModel):
    """Response for refresh token use case"""

    access_token: str
    refresh_token: str


class MessageResponse(CamelModel):
    """Response for use cases that only report an outcome"""

    message: str


class RequestPasswordResetResponse(CamelModel):
    """reset_token is only set when debug tokens are exposed"""

    message: str
    reset_token: Optional[str] = None


class ResendVerificationResponse(CamelModel):
    """verification_token is only set when debug tokens are exposed"""

    message: str
    verification_token: Optional[str] = None
