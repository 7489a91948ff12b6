"""
Account Entity

The authenticatable identity: credentials, roles and lifecycle status.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow
from .enums import AccountStatus

DEFAULT_ROLES = ["User"]

# Never serialized outside the service boundary
SENSITIVE_FIELDS = frozenset(
    {
        "password_hash",
        "password_history",
        "mfa_secret",
        "mfa_backup_codes",
        "reset_token_hash",
        "verification_token_hash",
    }
)


class Account(SQLModel, table=True):
    """
    Account entity - a person who can sign in.

    Business Rules:
    - Username and email are unique and stored lowercased
    - Password stored as bcrypt hash, compared only through the hasher
    - status=locked implies locked_until was in the future when applied
    - Reset and verification tokens are stored as SHA-256 digests and
      cleared once consumed
    - Never hard-deleted; deactivation is a status change
    """

    __tablename__ = "accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=50)
    email: str = Field(unique=True, index=True, max_length=255)

    # Credentials
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars
    password_history: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    password_expires_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    must_change_password: bool = Field(default=False)

    # Multi-factor authentication
    mfa_enabled: bool = Field(default=False)
    mfa_secret: Optional[str] = Field(default=None, max_length=128)
    mfa_backup_codes: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Profile
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    full_name: Optional[str] = Field(default=None, max_length=200)
    phone_number: Optional[str] = Field(default=None, max_length=50)
    job_title: Optional[str] = Field(default=None, max_length=100)
    department: Optional[str] = Field(default=None, max_length=100)

    # Authorization
    roles: List[str] = Field(default_factory=lambda: list(DEFAULT_ROLES), sa_column=Column(JSON))
    permissions: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    status: AccountStatus = Field(default=AccountStatus.active, index=True)

    # Email verification
    is_verified: bool = Field(default=False)
    verification_token_hash: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=64
    )
    verification_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Password reset
    reset_token_hash: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=64
    )
    reset_expires_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Lockout
    failed_login_attempts: int = Field(default=0)
    last_failed_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    locked_until: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Last successful login
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    last_login_ip: Optional[str] = Field(default=None, max_length=64)
    last_login_user_agent: Optional[str] = Field(default=None, max_length=512)

    # Advisory IP restrictions
    allowed_ips: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    blocked_ips: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime, onupdate=utcnow)
    )

    __table_args__ = (Index("idx_account_status_locked_until", "status", "locked_until"),)

    def ip_allowed(self, ip_address: Optional[str]) -> bool:
        if ip_address and ip_address in (self.blocked_ips or []):
            return False
        if self.allowed_ips:
            return ip_address in self.allowed_ips
        return True
