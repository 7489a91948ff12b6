"""
Auth Settings

Explicit configuration handed to every auth use case.
"""

import re
from datetime import timedelta

from pydantic import BaseModel, Field, field_validator, model_validator

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value) -> timedelta:
    """
    Parse a duration such as "15m", "1h", "7d" or a number of seconds.

    Raises:
        ValueError: if the value is not a recognised duration
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    if isinstance(value, str):
        match = _DURATION_PATTERN.match(value)
        if match:
            amount, unit = match.groups()
            return timedelta(**{_DURATION_UNITS[unit]: int(amount)})
    raise ValueError(f"Invalid duration: {value!r}")


class AuthSettings(BaseModel):
    """
    Secrets, lifetimes and lockout policy for the auth subsystem.

    Built once from ApplicationConfig and injected into use cases, so tests
    can run with their own secrets and a cheap bcrypt cost.
    """

    access_secret: str = Field(..., min_length=1)
    refresh_secret: str = Field(..., min_length=1)
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(hours=1)
    refresh_ttl: timedelta = timedelta(days=7)

    lock_threshold: int = Field(default=5, ge=1)
    lock_duration: timedelta = timedelta(minutes=30)

    bcrypt_rounds: int = Field(default=10, ge=4, le=31)
    password_history_size: int = Field(default=5, ge=0)
    password_max_age: timedelta = timedelta(days=90)

    reset_token_ttl: timedelta = timedelta(hours=1)
    verification_token_ttl: timedelta = timedelta(hours=24)
    session_ttl: timedelta = timedelta(hours=24)

    # Echo reset/verification tokens in responses (never in production)
    expose_debug_tokens: bool = False
    ip_restrictions_enabled: bool = False

    @field_validator(
        "access_ttl",
        "refresh_ttl",
        "lock_duration",
        "password_max_age",
        "reset_token_ttl",
        "verification_token_ttl",
        "session_ttl",
        mode="before",
    )
    @classmethod
    def _parse_duration(cls, value):
        return parse_duration(value)

    @model_validator(mode="after")
    def _secrets_must_differ(self) -> "AuthSettings":
        if self.access_secret == self.refresh_secret:
            raise ValueError("access and refresh token secrets must differ")
        return self

    @classmethod
    def from_config(cls, config) -> "AuthSettings":
        return cls(
            access_secret=config.JWT_ACCESS_SECRET,
            refresh_secret=config.JWT_REFRESH_SECRET,
            access_ttl=config.ACCESS_TOKEN_TTL,
            refresh_ttl=config.REFRESH_TOKEN_TTL,
            lock_threshold=config.LOCKOUT_THRESHOLD,
            lock_duration=config.LOCKOUT_DURATION,
            bcrypt_rounds=config.BCRYPT_ROUNDS,
            password_history_size=config.PASSWORD_HISTORY_SIZE,
            expose_debug_tokens=config.ENVIRONMENT != "production",
            ip_restrictions_enabled=config.IP_RESTRICTIONS_ENABLED,
        )
