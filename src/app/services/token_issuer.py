from datetime import UTC, datetime
from typing import List, Optional
from uuid import uuid4

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from src.app.services.auth_settings import AuthSettings
from src.domain.entities import Account

ACCESS = "access"
REFRESH = "refresh"


class InvalidTokenError(Exception):
    """Signature, expiry, type or claim shape check failed"""


class AccessClaims(BaseModel):
    """Snapshot of the account at issuance; not refreshed by role changes"""

    id: str
    username: str
    email: str
    roles: List[str] = []
    permissions: List[str] = []
    type: str
    jti: Optional[str] = None
    iat: Optional[int] = None
    exp: int

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_permission(self, permission: str) -> bool:
        return "*" in self.permissions or permission in self.permissions or self.has_role("Admin")


class RefreshClaims(BaseModel):
    id: str
    type: str
    jti: Optional[str] = None
    iat: Optional[int] = None
    exp: int


class TokenIssuer:
    """
    Mints and verifies signed JWTs.

    Access and refresh tokens use distinct secrets, so neither can be
    replayed as the other; the `type` claim is checked as well.
    """

    def __init__(self, settings: AuthSettings):
        self.settings = settings

    def issue_access_token(self, account: Account) -> str:
        now = datetime.now(UTC)
        payload = {
            "id": str(account.id),
            "username": account.username,
            "email": account.email,
            "roles": list(account.roles or []),
            "permissions": list(account.permissions or []),
            "type": ACCESS,
            "jti": uuid4().hex,
            "iat": now,
            "exp": now + self.settings.access_ttl,
        }
        return jwt.encode(payload, self.settings.access_secret, algorithm=self.settings.algorithm)

    def issue_refresh_token(self, account: Account) -> str:
        now = datetime.now(UTC)
        payload = {
            "id": str(account.id),
            "type": REFRESH,
            "jti": uuid4().hex,
            "iat": now,
            "exp": now + self.settings.refresh_ttl,
        }
        return jwt.encode(payload, self.settings.refresh_secret, algorithm=self.settings.algorithm)

    def verify(self, token: str, secret: str) -> dict:
        """
        Decode and check signature and expiry.

        Raises:
            InvalidTokenError: for any failure, without saying which
        """
        try:
            return jwt.decode(token, secret, algorithms=[self.settings.algorithm])
        except JWTError as exc:
            raise InvalidTokenError("Invalid or expired token") from exc

    def verify_access_token(self, token: str) -> AccessClaims:
        payload = self.verify(token, self.settings.access_secret)
        return self._claims(AccessClaims, payload, ACCESS)

    def verify_refresh_token(self, token: str) -> RefreshClaims:
        payload = self.verify(token, self.settings.refresh_secret)
        return self._claims(RefreshClaims, payload, REFRESH)

    @staticmethod
    def _claims(model, payload: dict, expected_type: str):
        if payload.get("type") != expected_type:
            raise InvalidTokenError("Invalid or expired token")
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise InvalidTokenError("Invalid or expired token") from exc
