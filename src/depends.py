from functools import lru_cache
from typing import Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from libs.result import Error
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.app.services.auth_settings import AuthSettings
from src.app.services.token_issuer import AccessClaims, InvalidTokenError, TokenIssuer

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@lru_cache
def get_auth_settings() -> AuthSettings:
    return AuthSettings.from_config(ApplicationConfig)


async def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: AuthSettings = Depends(get_auth_settings),
) -> AccessClaims:
    """
    Dependency to extract and verify the access token from the Authorization header.

    Returns:
        AccessClaims snapshot (id, username, email, roles, permissions)

    Raises:
        ClientError: 401 if the header is missing or the token is invalid or expired
    """
    if credentials is None:
        raise ClientError(
            Error("UNAUTHORIZED", "No authorization header provided"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    try:
        return TokenIssuer(settings).verify_access_token(credentials.credentials)
    except InvalidTokenError:
        raise ClientError(
            Error("INVALID_TOKEN", "Invalid or expired token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


def require_roles(*roles: str):
    """
    Build a dependency that admits callers holding any of the given roles.

    Raises:
        ClientError: 401 without a valid token, 403 when no role matches
    """

    async def _guard(claims: AccessClaims = Depends(get_current_claims)) -> AccessClaims:
        if not any(claims.has_role(role) for role in roles):
            raise ClientError(
                Error("ACCESS_DENIED", f"Access denied. Required role(s): {' or '.join(roles)}"),
                status_code=status.HTTP_403_FORBIDDEN,
            )
        return claims

    return _guard


def require_permissions(*permissions: str):
    """Like require_roles, but Admin and the "*" permission always pass"""

    async def _guard(claims: AccessClaims = Depends(get_current_claims)) -> AccessClaims:
        if not any(claims.has_permission(permission) for permission in permissions):
            raise ClientError(
                Error(
                    "ACCESS_DENIED",
                    f"Access denied. Required permission(s): {' or '.join(permissions)}",
                ),
                status_code=status.HTTP_403_FORBIDDEN,
            )
        return claims

    return _guard
