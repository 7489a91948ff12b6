from typing import Generic, Optional, TypeVar

from fastapi import APIRouter, Depends, Request, status
from pydantic import EmailStr, Field, field_validator

from src.api.error import raise_for_error
from src.app.services.auth_settings import AuthSettings
from src.app.services.token_issuer import AccessClaims
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    AccountView,
    ChangePasswordCommand,
    ChangePasswordUseCase,
    GetCurrentAccountUseCase,
    LoginCommand,
    LoginResponse,
    LoginUseCase,
    LogoutUseCase,
    RefreshTokenResponse,
    RefreshTokenUseCase,
    RegisterCommand,
    RegisterResponse,
    RegisterUseCase,
    RequestPasswordResetUseCase,
    ResendVerificationUseCase,
    ResetPasswordCommand,
    ResetPasswordUseCase,
    VerifyEmailUseCase,
)
from src.depends import get_auth_settings, get_current_claims, get_unit_of_work
from src.domain.base import CamelModel

router = APIRouter(prefix="/auth", tags=["Authentication"])

T = TypeVar("T")


# ============================================================================
# Response envelopes
# ============================================================================


class MessageEnvelope(CamelModel):
    success: bool = True
    message: str


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str
    data: T


class DataEnvelope(CamelModel, Generic[T]):
    success: bool = True
    data: T


class ForgotPasswordEnvelope(MessageEnvelope):
    reset_token: Optional[str] = None


class ResendVerificationEnvelope(MessageEnvelope):
    verification_token: Optional[str] = None


# ============================================================================
# Request payloads (camelCase on the wire)
# ============================================================================


class RegisterRequest(CamelModel):
    """
    Register HTTP request payload

    Shape checks only; the password complexity policy runs in the use case.
    """

    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=30)
    job_title: Optional[str] = Field(None, max_length=100)
    department: Optional[str] = Field(None, max_length=100)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value):
        return value.strip() if isinstance(value, str) else value


class LoginRequest(CamelModel):
    """Exactly one of username/email, checked by the use case"""

    username: Optional[str] = None
    email: Optional[EmailStr] = None
    password: str


class LogoutRequest(CamelModel):
    session_id: Optional[str] = None


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str
    confirm_password: str


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str
    new_password: str
    confirm_password: str


class ResendVerificationRequest(CamelModel):
    email: EmailStr


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[RegisterResponse],
)
async def register(
    payload: RegisterRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: AuthSettings = Depends(get_auth_settings),
):
    """
    Register a new account and sign it in.

    Raises:
        - 400 Bad Request: weak password, duplicate username or email
    """
    command = RegisterCommand(**payload.model_dump())

    result = await RegisterUseCase(uow, settings).execute(command)
    if result.is_err():
        raise_for_error(result.error)

    return ApiResponse[RegisterResponse](
        message="User registered successfully", data=result.value
    )


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    payload: LoginRequest,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: AuthSettings = Depends(get_auth_settings),
):
    """
    Authenticate by username or email.

    Raises:
        - 400 Bad Request: neither or both identifiers given
        - 401 Unauthorized: invalid credentials
        - 403 Forbidden: account not active, or address not permitted
        - 423 Locked: too many failed attempts
    """
    command = LoginCommand(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

    result = await LoginUseCase(uow, settings).execute(command)
    if result.is_err():
        raise_for_error(result.error)

    return ApiResponse[LoginResponse](message="Login successful", data=result.value)


@router.post("/logout", response_model=MessageEnvelope)
async def logout(
    payload: Optional[LogoutRequest] = None,
    claims: AccessClaims = Depends(get_current_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    session_id = payload.session_id if payload else None

    result = await LogoutUseCase(uow).execute(claims, session_id)
    if result.is_err():
        raise_for_error(result.error)

    return MessageEnvelope(message=result.value.message)


@router.post("/refresh", response_model=ApiResponse[RefreshTokenResponse])
async def refresh(
    payload: RefreshRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: AuthSettings = Depends(get_auth_settings),
):
    """
    Issue a new access token from a refresh token.

    The refresh token itself is returned unchanged.
    """
    result = await RefreshTokenUseCase(uow, settings).execute(payload.refresh_token)
    if result.is_err():
        raise_for_error(result.error)

    return ApiResponse[RefreshTokenResponse](
        message="Token refreshed successfully", data=result.value
    )


@router.get("/me", response_model=DataEnvelope[AccountView])
async def me(
    claims: AccessClaims = Depends(get_current_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetCurrentAccountUseCase(uow).execute(claims)
    if result.is_err():
        raise_for_error(result.error)

    return DataEnvelope[AccountView](data=result.value)


@router.put("/change-password", response_model=MessageEnvelope)
async def change_password(
    payload: ChangePasswordRequest,
    claims: AccessClaims = Depends(get_current_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: AuthSettings = Depends(get_auth_settings),
):
    """
    Change the caller's password.

    Raises:
        - 400 Bad Request: mismatch, weak or recently used password
        - 401 Unauthorized: missing token or wrong current password
        - 404 Not Found: account no longer exists
    """
    command = ChangePasswordCommand(
        current_password=payload.current_password,
        new_password=payload.new_password,
        confirm_password=payload.confirm_password,
    )

    result = await ChangePasswordUseCase(uow, settings).execute(claims, command)
    if result.is_err():
        raise_for_error(result.error)

    return MessageEnvelope(message=result.value.message)


@router.post(
    "/forgot-password",
    response_model=ForgotPasswordEnvelope,
    response_model_exclude_none=True,
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: AuthSettings = Depends(get_auth_settings),
):
    """
    Start a password reset.

    The response is the same whether or not the email is registered.
    """
    result = await RequestPasswordResetUseCase(uow, settings).execute(payload.email)
    if result.is_err():
        raise_for_error(result.error)

    return ForgotPasswordEnvelope(
        message=result.value.message, reset_token=result.value.reset_token
    )


@router.post("/reset-password", response_model=MessageEnvelope)
async def reset_password(
    payload: ResetPasswordRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: AuthSettings = Depends(get_auth_settings),
):
    command = ResetPasswordCommand(
        token=payload.token,
        new_password=payload.new_password,
        confirm_password=payload.confirm_password,
    )

    result = await ResetPasswordUseCase(uow, settings).execute(command)
    if result.is_err():
        raise_for_error(result.error)

    return MessageEnvelope(message=result.value.message)


@router.get("/verify/{token}", response_model=MessageEnvelope)
async def verify_email(token: str, uow: UnitOfWork = Depends(get_unit_of_work)):
    result = await VerifyEmailUseCase(uow).execute(token)
    if result.is_err():
        raise_for_error(result.error)

    return MessageEnvelope(message=result.value.message)


@router.post(
    "/resend-verification",
    response_model=ResendVerificationEnvelope,
    response_model_exclude_none=True,
)
async def resend_verification(
    payload: ResendVerificationRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: AuthSettings = Depends(get_auth_settings),
):
    result = await ResendVerificationUseCase(uow, settings).execute(payload.email)
    if result.is_err():
        raise_for_error(result.error)

    return ResendVerificationEnvelope(
        message=result.value.message,
        verification_token=result.value.verification_token,
    )
