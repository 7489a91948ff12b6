"""
Authentication Use Cases

All authentication-related business logic.
"""

from .register_use_case import RegisterUseCase
from .login_use_case import LoginUseCase
from .logout_use_case import LogoutUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .get_current_account_use_case import GetCurrentAccountUseCase
from .change_password_use_case import ChangePasswordUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .reset_password_use_case import ResetPasswordUseCase
from .verify_email_use_case import VerifyEmailUseCase
from .resend_verification_use_case import ResendVerificationUseCase
from .dtos import (
    AccountView,
    ChangePasswordCommand,
    LoginCommand,
    LoginResponse,
    MessageResponse,
    RefreshTokenResponse,
    RegisterCommand,
    RegisterResponse,
    RequestPasswordResetResponse,
    ResendVerificationResponse,
    ResetPasswordCommand,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "LoginUseCase",
    "LogoutUseCase",
    "RefreshTokenUseCase",
    "GetCurrentAccountUseCase",
    "ChangePasswordUseCase",
    "RequestPasswordResetUseCase",
    "ResetPasswordUseCase",
    "VerifyEmailUseCase",
    "ResendVerificationUseCase",
    # DTOs - Commands
    "RegisterCommand",
    "LoginCommand",
    "ChangePasswordCommand",
    "ResetPasswordCommand",
    # DTOs - Responses
    "AccountView",
    "RegisterResponse",
    "LoginResponse",
    "RefreshTokenResponse",
    "MessageResponse",
    "RequestPasswordResetResponse",
    "ResendVerificationResponse",
]
