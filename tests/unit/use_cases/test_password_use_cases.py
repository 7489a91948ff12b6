from datetime import datetime, timedelta

import pytest

from src.app.services import opaque_tokens
from src.app.services.token_issuer import AccessClaims
from src.app.use_cases.auth import (
    ChangePasswordCommand,
    ChangePasswordUseCase,
    RequestPasswordResetUseCase,
    ResetPasswordCommand,
    ResetPasswordUseCase,
)
from src.app.use_cases.auth.request_password_reset_use_case import GENERIC_MESSAGE
from src.domain.entities import AuditAction

PASSWORD = "SecurePass123!"
NEW_PASSWORD = "NewSecure456@"
NOW = datetime(2026, 1, 1, 12, 0, 0)


def _claims(account):
    return AccessClaims(
        id=str(account.id),
        username=account.username,
        email=account.email,
        type="access",
        exp=0,
    )


# ============================================================================
# Change password
# ============================================================================


@pytest.mark.asyncio
async def test_change_password(mock_uow, settings, hasher, make_account):
    account = make_account(must_change_password=True)
    old_hash = account.password_hash
    mock_uow.accounts.get_by_id.return_value = account

    result = await ChangePasswordUseCase(mock_uow, settings, clock=lambda: NOW).execute(
        _claims(account),
        ChangePasswordCommand(
            current_password=PASSWORD,
            new_password=NEW_PASSWORD,
            confirm_password=NEW_PASSWORD,
        ),
    )

    assert result.is_ok()
    assert hasher.verify(NEW_PASSWORD, account.password_hash)
    assert account.password_history == [old_hash]
    assert account.must_change_password is False
    assert account.password_expires_at == NOW + settings.password_max_age
    assert mock_uow.audit_events.create.call_args.args[0].action == AuditAction.password_changed
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_change_password_mismatch_checked_before_lookup(mock_uow, settings):
    result = await ChangePasswordUseCase(mock_uow, settings).execute(
        AccessClaims(id="x", username="x", email="x", type="access", exp=0),
        ChangePasswordCommand(
            current_password=PASSWORD,
            new_password=NEW_PASSWORD,
            confirm_password="Different789#",
        ),
    )

    assert result.error.code == "VALIDATION_ERROR"
    assert result.error.message == "Passwords must match"
    mock_uow.accounts.get_by_id.assert_not_called()


@pytest.mark.asyncio
async def test_change_password_over_bcrypt_limit(mock_uow, settings, make_account):
    account = make_account()
    mock_uow.accounts.get_by_id.return_value = account
    too_long = "Aa1!" + "x" * 80

    result = await ChangePasswordUseCase(mock_uow, settings).execute(
        _claims(account),
        ChangePasswordCommand(
            current_password=PASSWORD, new_password=too_long, confirm_password=too_long
        ),
    )

    assert result.error.code == "VALIDATION_ERROR"
    assert result.error.message == "newPassword must be at most 72 bytes long"
    mock_uow.accounts.update.assert_not_called()


@pytest.mark.asyncio
async def test_change_password_wrong_current(mock_uow, settings, make_account):
    account = make_account()
    mock_uow.accounts.get_by_id.return_value = account

    result = await ChangePasswordUseCase(mock_uow, settings).execute(
        _claims(account),
        ChangePasswordCommand(
            current_password="WrongPass123!",
            new_password=NEW_PASSWORD,
            confirm_password=NEW_PASSWORD,
        ),
    )

    assert result.error.code == "INVALID_CREDENTIALS"
    mock_uow.accounts.update.assert_not_called()


@pytest.mark.asyncio
async def test_change_password_rejects_current_password(mock_uow, settings, make_account):
    account = make_account()
    mock_uow.accounts.get_by_id.return_value = account

    result = await ChangePasswordUseCase(mock_uow, settings).execute(
        _claims(account),
        ChangePasswordCommand(
            current_password=PASSWORD, new_password=PASSWORD, confirm_password=PASSWORD
        ),
    )

    assert result.error.code == "PASSWORD_REUSED"


@pytest.mark.asyncio
async def test_change_password_rejects_recent_password(mock_uow, settings, hasher, make_account):
    account = make_account(password_history=[hasher.hash(NEW_PASSWORD)])
    mock_uow.accounts.get_by_id.return_value = account

    result = await ChangePasswordUseCase(mock_uow, settings).execute(
        _claims(account),
        ChangePasswordCommand(
            current_password=PASSWORD,
            new_password=NEW_PASSWORD,
            confirm_password=NEW_PASSWORD,
        ),
    )

    assert result.error.code == "PASSWORD_REUSED"


@pytest.mark.asyncio
async def test_change_password_account_gone(mock_uow, settings, make_account):
    result = await ChangePasswordUseCase(mock_uow, settings).execute(
        _claims(make_account()),
        ChangePasswordCommand(
            current_password=PASSWORD,
            new_password=NEW_PASSWORD,
            confirm_password=NEW_PASSWORD,
        ),
    )

    assert result.error.code == "NOT_FOUND"


# ============================================================================
# Request password reset
# ============================================================================


@pytest.mark.asyncio
async def test_request_reset_stores_digest_only(mock_uow, settings, make_account):
    account = make_account()
    mock_uow.accounts.get_by_email.return_value = account
    settings = settings.model_copy(update={"expose_debug_tokens": True})

    result = await RequestPasswordResetUseCase(mock_uow, settings, clock=lambda: NOW).execute(
        "alice@example.com"
    )

    assert result.value.message == GENERIC_MESSAGE
    token = result.value.reset_token
    assert token
    assert account.reset_token_hash == opaque_tokens.digest(token)
    assert account.reset_token_hash != token
    assert account.reset_expires_at == NOW + timedelta(hours=1)
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_request_reset_hides_token_in_production(mock_uow, settings, make_account):
    mock_uow.accounts.get_by_email.return_value = make_account()

    result = await RequestPasswordResetUseCase(mock_uow, settings).execute("alice@example.com")

    assert result.value.message == GENERIC_MESSAGE
    assert result.value.reset_token is None


@pytest.mark.asyncio
async def test_request_reset_unknown_email_same_answer(mock_uow, settings):
    result = await RequestPasswordResetUseCase(mock_uow, settings).execute("ghost@example.com")

    assert result.is_ok()
    assert result.value.message == GENERIC_MESSAGE
    assert result.value.reset_token is None
    mock_uow.accounts.update.assert_not_called()


# ============================================================================
# Reset password
# ============================================================================


def _reset_command(token, password=NEW_PASSWORD, confirm=None):
    return ResetPasswordCommand(
        token=token, new_password=password, confirm_password=confirm or password
    )


@pytest.mark.asyncio
async def test_reset_password(mock_uow, settings, hasher, make_account):
    token, token_hash = opaque_tokens.generate()
    account = make_account(
        reset_token_hash=token_hash,
        reset_expires_at=NOW + timedelta(minutes=30),
        must_change_password=True,
    )
    mock_uow.accounts.get_by_reset_token_hash.return_value = account
    mock_uow.sessions.end_all_for_account.return_value = 2

    result = await ResetPasswordUseCase(mock_uow, settings, clock=lambda: NOW).execute(
        _reset_command(token)
    )

    assert result.is_ok()
    mock_uow.accounts.get_by_reset_token_hash.assert_called_once_with(token_hash)
    assert hasher.verify(NEW_PASSWORD, account.password_hash)
    assert account.reset_token_hash is None
    assert account.reset_expires_at is None
    assert account.must_change_password is False
    mock_uow.sessions.end_all_for_account.assert_called_once_with(account.id, NOW)
    audit = mock_uow.audit_events.create.call_args.args[0]
    assert audit.action == AuditAction.password_reset
    assert audit.event_metadata == {"sessions_ended": 2}


@pytest.mark.asyncio
async def test_reset_password_unknown_token(mock_uow, settings):
    result = await ResetPasswordUseCase(mock_uow, settings).execute(_reset_command("nope"))

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"


@pytest.mark.asyncio
async def test_reset_password_over_bcrypt_limit(mock_uow, settings):
    result = await ResetPasswordUseCase(mock_uow, settings).execute(
        _reset_command("token", password="Aa1!" + "x" * 80)
    )

    assert result.error.code == "VALIDATION_ERROR"
    mock_uow.accounts.get_by_reset_token_hash.assert_not_called()


@pytest.mark.asyncio
async def test_reset_password_expired_token_is_cleared(mock_uow, settings, make_account):
    token, token_hash = opaque_tokens.generate()
    account = make_account(
        reset_token_hash=token_hash, reset_expires_at=NOW - timedelta(seconds=1)
    )
    old_hash = account.password_hash
    mock_uow.accounts.get_by_reset_token_hash.return_value = account

    result = await ResetPasswordUseCase(mock_uow, settings, clock=lambda: NOW).execute(
        _reset_command(token)
    )

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"
    assert account.reset_token_hash is None
    assert account.password_hash == old_hash
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_reset_password_policy_checked_first(mock_uow, settings):
    result = await ResetPasswordUseCase(mock_uow, settings).execute(
        _reset_command("whatever", password="short")
    )

    assert result.error.code == "VALIDATION_ERROR"
    mock_uow.accounts.get_by_reset_token_hash.assert_not_called()
