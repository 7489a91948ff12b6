from uuid import uuid4

import pytest

from src.app.services.token_issuer import AccessClaims, TokenIssuer
from src.app.use_cases.auth import (
    GetCurrentAccountUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
)
from src.domain.entities import AccountStatus, AuditAction


def _claims(account):
    return AccessClaims(
        id=str(account.id),
        username=account.username,
        email=account.email,
        roles=list(account.roles),
        type="access",
        exp=0,
    )


# ============================================================================
# Logout
# ============================================================================


@pytest.mark.asyncio
async def test_logout_ends_own_session(mock_uow, make_account):
    account = make_account()
    session_id = uuid4()

    result = await LogoutUseCase(mock_uow).execute(_claims(account), str(session_id))

    assert result.is_ok()
    assert result.value.message == "Logged out successfully"
    args = mock_uow.sessions.end.call_args.args
    assert args[0] == session_id
    assert args[1] == account.id
    assert mock_uow.audit_events.create.call_args.args[0].action == AuditAction.logout
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_logout_already_ended_session_is_noop(mock_uow, make_account):
    mock_uow.sessions.end.return_value = False

    result = await LogoutUseCase(mock_uow).execute(_claims(make_account()), str(uuid4()))

    assert result.is_ok()
    mock_uow.audit_events.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("session_id", [None, "", "not-a-uuid"])
async def test_logout_without_usable_session_id(mock_uow, make_account, session_id):
    result = await LogoutUseCase(mock_uow).execute(_claims(make_account()), session_id)

    assert result.is_ok()
    mock_uow.sessions.end.assert_not_called()


# ============================================================================
# Refresh
# ============================================================================


@pytest.mark.asyncio
async def test_refresh_issues_new_access_token(mock_uow, settings, make_account):
    account = make_account()
    mock_uow.accounts.get_by_id.return_value = account
    refresh_token = TokenIssuer(settings).issue_refresh_token(account)

    result = await RefreshTokenUseCase(mock_uow, settings).execute(refresh_token)

    assert result.is_ok()
    assert result.value.refresh_token == refresh_token
    claims = TokenIssuer(settings).verify_access_token(result.value.access_token)
    assert claims.id == str(account.id)
    mock_uow.accounts.get_by_id.assert_called_once_with(account.id)
    assert mock_uow.audit_events.create.call_args.args[0].action == AuditAction.token_refresh


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(mock_uow, settings, make_account):
    access_token = TokenIssuer(settings).issue_access_token(make_account())

    result = await RefreshTokenUseCase(mock_uow, settings).execute(access_token)

    assert result.error.code == "INVALID_TOKEN"
    mock_uow.accounts.get_by_id.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_rejects_garbage(mock_uow, settings):
    result = await RefreshTokenUseCase(mock_uow, settings).execute("not.a.jwt")

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
@pytest.mark.parametrize("refresh_token", [None, ""])
async def test_refresh_without_token(mock_uow, settings, refresh_token):
    result = await RefreshTokenUseCase(mock_uow, settings).execute(refresh_token)

    assert result.error.code == "INVALID_TOKEN"
    mock_uow.accounts.get_by_id.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_for_deleted_account(mock_uow, settings, make_account):
    refresh_token = TokenIssuer(settings).issue_refresh_token(make_account())

    result = await RefreshTokenUseCase(mock_uow, settings).execute(refresh_token)

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_refresh_for_inactive_account(mock_uow, settings, make_account):
    account = make_account(status=AccountStatus.suspended)
    mock_uow.accounts.get_by_id.return_value = account
    refresh_token = TokenIssuer(settings).issue_refresh_token(account)

    result = await RefreshTokenUseCase(mock_uow, settings).execute(refresh_token)

    assert result.error.code == "INVALID_TOKEN"
    mock_uow.commit.assert_not_called()


# ============================================================================
# Current account
# ============================================================================


@pytest.mark.asyncio
async def test_get_current_account(mock_uow, make_account):
    account = make_account(first_name="Alice")
    mock_uow.accounts.get_by_id.return_value = account

    result = await GetCurrentAccountUseCase(mock_uow).execute(_claims(account))

    assert result.is_ok()
    assert result.value.id == str(account.id)
    assert result.value.first_name == "Alice"


@pytest.mark.asyncio
async def test_get_current_account_gone(mock_uow, make_account):
    result = await GetCurrentAccountUseCase(mock_uow).execute(_claims(make_account()))

    assert result.error.code == "NOT_FOUND"
