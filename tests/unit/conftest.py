from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.services.auth_settings import AuthSettings
from src.app.services.password_hasher import PasswordHasher
from src.domain.entities import Account, AccountStatus

PASSWORD = "SecurePass123!"


@pytest.fixture
def settings():
    return AuthSettings(
        access_secret="unit-access-secret",
        refresh_secret="unit-refresh-secret",
        bcrypt_rounds=4,
    )


@pytest.fixture
def hasher(settings):
    return PasswordHasher(settings.bcrypt_rounds)


@pytest.fixture
def make_account(hasher):
    def _make(**overrides):
        fields = dict(
            username="alice",
            email="alice@example.com",
            password_hash=hasher.hash(PASSWORD),
            status=AccountStatus.active,
        )
        fields.update(overrides)
        return Account(**fields)

    return _make


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.accounts = MagicMock()
    uow.accounts.get_by_id = AsyncMock(return_value=None)
    uow.accounts.get_by_username = AsyncMock(return_value=None)
    uow.accounts.get_by_email = AsyncMock(return_value=None)
    uow.accounts.get_by_reset_token_hash = AsyncMock(return_value=None)
    uow.accounts.get_by_verification_token_hash = AsyncMock(return_value=None)
    uow.accounts.create = AsyncMock(side_effect=lambda account: account)
    uow.accounts.update = AsyncMock(side_effect=lambda account: account)
    uow.accounts.increment_failed_logins = AsyncMock(return_value=1)
    uow.accounts.lock = AsyncMock(return_value=True)

    uow.sessions = MagicMock()
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.end = AsyncMock(return_value=True)
    uow.sessions.end_all_for_account = AsyncMock(return_value=0)

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()

    return uow
