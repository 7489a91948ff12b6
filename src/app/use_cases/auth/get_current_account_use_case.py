from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.token_issuer import AccessClaims
from src.app.services.unit_of_work import UnitOfWork
from .dtos import AccountView

NOT_FOUND = Error("NOT_FOUND", "User not found")


class GetCurrentAccountUseCase:
    """Loads the account behind an access token (GET /me)"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, claims: AccessClaims) -> Result[AccountView]:
        try:
            account_id = UUID(claims.id)
        except ValueError:
            return Return.err(NOT_FOUND)

        async with self.uow:
            account = await self.uow.accounts.get_by_id(account_id)
            if account is None:
                return Return.err(NOT_FOUND)

            return Return.ok(AccountView.from_account(account))
