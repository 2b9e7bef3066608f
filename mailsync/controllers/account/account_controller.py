import logging
from typing import Any

from mailsync.api.payloads.accounts import AccountCreateRequest, AccountUpdateRequest
from mailsync.exceptions import AccountNotFoundError, EntityAlreadyExistError
from mailsync.models import EmailAccount
from mailsync.repos import EmailAccountRepo
from mailsync.utils.password import PasswordUtils


class AccountController:
    """Controller for email account management. Passwords are encrypted before they are stored."""

    def __init__(self, account_repo: EmailAccountRepo) -> None:
        self._logger = logging.getLogger(__name__)
        self.account_repo = account_repo

    async def list_accounts(self) -> list[EmailAccount]:
        return list(await self.account_repo.get_all())

    async def get_account(self, account_id: str) -> EmailAccount:
        account = await self.account_repo.get_by_uuid(account_id)
        if not account:
            raise AccountNotFoundError(account_id)
        return account

    async def create_account(self, request: AccountCreateRequest) -> EmailAccount:
        if await self.account_repo.get_by_email(request.email):
            raise EntityAlreadyExistError(f"Email account {request.email} already exists", action="create_account")

        values = request.model_dump(exclude={"password"})
        account = EmailAccount(**values, password=PasswordUtils.encrypt_password(request.password))
        await self.account_repo.add(account)
        self._logger.info(f"Created email account {account.email}")
        return account

    async def update_account(self, account_id: str, request: AccountUpdateRequest) -> EmailAccount:
        account = await self.get_account(account_id)
        values: dict[str, Any] = request.model_dump(exclude_unset=True, exclude_none=True)

        new_email = values.get("email")
        if new_email and new_email != account.email:
            existing = await self.account_repo.get_by_email(new_email)
            if existing:
                raise EntityAlreadyExistError(f"Email account {new_email} already exists", action="update_account")

        if "password" in values:
            values["password"] = PasswordUtils.encrypt_password(values["password"])

        account = await self.account_repo.update(account, values)
        self._logger.info(f"Updated email account {account.email}: {sorted(values)}")
        return account

    async def delete_account(self, account_id: str) -> None:
        account = await self.get_account(account_id)
        await self.account_repo.delete(account)
        self._logger.info(f"Deleted email account {account.email}")
