"""
Email account management router. Responses never include the stored password.
"""

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Path, status

from mailsync.api.payloads import (
    AccountCreateRequest,
    AccountListResponse,
    AccountResponse,
    AccountUpdateRequest,
)
from mailsync.api.payloads.error import APIError
from mailsync.container import ApplicationContainer
from mailsync.controllers.account.account_controller import AccountController

router = APIRouter()


@router.get("", response_model=AccountListResponse, summary="List email accounts")
@inject
async def list_accounts(
    account_controller: AccountController = Depends(Provide[ApplicationContainer.controllers.account_controller]),
) -> AccountListResponse:
    accounts = await account_controller.list_accounts()
    return AccountListResponse(data=[AccountResponse.from_model(account) for account in accounts])


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": APIError, "description": "Account already exists"}},
    summary="Create an email account",
)
@inject
async def create_account(
    request: AccountCreateRequest,
    account_controller: AccountController = Depends(Provide[ApplicationContainer.controllers.account_controller]),
) -> AccountResponse:
    account = await account_controller.create_account(request)
    return AccountResponse.from_model(account)


@router.patch(
    "/{account_id}",
    response_model=AccountResponse,
    responses={
        404: {"model": APIError, "description": "Account not found"},
        409: {"model": APIError, "description": "Email already used by another account"},
    },
    summary="Update an email account",
)
@inject
async def update_account(
    request: AccountUpdateRequest,
    account_id: str = Path(..., example="a3ec500d-126b-4532-a632-7808721b3732"),
    account_controller: AccountController = Depends(Provide[ApplicationContainer.controllers.account_controller]),
) -> AccountResponse:
    account = await account_controller.update_account(account_id, request)
    return AccountResponse.from_model(account)


@router.delete(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": APIError, "description": "Account not found"}},
    summary="Delete an email account",
)
@inject
async def delete_account(
    account_id: str = Path(..., example="a3ec500d-126b-4532-a632-7808721b3732"),
    account_controller: AccountController = Depends(Provide[ApplicationContainer.controllers.account_controller]),
) -> None:
    await account_controller.delete_account(account_id)
