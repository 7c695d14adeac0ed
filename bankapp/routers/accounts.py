"""
Accounts router — member account endpoints.

  POST   /accounts                            — Open a new account
  GET    /accounts                            — List own accounts
  GET    /accounts/{account_id}               — Get own account details
  GET    /accounts/{account_id}/transactions  — Own account's ledger, newest first

Every endpoint is scoped to the authenticated user. Another member's
account answers 403; an unknown id answers 404.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.database import get_db
from bankapp.dependencies import get_current_user
from bankapp.models.user import User
from bankapp.schemas.account import AccountCreateRequest, AccountResponse
from bankapp.schemas.transaction import TransactionResponse
from bankapp.services import account_service, transaction_service

router = APIRouter()


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a new bank account",
)
async def create_account(
    request: AccountCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Open a checking or savings account for the authenticated user.

    The account gets a random 10-digit number and starts with transfers
    enabled. A non-zero opening balance is recorded as an
    "Initial Deposit" transaction.
    """
    return await account_service.open_account(
        db,
        owner_id=user.id,
        account_type=request.account_type,
        initial_balance_cents=request.initial_balance_cents,
    )


@router.get(
    "",
    response_model=list[AccountResponse],
    summary="List your accounts",
)
async def list_accounts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List all bank accounts owned by the authenticated user."""
    return await account_service.list_accounts_for_owner(db, user.id)


@router.get(
    "/{account_id}",
    response_model=AccountResponse,
    summary="Get account details",
)
async def get_account(
    account_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await account_service.get_owned_account(db, account_id, user.id)


@router.get(
    "/{account_id}/transactions",
    response_model=list[TransactionResponse],
    summary="List an account's transactions",
)
async def list_account_transactions(
    account_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Transaction history for one of your accounts, newest first.

    Reading history never changes it: two calls with no mutation in
    between return identical lists.
    """
    await account_service.get_owned_account(db, account_id, user.id)
    return await transaction_service.list_for_account(db, account_id)
