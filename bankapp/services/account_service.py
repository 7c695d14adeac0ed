"""
Account service — account lifecycle and the balance mutation primitive.

This module handles:
  - Opening accounts (unique account number, optional initial deposit)
  - Account retrieval (by id, by owner, with or without an ownership check)
  - set_balance(): the ONLY function that writes an account balance
  - set_transfers_enabled(): the admin per-account transfer toggle

set_balance() is deliberately dumb:
  It overwrites the stored balance with whatever the caller computed. It
  does not check funds, does not log a transaction and does not commit.
  Callers (transfer_service, open_account below) do the funds check first,
  then call it inside a ledger unit, then record the matching transaction.

Admin access:
  Functions prefixed with `admin_`/`list_all_` do NOT scope by owner. The
  router layer enforces that only admins reach them.
"""

import logging
import random
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.exceptions import (
    AccountNotFoundError,
    ForbiddenError,
    PersistenceError,
    ValidationError,
)
from bankapp.ledger import TransferProgress, TransferStage, ledger_unit, lock_account
from bankapp.models.account import MAX_CENTS, Account, AccountType
from bankapp.models.transaction import TransactionType
from bankapp.models.user import User
from bankapp.services import transaction_service

logger = logging.getLogger(__name__)

ACCOUNT_NUMBER_MIN = 1_000_000_000
ACCOUNT_NUMBER_MAX = 9_999_999_999
ACCOUNT_NUMBER_ATTEMPTS = 10


@dataclass
class AccountWithOwner:
    """An account joined to its owner's identity, for admin views."""
    account: Account
    owner_username: str | None
    owner_full_name: str | None


def _generate_account_number() -> str:
    """
    Generate a random 10-digit account number.

    Drawn from [1000000000, 9999999999] so it never starts with a zero. In a
    real bank this would carry a check digit; here the unique constraint and
    the retry loop in open_account() are enough.
    """
    return str(random.randint(ACCOUNT_NUMBER_MIN, ACCOUNT_NUMBER_MAX))


def _parse_account_type(account_type: str | AccountType) -> AccountType:
    try:
        return AccountType(account_type)
    except ValueError:
        raise ValidationError(
            f"Invalid account type {account_type!r}. "
            f"Must be one of: {', '.join(t.value for t in AccountType)}"
        ) from None


async def open_account(
    db: AsyncSession,
    owner_id: uuid.UUID,
    account_type: str | AccountType,
    initial_balance_cents: int = 0,
) -> Account:
    """
    Open a new bank account for a user.

    The account starts with transfers enabled and the given balance. A
    positive initial balance is documented by a `deposit` transaction
    written in the same ledger unit as the account itself.

    Args:
        db: Database session.
        owner_id: The owning user's id.
        account_type: "checking" or "savings".
        initial_balance_cents: Non-negative opening balance in cents.

    Returns:
        The newly created (and committed) Account.

    Raises:
        ValidationError: If the type is unknown, or the balance is negative or
            above MAX_CENTS.
        PersistenceError: If no unique account number could be generated.
    """
    parsed_type = _parse_account_type(account_type)
    if initial_balance_cents < 0:
        raise ValidationError("Initial balance cannot be negative")
    if initial_balance_cents > MAX_CENTS:
        raise ValidationError("Initial balance exceeds the largest supported amount")

    progress = TransferProgress("open_account")
    async with ledger_unit(db, progress=progress):
        # Retry on collision (extremely unlikely with 9 billion numbers)
        for _ in range(ACCOUNT_NUMBER_ATTEMPTS):
            account_number = _generate_account_number()
            existing = await db.execute(
                select(Account.id).where(Account.account_number == account_number)
            )
            if existing.scalar_one_or_none() is None:
                break
        else:
            raise PersistenceError("Failed to generate a unique account number")

        account = Account(
            owner_id=owner_id,
            account_type=parsed_type.value,
            account_number=account_number,
            cached_balance_cents=initial_balance_cents,
            transfers_enabled=True,
        )
        db.add(account)
        await db.flush()
        progress.advance(TransferStage.BALANCE_MUTATED)

        if initial_balance_cents > 0:
            await transaction_service.record(
                db,
                account_id=account.id,
                txn_type=TransactionType.DEPOSIT,
                amount_cents=initial_balance_cents,
                description="Initial Deposit",
                balance_after_cents=initial_balance_cents,
            )
            progress.advance(TransferStage.TRANSACTION_LOGGED)

    logger.info(
        "Opened %s account %s for owner %s with %d cents",
        parsed_type.value,
        account.account_number,
        owner_id,
        initial_balance_cents,
    )
    return account


async def get_account(db: AsyncSession, account_id: uuid.UUID) -> Account:
    """
    Get a single account by id, without an ownership check.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    result = await db.execute(select(Account).where(Account.id == account_id))
    account = result.scalar_one_or_none()

    if account is None:
        raise AccountNotFoundError(account_id)

    return account


async def get_owned_account(
    db: AsyncSession,
    account_id: uuid.UUID,
    owner_id: uuid.UUID,
) -> Account:
    """
    Get a single account, verifying ownership.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
        ForbiddenError: If the account belongs to someone else.
    """
    account = await get_account(db, account_id)

    if account.owner_id != owner_id:
        raise ForbiddenError("You do not have access to this account")

    return account


async def list_accounts_for_owner(
    db: AsyncSession,
    owner_id: uuid.UUID,
) -> list[Account]:
    """List all accounts belonging to one owner, oldest first."""
    result = await db.execute(
        select(Account)
        .where(Account.owner_id == owner_id)
        .order_by(Account.created_at, Account.account_number)
    )
    return list(result.scalars().all())


async def set_balance(
    db: AsyncSession,
    account_id: uuid.UUID,
    new_balance_cents: int,
) -> Account:
    """
    Overwrite an account's stored balance. The balance mutation primitive.

    No funds or sign checks happen here. Must be called inside a ledger
    unit, after the caller has loaded the account with lock_account().

    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    account = await db.get(Account, account_id)
    if account is None:
        raise AccountNotFoundError(account_id)

    account.cached_balance_cents = new_balance_cents
    await db.flush()
    return account


# ---------------------------------------------------------------------------
# Admin functions
# ---------------------------------------------------------------------------

async def set_transfers_enabled(
    db: AsyncSession,
    account_id: uuid.UUID,
    enabled: bool,
) -> Account:
    """
    [ADMIN ONLY] Enable or disable outbound transfers for one account.

    Independent of the balance and of the global feature flags.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    progress = TransferProgress("set_transfers_enabled")
    async with ledger_unit(db, account_id, progress=progress):
        account = await lock_account(db, account_id)
        account.transfers_enabled = enabled
        await db.flush()

    logger.info(
        "Transfers %s for account %s",
        "enabled" if enabled else "disabled",
        account.account_number,
    )
    return account


async def list_all_accounts(db: AsyncSession) -> list[AccountWithOwner]:
    """
    [ADMIN ONLY] List all accounts across all owners, newest first.

    Joined to the owner's username and full name (outer join: owners are
    weak references and may no longer exist).
    """
    result = await db.execute(
        select(Account, User.username, User.full_name)
        .outerjoin(User, Account.owner_id == User.id)
        .order_by(Account.created_at.desc())
    )
    return [
        AccountWithOwner(
            account=account,
            owner_username=username,
            owner_full_name=full_name,
        )
        for account, username, full_name in result.all()
    ]
