"""
Transaction service — the append-only ledger of transaction records.

This module handles:
  - Appending a record (the only write; there is no update or delete)
  - Listing one account's records, newest first
  - [ADMIN] listing every record with its account number and owner identity

One-way dependency:
  This service knows nothing about account balances. Callers pass
  `balance_after_cents` themselves, computed from the balance they just
  wrote with account_service.set_balance(). The record must follow the
  mutation (it documents the resulting balance) and must be written inside
  the same ledger unit (bankapp.ledger.ledger_unit) so both commit or
  neither does.
"""

import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.models.account import Account
from bankapp.models.transaction import Transaction, TransactionType
from bankapp.models.user import User


@dataclass
class TransactionWithOwner:
    """A transaction joined to its account number and owner, for admin views."""
    transaction: Transaction
    account_number: str | None
    owner_username: str | None
    owner_full_name: str | None


async def record(
    db: AsyncSession,
    account_id: uuid.UUID,
    txn_type: TransactionType,
    amount_cents: int,
    description: str | None,
    related_account_id: uuid.UUID | None = None,
    balance_after_cents: int | None = None,
) -> Transaction:
    """
    Append one transaction record.

    The row is flushed (not committed) so that its server-assigned id and
    date are available; the surrounding ledger unit commits it.

    Args:
        db: Database session.
        account_id: The account the record belongs to.
        txn_type: One of TransactionType.
        amount_cents: Signed amount: negative for debits, positive for credits.
        description: Human-readable memo.
        related_account_id: The other leg of an internal transfer.
        balance_after_cents: The account's balance right after the mutation.

    Returns:
        The stored Transaction.
    """
    txn = Transaction(
        account_id=account_id,
        type=TransactionType(txn_type).value,
        amount_cents=amount_cents,
        description=description,
        related_account_id=related_account_id,
        balance_after_cents=balance_after_cents,
    )
    db.add(txn)
    await db.flush()
    return txn


async def list_for_account(
    db: AsyncSession,
    account_id: uuid.UUID,
) -> list[Transaction]:
    """
    List an account's transactions, newest first.

    Ordered by date descending, then id descending so rows written in the
    same instant keep their insertion order. Ownership is checked by the
    caller (router or account_service), not here.
    """
    result = await db.execute(
        select(Transaction)
        .where(Transaction.account_id == account_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Admin read-only functions
# ---------------------------------------------------------------------------

async def list_all(db: AsyncSession) -> list[TransactionWithOwner]:
    """
    [ADMIN ONLY] List ALL transactions across the system, newest first.

    Each row is joined (outer joins, since owners are weak references) to its
    account number and owner identity for display in the admin console.
    """
    result = await db.execute(
        select(Transaction, Account.account_number, User.username, User.full_name)
        .outerjoin(Account, Transaction.account_id == Account.id)
        .outerjoin(User, Account.owner_id == User.id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
    )
    return [
        TransactionWithOwner(
            transaction=txn,
            account_number=account_number,
            owner_username=username,
            owner_full_name=full_name,
        )
        for txn, account_number, username, full_name in result.all()
    ]
