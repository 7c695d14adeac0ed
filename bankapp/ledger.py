"""
Ledger units — the atomic wrapper around every balance mutation.

A money movement is only correct if the balance write and the Transaction
row documenting it land together. This module provides the scope that makes
that so:

    async with ledger_unit(db, source_id, progress=progress):
        account = await lock_account(db, source_id)
        ...checks...
        await account_service.set_balance(db, source_id, new_balance)
        progress.advance(TransferStage.BALANCE_MUTATED)
        await transaction_service.record(...)
        progress.advance(TransferStage.TRANSACTION_LOGGED)

On exit the unit commits. On ANY failure it rolls back, and it always
releases its locks.

Serialization:
  Two concurrent debits from one account must not both read the same
  starting balance. Each unit first acquires an in-process asyncio.Lock per
  account it touches (sorted order, so A->B and B->A transfers cannot
  deadlock), then re-reads the rows with SELECT ... FOR UPDATE. On SQLite the
  FOR UPDATE is a no-op and the asyncio locks do the work. On PostgreSQL the
  row locks serialize across processes as well.

Failure outcomes:
  - BankAPIError raised by the body   -> rolled back, re-raised unchanged
  - SQLAlchemyError (body or commit)  -> rolled back, PersistenceError
  - rollback itself fails after the
    balance was mutated                -> PartialFailureError, logged CRITICAL
"""

import asyncio
import enum
import logging
import uuid
import weakref
from contextlib import AsyncExitStack, asynccontextmanager

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.exceptions import (
    AccountNotFoundError,
    BankAPIError,
    PartialFailureError,
    PersistenceError,
)
from bankapp.models.account import Account

logger = logging.getLogger(__name__)


class TransferStage(str, enum.Enum):
    """Stages a single money-movement request passes through, in order."""
    RECEIVED = "received"
    VALIDATED = "validated"
    FLAG_CHECKED = "flag_checked"
    ACCOUNT_LOADED = "account_loaded"
    AUTHORIZED = "authorized"
    FUNDS_CHECKED = "funds_checked"
    BALANCE_MUTATED = "balance_mutated"
    TRANSACTION_LOGGED = "transaction_logged"
    COMPLETED = "completed"


class TransferProgress:
    """Tracks which stage a request reached, for logging and failure triage."""

    def __init__(self, operation: str):
        self.operation = operation
        self.stage = TransferStage.RECEIVED
        self.balance_mutated = False

    def advance(self, stage: TransferStage) -> None:
        logger.debug("%s: %s -> %s", self.operation, self.stage.value, stage.value)
        self.stage = stage
        if stage is TransferStage.BALANCE_MUTATED:
            self.balance_mutated = True


class AccountLocks:
    """
    Per-account asyncio locks.

    Locks live in a WeakValueDictionary: a lock exists only while some unit
    holds or waits on it, so the registry never grows with the account table.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, account_id: uuid.UUID) -> asyncio.Lock:
        lock = self._locks.get(account_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[account_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, *account_ids: uuid.UUID):
        """Acquire the locks for all given accounts in sorted id order."""
        locks = [self._lock_for(account_id) for account_id in sorted(set(account_ids))]
        async with AsyncExitStack() as stack:
            for lock in locks:
                await stack.enter_async_context(lock)
            yield


account_locks = AccountLocks()


async def lock_account(db: AsyncSession, account_id: uuid.UUID) -> Account:
    """
    Load an account row for update, bypassing any stale identity-map copy.

    Must be called inside a ledger unit that holds the account's lock.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    result = await db.execute(
        select(Account)
        .where(Account.id == account_id)
        .with_for_update()  # No-op on SQLite, locks row on PostgreSQL
        .execution_options(populate_existing=True)
    )
    account = result.scalar_one_or_none()
    if account is None:
        raise AccountNotFoundError(account_id)
    return account


async def _rollback(db: AsyncSession, progress: TransferProgress) -> None:
    try:
        await db.rollback()
    except SQLAlchemyError as exc:
        if progress.balance_mutated:
            logger.critical(
                "PARTIAL FAILURE in %s at stage %s: rollback failed after the "
                "balance was mutated; ledger may hold a debit without its record",
                progress.operation,
                progress.stage.value,
                exc_info=True,
            )
            raise PartialFailureError(
                f"{progress.operation}: rollback failed after balance mutation"
            ) from exc
        logger.error(
            "%s: rollback failed at stage %s (no balance was mutated)",
            progress.operation,
            progress.stage.value,
            exc_info=True,
        )
        raise PersistenceError(f"{progress.operation}: rollback failed") from exc


@asynccontextmanager
async def ledger_unit(
    db: AsyncSession,
    *account_ids: uuid.UUID,
    progress: TransferProgress | None = None,
):
    """
    Scoped, all-or-nothing unit of ledger work.

    Args:
        db: The request's database session.
        *account_ids: Every account whose balance the body may change.
        progress: Stage tracker for the request; a fresh one if omitted.

    Yields:
        The TransferProgress for the unit.
    """
    progress = progress or TransferProgress("ledger")
    async with account_locks.hold(*account_ids):
        try:
            yield progress
            await db.commit()
        except BankAPIError:
            await _rollback(db, progress)
            raise
        except SQLAlchemyError as exc:
            logger.error(
                "%s failed at stage %s, rolling back",
                progress.operation,
                progress.stage.value,
                exc_info=True,
            )
            await _rollback(db, progress)
            raise PersistenceError(f"{progress.operation} failed: {exc}") from exc
        except Exception:
            await _rollback(db, progress)
            raise
