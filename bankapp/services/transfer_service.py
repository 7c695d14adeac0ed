"""
Transfer service — the core money-movement logic.

THIS IS THE MOST CRITICAL FILE IN THE PROJECT. It handles:
  - Outbound payments: wire, ACH and bill pay (one shared algorithm)
  - Internal transfers between two accounts held at this bank
  - Admin balance adjustments

Outbound algorithm (every family):
  1. Validate the request (source, destination, positive amount)
  2. Check the family's feature flag (fail-closed)
  3. Load the source account; unknown OR someone else's -> not found
  4. Check the account's own transfer toggle
  5. Check funds (no fee is added; fees are a presentation concern)
  6. new_balance = balance - amount
  7. account_service.set_balance(...)
  8. transaction_service.record(..., -amount, ..., balance_after=new_balance)
  9. Return a confirmation

Steps 3-8 run inside one ledger unit (bankapp.ledger.ledger_unit): the
account is locked and re-read, and the balance write plus its record commit
together or not at all. The record can't be written first, since it
documents the balance that results from the write.

Feature flags are passed in as a FeatureFlagReader rather than read from
global state, so tests can hand in a plain double.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.exceptions import (
    AccountNotFoundError,
    FeatureDisabledError,
    InsufficientFundsError,
    TransfersDisabledError,
    ValidationError,
)
from bankapp.ledger import TransferProgress, TransferStage, ledger_unit, lock_account
from bankapp.models.account import MAX_CENTS, Account
from bankapp.models.feature_flag import ALLOW_ACH, ALLOW_BILL_PAY, ALLOW_WIRE_TRANSFER
from bankapp.models.transaction import Transaction, TransactionType
from bankapp.schemas.transfer import (
    AchTransferRequest,
    BillPayRequest,
    InternalTransferRequest,
    OutboundPaymentRequest,
    WireTransferRequest,
)
from bankapp.services import account_service, transaction_service
from bankapp.services.feature_flag_service import FeatureFlagReader

logger = logging.getLogger(__name__)

SOURCE_NOT_FOUND = "Source account not found or does not belong to you."


@dataclass
class TransferResult:
    """Outcome of a single-account money movement."""
    message: str
    transaction: Transaction
    balance_cents: int


@dataclass
class InternalTransferResult:
    """Outcome of an internal transfer: both legs and both resulting balances."""
    message: str
    debit_transaction: Transaction
    credit_transaction: Transaction
    from_balance_cents: int
    to_balance_cents: int


@dataclass(frozen=True)
class _PaymentFamily:
    flag: str
    txn_type: TransactionType
    disabled_message: str


_FAMILIES = {
    "wire": _PaymentFamily(
        flag=ALLOW_WIRE_TRANSFER,
        txn_type=TransactionType.WIRE_TRANSFER_SENT,
        disabled_message="Wire transfers are currently disabled by system admin.",
    ),
    "ach": _PaymentFamily(
        flag=ALLOW_ACH,
        txn_type=TransactionType.ACH_TRANSFER_SENT,
        disabled_message="ACH transfers are currently disabled by system admin.",
    ),
    "bill_pay": _PaymentFamily(
        flag=ALLOW_BILL_PAY,
        txn_type=TransactionType.BILL_PAY,
        disabled_message="Bill payments are currently disabled by system admin.",
    ),
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _require_positive_cents(amount_cents) -> int:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int) or amount_cents <= 0:
        raise ValidationError("Amount must be a positive number of cents")
    if amount_cents > MAX_CENTS:
        raise ValidationError("Amount exceeds the largest supported amount")
    return amount_cents


def _require_within_limit(new_balance_cents: int, account: Account) -> None:
    if new_balance_cents > MAX_CENTS:
        raise ValidationError(
            f"Account {account.account_number} cannot hold a balance that large"
        )


def _destination_of(request) -> str | None:
    if request.kind == "bill_pay":
        return request.payee_name
    return request.beneficiary_account_number


def _validate_outbound(request) -> None:
    """Step 1. The boundary models already enforce this; callers may skip them."""
    if request.from_account_id is None:
        raise ValidationError("A source account is required")
    destination = _destination_of(request)
    if destination is None or not str(destination).strip():
        if request.kind == "bill_pay":
            raise ValidationError("A payee name is required")
        raise ValidationError("A beneficiary account number is required")
    _require_positive_cents(request.amount_cents)


def _describe(request) -> str:
    if request.kind == "wire":
        return (
            f"Wire Transfer to {request.beneficiary_account_number} "
            f"({request.beneficiary_name or 'N/A'})"
        )
    if request.kind == "ach":
        return (
            f"ACH Transfer to {request.beneficiary_account_number} "
            f"({request.beneficiary_name or 'N/A'}, "
            f"Acc Type: {request.beneficiary_account_type or 'N/A'})"
        )
    return f"Bill payment to {request.payee_name}"


def _confirmation(request) -> str:
    if request.kind == "wire":
        return "Wire transfer initiated successfully."
    if request.kind == "ach":
        return "ACH transfer successful."
    return f"Bill payment to {request.payee_name} successful."


async def _load_source(
    db: AsyncSession,
    account_id: uuid.UUID,
    caller_id: uuid.UUID,
    progress: TransferProgress,
) -> Account:
    """Lock and load the caller's source account; never reveal other owners' accounts."""
    try:
        account = await lock_account(db, account_id)
    except AccountNotFoundError:
        raise AccountNotFoundError(account_id, SOURCE_NOT_FOUND) from None
    progress.advance(TransferStage.ACCOUNT_LOADED)

    if account.owner_id != caller_id:
        logger.warning(
            "%s: caller %s does not own account %s",
            progress.operation,
            caller_id,
            account_id,
        )
        raise AccountNotFoundError(account_id, SOURCE_NOT_FOUND)
    progress.advance(TransferStage.AUTHORIZED)
    return account


def _check_outbound_allowed(
    account: Account,
    amount_cents: int,
    progress: TransferProgress,
) -> None:
    if not account.transfers_enabled:
        logger.warning(
            "%s rejected: transfers disabled on account %s",
            progress.operation,
            account.account_number,
        )
        raise TransfersDisabledError(account.account_number)

    if account.cached_balance_cents < amount_cents:
        logger.warning(
            "%s rejected: insufficient funds on account %s (need %d, have %d)",
            progress.operation,
            account.account_number,
            amount_cents,
            account.cached_balance_cents,
        )
        raise InsufficientFundsError(
            account_id=account.id,
            requested_cents=amount_cents,
            available_cents=account.cached_balance_cents,
        )
    progress.advance(TransferStage.FUNDS_CHECKED)


# ---------------------------------------------------------------------------
# Outbound payments: wire, ACH, bill pay
# ---------------------------------------------------------------------------

async def send_payment(
    db: AsyncSession,
    caller_id: uuid.UUID,
    request: OutboundPaymentRequest,
    flags: FeatureFlagReader,
) -> TransferResult:
    """
    Execute one outbound payment, dispatching on the request's `kind`.

    Args:
        db: Database session.
        caller_id: The authenticated user's id.
        request: A wire, ACH or bill-pay request.
        flags: Source of the system-wide feature flags.

    Returns:
        TransferResult with the confirmation message, the recorded
        transaction and the account's new balance.

    Raises:
        ValidationError: Missing source/destination or non-positive amount.
        FeatureDisabledError: The family's flag is off or was never set.
        AccountNotFoundError: Unknown source, or one the caller doesn't own.
        TransfersDisabledError: The source account's transfer toggle is off.
        InsufficientFundsError: Balance below the amount.
        PersistenceError / PartialFailureError: Storage failures (see ledger).
    """
    kind = getattr(request, "kind", None)
    family = _FAMILIES.get(kind)
    if family is None:
        raise ValidationError(f"Unsupported payment kind: {kind!r}")

    progress = TransferProgress(f"{kind}_payment")
    _validate_outbound(request)
    progress.advance(TransferStage.VALIDATED)

    if not await flags.get(family.flag):
        logger.warning("%s rejected: %s is off", progress.operation, family.flag)
        raise FeatureDisabledError(family.flag, family.disabled_message)
    progress.advance(TransferStage.FLAG_CHECKED)

    amount_cents = request.amount_cents
    async with ledger_unit(db, request.from_account_id, progress=progress):
        account = await _load_source(db, request.from_account_id, caller_id, progress)
        _check_outbound_allowed(account, amount_cents, progress)

        new_balance = account.cached_balance_cents - amount_cents
        await account_service.set_balance(db, account.id, new_balance)
        progress.advance(TransferStage.BALANCE_MUTATED)

        txn = await transaction_service.record(
            db,
            account_id=account.id,
            txn_type=family.txn_type,
            amount_cents=-amount_cents,
            description=_describe(request),
            related_account_id=None,
            balance_after_cents=new_balance,
        )
        progress.advance(TransferStage.TRANSACTION_LOGGED)

    progress.advance(TransferStage.COMPLETED)
    logger.info(
        "%s of %d cents from account %s completed; balance now %d",
        progress.operation,
        amount_cents,
        account.account_number,
        new_balance,
    )
    return TransferResult(
        message=_confirmation(request),
        transaction=txn,
        balance_cents=new_balance,
    )


async def transfer_wire(
    db: AsyncSession,
    caller_id: uuid.UUID,
    request: WireTransferRequest,
    flags: FeatureFlagReader,
) -> TransferResult:
    """Send a wire transfer (gated by allow_wire_transfer)."""
    return await send_payment(db, caller_id, request, flags)


async def transfer_ach(
    db: AsyncSession,
    caller_id: uuid.UUID,
    request: AchTransferRequest,
    flags: FeatureFlagReader,
) -> TransferResult:
    """Send an ACH transfer (gated by allow_ach)."""
    return await send_payment(db, caller_id, request, flags)


async def pay_bill(
    db: AsyncSession,
    caller_id: uuid.UUID,
    request: BillPayRequest,
    flags: FeatureFlagReader,
) -> TransferResult:
    """Pay a bill (gated by allow_bill_pay)."""
    return await send_payment(db, caller_id, request, flags)


# ---------------------------------------------------------------------------
# Internal transfers
# ---------------------------------------------------------------------------

async def perform_transfer(
    db: AsyncSession,
    caller_id: uuid.UUID,
    from_account_id: uuid.UUID,
    to_account_id: uuid.UUID,
    amount_cents: int,
) -> InternalTransferResult:
    """
    Move money between two accounts held at this bank.

    Debits the source and credits the destination inside one ledger unit,
    writing two paired records:
      - `transfer_out` on the source, related_account_id = destination
      - `transfer_in` on the destination, related_account_id = source
    each stamped with its own post-mutation balance.

    Both accounts are locked in sorted id order, so concurrent A->B and
    B->A transfers cannot deadlock. No global feature flag gates internal
    transfers; the source account's own toggle does.

    Raises:
        ValidationError: Same account on both sides, non-positive amount, or
            a credit that would take the destination above MAX_CENTS.
        AccountNotFoundError: Either account missing, or the source isn't
            the caller's.
        TransfersDisabledError: The source account's transfer toggle is off.
        InsufficientFundsError: Source balance below the amount.
    """
    if from_account_id == to_account_id:
        raise ValidationError("Cannot transfer to the same account")
    _require_positive_cents(amount_cents)

    progress = TransferProgress("internal_transfer")
    progress.advance(TransferStage.VALIDATED)
    # No flag gates internal transfers
    progress.advance(TransferStage.FLAG_CHECKED)

    async with ledger_unit(db, from_account_id, to_account_id, progress=progress):
        # Row locks follow the same order as the unit's asyncio locks
        if from_account_id < to_account_id:
            source = await _load_source(db, from_account_id, caller_id, progress)
            dest = await lock_account(db, to_account_id)
        else:
            dest = await lock_account(db, to_account_id)
            source = await _load_source(db, from_account_id, caller_id, progress)

        _check_outbound_allowed(source, amount_cents, progress)

        new_source_balance = source.cached_balance_cents - amount_cents
        new_dest_balance = dest.cached_balance_cents + amount_cents
        _require_within_limit(new_dest_balance, dest)
        await account_service.set_balance(db, source.id, new_source_balance)
        await account_service.set_balance(db, dest.id, new_dest_balance)
        progress.advance(TransferStage.BALANCE_MUTATED)

        debit_txn = await transaction_service.record(
            db,
            account_id=source.id,
            txn_type=TransactionType.TRANSFER_OUT,
            amount_cents=-amount_cents,
            description=f"Transfer to {dest.account_number}",
            related_account_id=dest.id,
            balance_after_cents=new_source_balance,
        )
        credit_txn = await transaction_service.record(
            db,
            account_id=dest.id,
            txn_type=TransactionType.TRANSFER_IN,
            amount_cents=amount_cents,
            description=f"Transfer from {source.account_number}",
            related_account_id=source.id,
            balance_after_cents=new_dest_balance,
        )
        progress.advance(TransferStage.TRANSACTION_LOGGED)

    progress.advance(TransferStage.COMPLETED)
    logger.info(
        "Internal transfer of %d cents from %s to %s completed",
        amount_cents,
        source.account_number,
        dest.account_number,
    )
    return InternalTransferResult(
        message="Transfer completed successfully.",
        debit_transaction=debit_txn,
        credit_transaction=credit_txn,
        from_balance_cents=new_source_balance,
        to_balance_cents=new_dest_balance,
    )


async def transfer_internal(
    db: AsyncSession,
    caller_id: uuid.UUID,
    request: InternalTransferRequest,
) -> InternalTransferResult:
    """Request-shaped entry point for perform_transfer()."""
    return await perform_transfer(
        db,
        caller_id,
        request.from_account_id,
        request.to_account_id,
        request.amount_cents,
    )


# ---------------------------------------------------------------------------
# Admin adjustments
# ---------------------------------------------------------------------------

async def adjust_balance(
    db: AsyncSession,
    account_id: uuid.UUID,
    amount_cents: int,
    direction: str,
    description: str | None = None,
) -> TransferResult:
    """
    [ADMIN ONLY] Increase or decrease any account's balance.

    Administrative override: ignores feature flags and the account's
    transfer toggle. A decrease still may not take the balance below zero.
    Always records an `admin_adjust` transaction with the signed amount.

    Raises:
        ValidationError: Unknown direction, non-positive amount, or an
            increase that would take the balance above MAX_CENTS.
        AccountNotFoundError: If the account doesn't exist.
        InsufficientFundsError: A decrease larger than the balance.
    """
    if direction not in ("increase", "decrease"):
        raise ValidationError('Direction must be "increase" or "decrease"')
    _require_positive_cents(amount_cents)

    progress = TransferProgress(f"admin_{direction}")
    progress.advance(TransferStage.VALIDATED)

    async with ledger_unit(db, account_id, progress=progress):
        account = await lock_account(db, account_id)
        progress.advance(TransferStage.ACCOUNT_LOADED)

        if direction == "increase":
            signed_amount = amount_cents
        else:
            if account.cached_balance_cents < amount_cents:
                raise InsufficientFundsError(
                    account_id=account.id,
                    requested_cents=amount_cents,
                    available_cents=account.cached_balance_cents,
                )
            signed_amount = -amount_cents
        progress.advance(TransferStage.FUNDS_CHECKED)

        new_balance = account.cached_balance_cents + signed_amount
        _require_within_limit(new_balance, account)
        await account_service.set_balance(db, account.id, new_balance)
        progress.advance(TransferStage.BALANCE_MUTATED)

        txn = await transaction_service.record(
            db,
            account_id=account.id,
            txn_type=TransactionType.ADMIN_ADJUST,
            amount_cents=signed_amount,
            description=description or f"Admin {direction} adjustment",
            balance_after_cents=new_balance,
        )
        progress.advance(TransferStage.TRANSACTION_LOGGED)

    progress.advance(TransferStage.COMPLETED)
    logger.info(
        "Admin %s of %d cents on account %s; balance now %d",
        direction,
        amount_cents,
        account.account_number,
        new_balance,
    )
    return TransferResult(
        message=f"Account balance {direction}d successfully.",
        transaction=txn,
        balance_cents=new_balance,
    )
