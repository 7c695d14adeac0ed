"""
Transactions router — outbound payments.

  POST /transactions/wire     — Wire transfer     (flag: allow_wire_transfer)
  POST /transactions/ach      — ACH transfer      (flag: allow_ach)
  POST /transactions/billpay  — Bill payment      (flag: allow_bill_pay)
  POST /transactions          — Any of the above, chosen by the body's `kind`

Each endpoint validates its own request model and hands it to the
transfer service, which runs the shared debit algorithm. A 200 response
means the debit and its ledger record are both committed.
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.database import get_db
from bankapp.dependencies import get_current_user, get_feature_flags
from bankapp.models.user import User
from bankapp.schemas.transfer import (
    AchTransferRequest,
    BillPayRequest,
    OutboundPaymentRequest,
    PaymentResponse,
    WireTransferRequest,
)
from bankapp.services import transfer_service
from bankapp.services.feature_flag_service import FeatureFlagStore

router = APIRouter()


def _to_response(result: transfer_service.TransferResult) -> PaymentResponse:
    return PaymentResponse(
        message=result.message,
        transaction=result.transaction,
        balance_cents=result.balance_cents,
    )


@router.post(
    "/wire",
    response_model=PaymentResponse,
    summary="Send a wire transfer",
)
async def send_wire(
    request: WireTransferRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    flags: FeatureFlagStore = Depends(get_feature_flags),
):
    """
    Debit one of your accounts for an outgoing wire.

    Rejected with 403 when wires are switched off system-wide or the
    account's own transfer toggle is off, and with 422 on insufficient funds.
    """
    result = await transfer_service.transfer_wire(db, user.id, request, flags)
    return _to_response(result)


@router.post(
    "/ach",
    response_model=PaymentResponse,
    summary="Send an ACH transfer",
)
async def send_ach(
    request: AchTransferRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    flags: FeatureFlagStore = Depends(get_feature_flags),
):
    result = await transfer_service.transfer_ach(db, user.id, request, flags)
    return _to_response(result)


@router.post(
    "/billpay",
    response_model=PaymentResponse,
    summary="Pay a bill",
)
async def pay_bill(
    request: BillPayRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    flags: FeatureFlagStore = Depends(get_feature_flags),
):
    result = await transfer_service.pay_bill(db, user.id, request, flags)
    return _to_response(result)


@router.post(
    "",
    response_model=PaymentResponse,
    summary="Send any outbound payment",
)
async def send_outbound_payment(
    request: Annotated[OutboundPaymentRequest, Body(discriminator="kind")],
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    flags: FeatureFlagStore = Depends(get_feature_flags),
):
    """
    One endpoint for every outbound family.

    The body must carry `kind` ("wire", "ach" or "bill_pay"); the rest of
    the body is validated against that family's model.
    """
    result = await transfer_service.send_payment(db, user.id, request, flags)
    return _to_response(result)
