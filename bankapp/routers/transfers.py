"""
Transfers router — internal account-to-account transfers.

  POST /transfers — Move money between two accounts at this bank

The source must belong to the caller; the destination may belong to
anyone. Both legs (transfer_out and transfer_in) commit together.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.database import get_db
from bankapp.dependencies import get_current_user
from bankapp.models.user import User
from bankapp.schemas.transfer import InternalTransferRequest, InternalTransferResponse
from bankapp.services import transfer_service

router = APIRouter()


@router.post(
    "",
    response_model=InternalTransferResponse,
    summary="Transfer between accounts",
)
async def create_transfer(
    request: InternalTransferRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Transfer money from one of your accounts to any account at this bank.

    Returns both ledger records. Fails with 404 if either account is
    unknown or the source isn't yours, 403 if the source has transfers
    disabled, and 422 if it lacks the funds.
    """
    result = await transfer_service.transfer_internal(db, user.id, request)
    return InternalTransferResponse(
        message=result.message,
        debit_transaction=result.debit_transaction,
        credit_transaction=result.credit_transaction,
        amount_cents=request.amount_cents,
        from_account_id=request.from_account_id,
        to_account_id=request.to_account_id,
    )
