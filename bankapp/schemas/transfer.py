"""
Pydantic schemas for money-movement endpoints.

Each transfer family has its own request model carrying a `kind` tag:

    WireTransferRequest      kind="wire"
    AchTransferRequest       kind="ach"
    BillPayRequest           kind="bill_pay"
    InternalTransferRequest  (account to account inside this bank)

OutboundPaymentRequest is the tagged union of the three outbound families,
accepted by POST /transactions; the orchestrator dispatches on `kind`.
Validation (required fields, positive amounts) happens here at the
boundary, so malformed bodies are rejected with 422 before any service
code runs.

All monetary amounts are in integer cents (e.g., $10.50 = 1050).
"""

import uuid
from typing import Literal, Union

from pydantic import BaseModel, Field, model_validator

from bankapp.models.account import MAX_CENTS
from bankapp.schemas.transaction import TransactionResponse


class _PaymentBase(BaseModel):
    model_config = {"str_strip_whitespace": True}

    from_account_id: uuid.UUID
    amount_cents: int = Field(gt=0, le=MAX_CENTS, description="Amount in cents (must be positive)")


class WireTransferRequest(_PaymentBase):
    """Request body for POST /transactions/wire."""
    kind: Literal["wire"] = "wire"
    beneficiary_account_number: str = Field(min_length=1, max_length=34)
    beneficiary_name: str | None = Field(None, max_length=100)
    beneficiary_bank_name: str | None = Field(None, max_length=100)
    routing_number: str | None = Field(None, max_length=20)
    purpose: str | None = Field(None, max_length=140)


class AchTransferRequest(_PaymentBase):
    """Request body for POST /transactions/ach."""
    kind: Literal["ach"] = "ach"
    beneficiary_account_number: str = Field(min_length=1, max_length=34)
    beneficiary_name: str | None = Field(None, max_length=100)
    beneficiary_account_type: str | None = Field(None, max_length=20)
    routing_number: str | None = Field(None, max_length=20)


class BillPayRequest(_PaymentBase):
    """Request body for POST /transactions/billpay."""
    kind: Literal["bill_pay"] = "bill_pay"
    payee_name: str = Field(min_length=1, max_length=100)
    payee_account_number: str | None = Field(None, max_length=34)


# Any outbound payment; routers discriminate on `kind`
OutboundPaymentRequest = Union[WireTransferRequest, AchTransferRequest, BillPayRequest]


class InternalTransferRequest(BaseModel):
    """Request body for POST /transfers."""
    from_account_id: uuid.UUID
    to_account_id: uuid.UUID
    amount_cents: int = Field(gt=0, le=MAX_CENTS, description="Amount in cents (must be positive)")

    @model_validator(mode="after")
    def accounts_must_differ(self):
        """Cannot transfer money to the same account."""
        if self.from_account_id == self.to_account_id:
            raise ValueError("Cannot transfer to the same account")
        return self


class PaymentResponse(BaseModel):
    """Response body for a completed wire, ACH or bill payment."""
    message: str
    transaction: TransactionResponse
    balance_cents: int


class InternalTransferResponse(BaseModel):
    """Response body for a completed internal transfer."""
    message: str
    debit_transaction: TransactionResponse
    credit_transaction: TransactionResponse
    amount_cents: int
    from_account_id: uuid.UUID
    to_account_id: uuid.UUID
