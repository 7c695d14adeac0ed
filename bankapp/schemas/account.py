"""
Pydantic schemas for Account endpoints.

These schemas define the API contract for opening, listing and
administering accounts. All monetary amounts are expressed in integer cents.
"""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from bankapp.models.account import MAX_CENTS


class AccountCreateRequest(BaseModel):
    """Request body for POST /accounts."""
    account_type: Literal["checking", "savings"] = Field(
        default="checking",
        description="Type of bank account to open",
    )
    initial_balance_cents: int = Field(
        default=0,
        ge=0,
        le=MAX_CENTS,
        description="Opening deposit in cents (recorded as a deposit transaction)",
    )


class AccountResponse(BaseModel):
    """Public representation of a bank account."""
    id: uuid.UUID
    owner_id: uuid.UUID
    account_type: str
    account_number: str
    cached_balance_cents: int
    transfers_enabled: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AdminAccountResponse(AccountResponse):
    """An account plus its owner's identity, for the admin console."""
    owner_username: str | None
    owner_full_name: str | None


class TransfersToggleRequest(BaseModel):
    """Request body for PATCH /admin/accounts/{account_id}/transfers."""
    enabled: bool


class BalanceAdjustRequest(BaseModel):
    """Request body for PUT /admin/accounts/{account_id}/balance."""
    amount_cents: int = Field(
        gt=0,
        le=MAX_CENTS,
        description="Adjustment size in cents (must be positive)",
    )
    direction: Literal["increase", "decrease"]
    description: str | None = Field(None, max_length=255)


class BalanceAdjustResponse(BaseModel):
    """Response body for an admin balance adjustment."""
    message: str
    new_balance_cents: int
    transaction_id: int
