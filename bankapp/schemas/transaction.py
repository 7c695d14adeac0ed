"""
Pydantic schemas for transaction listings.

All monetary amounts are in integer cents. `amount_cents` is signed:
negative for money out, positive for money in.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel


class TransactionResponse(BaseModel):
    """Public representation of a ledger record."""
    id: int
    account_id: uuid.UUID
    type: str
    amount_cents: int
    description: str | None
    related_account_id: uuid.UUID | None
    balance_after_cents: int | None
    date: datetime

    model_config = {"from_attributes": True}


class AdminTransactionResponse(TransactionResponse):
    """A ledger record with its account number and owner, for the admin console."""
    account_number: str | None
    owner_username: str | None
    owner_full_name: str | None
