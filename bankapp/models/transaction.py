"""
Transaction model — the append-only ledger.

Every balance-affecting operation writes exactly one Transaction row per
account it touches, after the balance mutation it documents and inside the
same ledger unit:

  - Opening an account with money:   one `deposit`
  - Wire / ACH / bill pay:           one `*_sent` / `bill_pay` debit
  - Internal transfer:               `transfer_out` + `transfer_in`, each
                                     pointing at the other account through
                                     `related_account_id`
  - Admin adjustment:                one `admin_adjust`, signed

Key fields:
  - amount_cents: SIGNED. Negative for debits, positive for credits, never 0.
  - balance_after_cents: snapshot of the account balance right after the
    mutation committed with this row. Supplied by the caller, since the
    transaction service does not depend on the account service.
  - date: server-assigned at insert time.

Ordering:
  The integer primary key follows insertion order, so "newest first" is
  `date DESC, id DESC` and stays stable for rows written in the same instant.

Rows are never updated or deleted; the service layer exposes no way to do so.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, BigInteger, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bankapp.database import Base


class TransactionType(str, enum.Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"
    WIRE_TRANSFER_SENT = "wire_transfer_sent"
    ACH_TRANSFER_SENT = "ach_transfer_sent"
    BILL_PAY = "bill_pay"
    ADMIN_ADJUST = "admin_adjust"


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        CheckConstraint("amount_cents <> 0", name="ck_transactions_nonzero_amount"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )

    type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )

    # Signed: negative = money out, positive = money in
    amount_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # The other leg of an internal transfer (NULL for everything else)
    related_account_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=True,
    )

    balance_after_cents: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
    )

    # Indexed: every listing orders by it
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
