"""
Account model — a bank account owned by a user.

Each account has:
  - A unique account number (random 10-digit string, never a leading zero)
  - A type: "checking" or "savings"
  - A cached balance in integer cents
  - A per-account transfer toggle (admins can freeze outbound money movement)

Balance management:
  `cached_balance_cents` is the single source of truth for the balance. It is
  only ever written through account_service.set_balance(), and every write
  happens inside a ledger unit together with the Transaction row that
  documents it.

  A CHECK constraint at the database level enforces that the balance can
  never go negative. The orchestrator checks funds before debiting; the
  constraint is the last line if that check is ever bypassed.

Why integer cents?
  Floating-point numbers introduce rounding errors (0.1 + 0.2 != 0.3).
  Integer cents make all arithmetic exact: $10.99 is stored as 1099.
  Money columns are 64-bit, so no balance or amount may exceed MAX_CENTS.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, BigInteger, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bankapp.database import Base


# Largest value a signed 64-bit money column can hold
MAX_CENTS = 2**63 - 1


class AccountType(str, enum.Enum):
    """Recognized account products. Inherits from str so it serializes to JSON."""
    CHECKING = "checking"
    SAVINGS = "savings"


class Account(Base):
    __tablename__ = "accounts"

    # Database-level constraint: balance can never be negative
    __table_args__ = (
        CheckConstraint(
            "cached_balance_cents >= 0",
            name="ck_accounts_non_negative_balance",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Owning user. Weak reference (no FK): the ledger never cascades on users
    owner_id: Mapped[uuid.UUID] = mapped_column(
        nullable=False,
        index=True,
    )

    account_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
    )

    account_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AccountType.CHECKING.value,
    )

    cached_balance_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    # Per-account override, independent of the global feature flags
    transfers_enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
