"""
FeatureFlag model — system-wide boolean switches.

One row per flag, keyed by name. The transfer orchestrator reads:

  - allow_wire_transfer
  - allow_ach
  - allow_bill_pay

A missing row means the feature is OFF (fail-closed), so a fresh database
allows no outbound payments until an admin turns them on.
"""

from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from bankapp.database import Base


ALLOW_WIRE_TRANSFER = "allow_wire_transfer"
ALLOW_ACH = "allow_ach"
ALLOW_BILL_PAY = "allow_bill_pay"

KNOWN_FLAGS = (ALLOW_WIRE_TRANSFER, ALLOW_ACH, ALLOW_BILL_PAY)


class FeatureFlag(Base):
    __tablename__ = "feature_flags"

    name: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )

    value: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
