"""
User model — the caller identity the ledger trusts.

Credentials belong to the identity subsystem: passwords and token issuance
live elsewhere. The ledger reads this table to:

  - resolve the bearer token's subject into a caller (id + admin flag)
  - show owner identity next to accounts and transactions in admin lists

Admins can also create, edit and deactivate users through
/admin/users (see services/user_service.py). Deactivated users keep
their accounts but can no longer authenticate.

Accounts reference users by `owner_id` without a foreign key. It's a weak
reference: deleting a user never cascades into the ledger.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from bankapp.database import Base


class User(Base):
    __tablename__ = "users"

    # UUID primary key: globally unique, not sequentially guessable
    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )

    full_name: Mapped[str | None] = mapped_column(
        String(200),
        nullable=True,
    )

    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # Admins may use the /admin/* console: flags, toggles, adjustments
    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Soft-disable: deactivated users are rejected at token resolution
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
