"""
Message service — member inboxes and site-wide flash banners.

Inbox:
  Admins send a message to one user. The recipient lists their inbox
  (newest first) and marks messages read. Nobody else can see or touch
  another user's messages; a foreign message id answers exactly like an
  unknown one.

Flash:
  Admins post short banners with an optional expiry. Anyone, signed in
  or not, can list the active ones. Deactivating a banner is one-way.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.exceptions import NotFoundError
from bankapp.ledger import TransferProgress, ledger_unit
from bankapp.models.message import FlashMessage, UserMessage
from bankapp.models.user import User

logger = logging.getLogger(__name__)


def _as_utc(moment: datetime) -> datetime:
    """Normalize to aware UTC; naive datetimes are taken to be UTC already."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Inbox
# ---------------------------------------------------------------------------

async def send_user_message(
    db: AsyncSession,
    user_id: uuid.UUID,
    subject: str,
    body: str,
) -> UserMessage:
    """
    [ADMIN ONLY] Drop a message into one user's inbox.

    Raises:
        NotFoundError: If the recipient doesn't exist.
        PersistenceError: If the store fails; nothing is written.
    """
    async with ledger_unit(db, progress=TransferProgress("send_user_message")):
        if await db.get(User, user_id) is None:
            raise NotFoundError("Recipient user not found.")

        message = UserMessage(user_id=user_id, subject=subject, body=body, is_read=False)
        db.add(message)
        await db.flush()

    logger.info("Inbox message %d sent to user %s", message.id, user_id)
    return message


async def list_inbox(db: AsyncSession, user_id: uuid.UUID) -> list[UserMessage]:
    """A user's messages, newest first."""
    result = await db.execute(
        select(UserMessage)
        .where(UserMessage.user_id == user_id)
        .order_by(UserMessage.sent_at.desc(), UserMessage.id.desc())
    )
    return list(result.scalars().all())


async def mark_read(
    db: AsyncSession,
    message_id: int,
    user_id: uuid.UUID,
) -> UserMessage:
    """
    Mark one of the caller's messages as read.

    Marking an already-read message again is a no-op, not an error.

    Raises:
        NotFoundError: If the message doesn't exist or isn't the caller's.
    """
    async with ledger_unit(db, progress=TransferProgress("mark_message_read")):
        message = await db.get(UserMessage, message_id)
        if message is None or message.user_id != user_id:
            raise NotFoundError("Message not found")
        message.is_read = True
        await db.flush()

    return message


# ---------------------------------------------------------------------------
# Flash banners
# ---------------------------------------------------------------------------

async def create_flash(
    db: AsyncSession,
    message: str,
    expires_at: datetime | None = None,
) -> FlashMessage:
    """
    [ADMIN ONLY] Post an active banner.

    Raises:
        PersistenceError: If the store fails; nothing is written.
    """
    async with ledger_unit(db, progress=TransferProgress("create_flash")):
        flash = FlashMessage(
            message=message,
            is_active=True,
            expires_at=_as_utc(expires_at) if expires_at is not None else None,
        )
        db.add(flash)
        await db.flush()

    logger.info("Flash message %d created (expires %s)", flash.id, flash.expires_at)
    return flash


async def list_active_flash(
    db: AsyncSession,
    now: datetime | None = None,
) -> list[FlashMessage]:
    """Banners that are active and not yet expired, newest first."""
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    result = await db.execute(
        select(FlashMessage)
        .where(
            FlashMessage.is_active.is_(True),
            or_(FlashMessage.expires_at.is_(None), FlashMessage.expires_at > now),
        )
        .order_by(FlashMessage.created_at.desc(), FlashMessage.id.desc())
    )
    return list(result.scalars().all())


async def deactivate_flash(db: AsyncSession, flash_id: int) -> FlashMessage:
    """
    [ADMIN ONLY] Take a banner down.

    Raises:
        NotFoundError: If the banner doesn't exist or is already inactive.
        PersistenceError: If the store fails; nothing is changed.
    """
    async with ledger_unit(db, progress=TransferProgress("deactivate_flash")):
        flash = await db.get(FlashMessage, flash_id)
        if flash is None or not flash.is_active:
            raise NotFoundError("Flash message not found or already inactive.")
        flash.is_active = False
        await db.flush()

    logger.info("Flash message %d deactivated", flash_id)
    return flash
