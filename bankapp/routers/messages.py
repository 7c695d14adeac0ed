"""
Messages router — member inbox and public flash banners.

  GET    /messages/inbox                   — Own inbox, newest first
  PUT    /messages/inbox/{message_id}/read — Mark one own message read
  GET    /messages/flash                   — Active banners (no auth)

A message that belongs to someone else answers 404, the same as an
unknown id.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.database import get_db
from bankapp.dependencies import get_current_user
from bankapp.models.user import User
from bankapp.schemas.message import FlashMessageResponse, InboxMessageResponse
from bankapp.services import message_service

router = APIRouter()


@router.get(
    "/inbox",
    response_model=list[InboxMessageResponse],
    summary="List your inbox",
)
async def list_inbox(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.list_inbox(db, user.id)


@router.put(
    "/inbox/{message_id}/read",
    response_model=InboxMessageResponse,
    summary="Mark a message as read",
)
async def mark_message_read(
    message_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.mark_read(db, message_id, user.id)


@router.get(
    "/flash",
    response_model=list[FlashMessageResponse],
    summary="List active flash messages",
)
async def list_flash_messages(db: AsyncSession = Depends(get_db)):
    """Public: banners shown on every page, including the sign-in page."""
    return await message_service.list_active_flash(db)
