"""
Pydantic schemas for inbox messages and flash banners.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class InboxMessageResponse(BaseModel):
    """One message as its recipient sees it."""
    id: int
    subject: str
    body: str
    is_read: bool
    sent_at: datetime

    model_config = {"from_attributes": True}


class SentMessageResponse(InboxMessageResponse):
    """A message as the sending admin sees it."""
    user_id: uuid.UUID


class SendMessageRequest(BaseModel):
    """Request body for POST /admin/messages/inbox."""
    user_id: uuid.UUID
    subject: str = Field(min_length=1, max_length=200)
    body: str = Field(min_length=1)


class FlashMessageCreateRequest(BaseModel):
    """
    Request body for POST /admin/messages/flash.

    `expires_at` without a UTC offset is read as UTC.
    """
    message: str = Field(min_length=1)
    expires_at: datetime | None = None


class FlashMessageResponse(BaseModel):
    id: int
    message: str
    is_active: bool
    expires_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}
