"""
Pydantic schemas for the admin user-management endpoints.

Roles are exchanged as "user" or "admin" and stored as the `is_admin` flag.
"""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class UserCreateRequest(BaseModel):
    """Request body for POST /admin/users."""
    username: str = Field(min_length=1, max_length=100, pattern=r"^\S+$")
    full_name: str = Field(min_length=1, max_length=200)
    email: EmailStr | None = None
    role: Literal["user", "admin"] = "user"


class UserUpdateRequest(BaseModel):
    """
    Request body for PUT /admin/users/{user_id}.

    A full replacement: every field is required except email, which is
    cleared when omitted.
    """
    username: str = Field(min_length=1, max_length=100, pattern=r"^\S+$")
    full_name: str = Field(min_length=1, max_length=200)
    email: EmailStr | None = None
    role: Literal["user", "admin"]


class UserResponse(BaseModel):
    id: uuid.UUID
    username: str
    full_name: str | None
    email: str | None
    is_admin: bool
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
