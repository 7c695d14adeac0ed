"""
User service — admin management of the identities the ledger trusts.

This module handles:
  - Listing and fetching users
  - Creating users (no credentials; those belong to the identity subsystem)
  - Editing username, full name, email and role
  - Toggling `is_active`, which is how a user is locked out

Usernames are unique. A create or rename that would collide raises
ConflictError before anything is written.

Every function here is ADMIN ONLY; the router layer enforces that.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.exceptions import ConflictError, NotFoundError
from bankapp.ledger import TransferProgress, ledger_unit
from bankapp.models.user import User

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ADMIN = "admin"


async def _username_taken(
    db: AsyncSession,
    username: str,
    exclude_id: uuid.UUID | None = None,
) -> bool:
    query = select(User.id).where(User.username == username)
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    result = await db.execute(query)
    return result.scalar_one_or_none() is not None


async def list_users(db: AsyncSession) -> list[User]:
    """[ADMIN ONLY] Every user, oldest first."""
    result = await db.execute(select(User).order_by(User.created_at, User.username))
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    """
    [ADMIN ONLY] Fetch one user by id.

    Raises:
        NotFoundError: If no such user exists.
    """
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def create_user(
    db: AsyncSession,
    username: str,
    full_name: str,
    email: str | None = None,
    role: str = ROLE_USER,
) -> User:
    """
    [ADMIN ONLY] Create an active user.

    Raises:
        ConflictError: If the username is already taken.
        PersistenceError: If the store fails; nothing is written.
    """
    async with ledger_unit(db, progress=TransferProgress("create_user")):
        if await _username_taken(db, username):
            raise ConflictError("Username already exists")

        user = User(
            username=username,
            full_name=full_name,
            email=email,
            is_admin=role == ROLE_ADMIN,
            is_active=True,
        )
        db.add(user)
        await db.flush()

    logger.info("Created %s %s (%s)", role, user.username, user.id)
    return user


async def update_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    username: str,
    full_name: str,
    email: str | None,
    role: str,
) -> User:
    """
    [ADMIN ONLY] Replace a user's profile fields and role.

    Raises:
        NotFoundError: If no such user exists.
        ConflictError: If the new username belongs to someone else.
        PersistenceError: If the store fails; nothing is changed.
    """
    async with ledger_unit(db, progress=TransferProgress("update_user")):
        user = await get_user(db, user_id)
        if username != user.username and await _username_taken(db, username, exclude_id=user.id):
            raise ConflictError("New username is already taken.")

        user.username = username
        user.full_name = full_name
        user.email = email
        user.is_admin = role == ROLE_ADMIN
        await db.flush()

    logger.info("Updated user %s (%s), role now %s", user.username, user.id, role)
    return user


async def toggle_user_status(db: AsyncSession, user_id: uuid.UUID) -> User:
    """
    [ADMIN ONLY] Flip a user between active and inactive.

    An inactive user's bearer tokens stop resolving at once; their accounts
    and history are untouched.

    Raises:
        NotFoundError: If no such user exists.
        PersistenceError: If the store fails; nothing is changed.
    """
    async with ledger_unit(db, progress=TransferProgress("toggle_user_status")):
        user = await get_user(db, user_id)
        user.is_active = not user.is_active
        await db.flush()

    logger.info(
        "User %s %s",
        user.username,
        "activated" if user.is_active else "deactivated",
    )
    return user
