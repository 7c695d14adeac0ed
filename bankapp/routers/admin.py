"""
Admin router — organization-wide visibility and administrative overrides.

All endpoints require an admin user.

Endpoints:
  GET    /admin/accounts                           — List ALL accounts with owners
  GET    /admin/accounts/{account_id}/transactions — Any account's ledger
  PATCH  /admin/accounts/{account_id}/transfers    — Per-account transfer toggle
  PUT    /admin/accounts/{account_id}/balance      — Increase/decrease a balance
  GET    /admin/transactions                       — ALL transactions org-wide
  GET    /admin/feature-flags                      — Current flag values
  PUT    /admin/feature-flags                      — Update some or all flags
  GET    /admin/users                              — List all users
  POST   /admin/users                              — Create a user
  GET    /admin/users/{user_id}                    — One user
  PUT    /admin/users/{user_id}                    — Replace profile and role
  PATCH  /admin/users/{user_id}/toggle-status      — Activate / deactivate
  POST   /admin/messages/inbox                     — Message one user
  POST   /admin/messages/flash                     — Post a banner
  PUT    /admin/messages/flash/{flash_id}/deactivate — Take a banner down

Balance adjustments bypass feature flags and transfer toggles, but still
write an `admin_adjust` ledger record and may not overdraw the account.

By consolidating all admin routes in one router, we avoid route-ordering
conflicts that arise when multiple routers share a prefix and have
overlapping parameterized paths.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.database import get_db
from bankapp.dependencies import get_feature_flags, require_admin
from bankapp.models.user import User
from bankapp.schemas.account import (
    AccountResponse,
    AdminAccountResponse,
    BalanceAdjustRequest,
    BalanceAdjustResponse,
    TransfersToggleRequest,
)
from bankapp.schemas.feature_flag import FeatureFlagsUpdateRequest
from bankapp.schemas.message import (
    FlashMessageCreateRequest,
    FlashMessageResponse,
    SendMessageRequest,
    SentMessageResponse,
)
from bankapp.schemas.transaction import AdminTransactionResponse, TransactionResponse
from bankapp.schemas.user import UserCreateRequest, UserResponse, UserUpdateRequest
from bankapp.services import (
    account_service,
    message_service,
    transaction_service,
    transfer_service,
    user_service,
)
from bankapp.services.feature_flag_service import FeatureFlagStore

router = APIRouter()


# ---------------------------------------------------------------------------
# Account admin endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/accounts",
    response_model=list[AdminAccountResponse],
    summary="[Admin] List all accounts",
)
async def admin_list_all_accounts(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List every account, newest first, with its owner's identity."""
    rows = await account_service.list_all_accounts(db)
    return [
        AdminAccountResponse(
            **AccountResponse.model_validate(row.account).model_dump(),
            owner_username=row.owner_username,
            owner_full_name=row.owner_full_name,
        )
        for row in rows
    ]


@router.get(
    "/accounts/{account_id}/transactions",
    response_model=list[TransactionResponse],
    summary="[Admin] List any account's transactions",
)
async def admin_list_account_transactions(
    account_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await account_service.get_account(db, account_id)
    return await transaction_service.list_for_account(db, account_id)


@router.patch(
    "/accounts/{account_id}/transfers",
    response_model=AccountResponse,
    summary="[Admin] Enable or disable transfers for an account",
)
async def admin_toggle_transfers(
    account_id: uuid.UUID,
    request: TransfersToggleRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Switch outbound transfers on or off for one account.

    A disabled account rejects wire, ACH, bill-pay and internal transfers
    from it with 403. Incoming transfers and admin adjustments still work.
    """
    return await account_service.set_transfers_enabled(db, account_id, request.enabled)


@router.put(
    "/accounts/{account_id}/balance",
    response_model=BalanceAdjustResponse,
    summary="[Admin] Adjust an account's balance",
)
async def admin_adjust_balance(
    account_id: uuid.UUID,
    request: BalanceAdjustRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await transfer_service.adjust_balance(
        db,
        account_id,
        request.amount_cents,
        request.direction,
        request.description,
    )
    return BalanceAdjustResponse(
        message=result.message,
        new_balance_cents=result.balance_cents,
        transaction_id=result.transaction.id,
    )


# ---------------------------------------------------------------------------
# Transaction admin endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/transactions",
    response_model=list[AdminTransactionResponse],
    summary="[Admin] List all transactions",
)
async def admin_list_all_transactions(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    List every transaction across all accounts, newest first.

    Each row carries its account number and the owner's identity, which
    is what an auditor needs to trace a movement without a second lookup.
    """
    rows = await transaction_service.list_all(db)
    return [
        AdminTransactionResponse(
            **TransactionResponse.model_validate(row.transaction).model_dump(),
            account_number=row.account_number,
            owner_username=row.owner_username,
            owner_full_name=row.owner_full_name,
        )
        for row in rows
    ]


# ---------------------------------------------------------------------------
# Feature flags
# ---------------------------------------------------------------------------

@router.get(
    "/feature-flags",
    response_model=dict[str, bool],
    summary="[Admin] Get feature flags",
)
async def admin_get_feature_flags(
    admin: User = Depends(require_admin),
    flags: FeatureFlagStore = Depends(get_feature_flags),
):
    return await flags.get_all()


@router.put(
    "/feature-flags",
    response_model=dict[str, bool],
    summary="[Admin] Update feature flags",
)
async def admin_update_feature_flags(
    request: FeatureFlagsUpdateRequest,
    admin: User = Depends(require_admin),
    flags: FeatureFlagStore = Depends(get_feature_flags),
):
    """
    Update any subset of the outbound-payment flags.

    Flags left out of the body keep their current value. An empty body is
    rejected with 400.
    """
    return await flags.set_many(request.changes())


# ---------------------------------------------------------------------------
# User management
# ---------------------------------------------------------------------------

@router.get(
    "/users",
    response_model=list[UserResponse],
    summary="[Admin] List all users",
)
async def admin_list_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.list_users(db)


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="[Admin] Create a user",
)
async def admin_create_user(
    request: UserCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Create an active user with the given role.

    No credentials are set here; the identity subsystem issues tokens.
    A taken username answers 409.
    """
    return await user_service.create_user(
        db,
        username=request.username,
        full_name=request.full_name,
        email=request.email,
        role=request.role,
    )


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="[Admin] Get a user",
)
async def admin_get_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, user_id)


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="[Admin] Update a user",
)
async def admin_update_user(
    user_id: uuid.UUID,
    request: UserUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_user(
        db,
        user_id,
        username=request.username,
        full_name=request.full_name,
        email=request.email,
        role=request.role,
    )


@router.patch(
    "/users/{user_id}/toggle-status",
    response_model=UserResponse,
    summary="[Admin] Activate or deactivate a user",
)
async def admin_toggle_user_status(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Flip a user between active and inactive.

    An inactive user's tokens are rejected with 401; their accounts and
    history stay as they are.
    """
    return await user_service.toggle_user_status(db, user_id)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

@router.post(
    "/messages/inbox",
    response_model=SentMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="[Admin] Send a message to a user's inbox",
)
async def admin_send_message(
    request: SendMessageRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.send_user_message(
        db, request.user_id, request.subject, request.body
    )


@router.post(
    "/messages/flash",
    response_model=FlashMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="[Admin] Create a flash message",
)
async def admin_create_flash(
    request: FlashMessageCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.create_flash(db, request.message, request.expires_at)


@router.put(
    "/messages/flash/{flash_id}/deactivate",
    response_model=FlashMessageResponse,
    summary="[Admin] Deactivate a flash message",
)
async def admin_deactivate_flash(
    flash_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.deactivate_flash(db, flash_id)
