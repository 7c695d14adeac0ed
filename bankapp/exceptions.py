"""
Custom exception classes and FastAPI exception handlers.

Why custom exceptions?
  The service layer raises domain-specific errors (like InsufficientFundsError)
  without importing HTTP concepts. The handler layer then translates these
  into proper HTTP responses.

  This separation means:
    - Service code is testable without HTTP
    - Error responses are consistent across all endpoints
    - Adding new error types is straightforward

Exception hierarchy:
    BankAPIError (base)
    ├── ValidationError          — malformed or missing input
    ├── NotFoundError            — unknown user or message
    │   └── AccountNotFoundError — unknown account (or one the caller may not see)
    ├── ConflictError            — unique value already taken (usernames)
    ├── ForbiddenError           — caller doesn't own the resource / isn't admin
    ├── FeatureDisabledError     — a system-wide feature flag is off
    ├── TransfersDisabledError   — the per-account transfer toggle is off
    ├── InsufficientFundsError   — debit larger than the balance
    ├── PersistenceError         — storage failure, rolled back cleanly
    └── PartialFailureError      — storage failure whose outcome is unknown

Persistence and partial failures carry an operator-facing detail that is
logged, while the client only ever sees a generic "try again" message.
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


GENERIC_RETRY_MESSAGE = "The request could not be completed. Please try again later."


def format_cents(cents: int) -> str:
    """Render integer cents as a dollar string, e.g. 10050 -> "$100.50"."""
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    return f"{sign}${whole:,}.{frac:02d}"


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class BankAPIError(Exception):
    """Base exception for all ledger domain errors."""

    status_code = 400
    error_type = "bank_api_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class ValidationError(BankAPIError):
    """Raised when a request is missing fields or carries invalid values."""

    status_code = 400
    error_type = "validation_error"


class NotFoundError(BankAPIError):
    """Raised when a requested user or message does not exist."""

    status_code = 404
    error_type = "not_found"


class AccountNotFoundError(NotFoundError):
    """Raised when a requested account does not exist."""

    status_code = 404
    error_type = "account_not_found"

    def __init__(self, account_id: uuid.UUID, detail: str | None = None):
        self.account_id = account_id
        super().__init__(detail or f"Account {account_id} not found")


class ConflictError(BankAPIError):
    """Raised when a create or update would duplicate a unique value."""

    status_code = 409
    error_type = "conflict"


class ForbiddenError(BankAPIError):
    """Raised when a user attempts to access a resource they don't own."""

    status_code = 403
    error_type = "forbidden"

    def __init__(self, detail: str = "You do not have access to this resource"):
        super().__init__(detail)


class FeatureDisabledError(BankAPIError):
    """Raised when a transfer family is switched off system-wide."""

    status_code = 403
    error_type = "feature_disabled"

    def __init__(self, flag_name: str, detail: str | None = None):
        self.flag_name = flag_name
        super().__init__(detail or f"{flag_name} is currently disabled by system admin.")


class TransfersDisabledError(BankAPIError):
    """Raised when the source account has its transfer toggle switched off."""

    status_code = 403
    error_type = "transfers_disabled"

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(
            f"Transfers are currently disabled for your account {account_number}. "
            "Please contact support."
        )


class InsufficientFundsError(BankAPIError):
    """
    Raised when a debit would cause a negative balance.

    Attributes:
        account_id: The account that lacks sufficient funds.
        requested_cents: The amount the caller tried to debit.
        available_cents: The current balance of the account.
    """

    status_code = 422
    error_type = "insufficient_funds"

    def __init__(
        self,
        account_id: uuid.UUID,
        requested_cents: int,
        available_cents: int,
    ):
        self.account_id = account_id
        self.requested_cents = requested_cents
        self.available_cents = available_cents
        super().__init__(
            f"Insufficient funds: need {format_cents(requested_cents)}, "
            f"have {format_cents(available_cents)}"
        )


class PersistenceError(BankAPIError):
    """
    Raised when the store fails and the ledger unit was rolled back.

    Nothing was applied, so the caller may retry. The core itself never does.
    """

    status_code = 503
    error_type = "persistence_error"


class PartialFailureError(BankAPIError):
    """
    Raised when a balance was mutated but the unit could not be rolled back.

    The stored state may hold a debit without its transaction record. This is
    always logged at CRITICAL and must reach an operator.
    """

    status_code = 500
    error_type = "partial_failure"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Every domain exception maps to its class-level status code and a
    consistent JSON body: {"detail": "...", "error_type": "..."}.

    This is called once during app startup in main.py.
    """

    @app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(
        request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,  # Unprocessable: valid request, business rule rejects it
            content={
                "detail": exc.detail,
                "error_type": exc.error_type,
                "requested_cents": exc.requested_cents,
                "available_cents": exc.available_cents,
            },
        )

    @app.exception_handler(PersistenceError)
    @app.exception_handler(PartialFailureError)
    async def storage_failure_handler(
        request: Request, exc: BankAPIError
    ) -> JSONResponse:
        # The specific cause was already logged where it happened
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": GENERIC_RETRY_MESSAGE, "error_type": exc.error_type},
        )

    @app.exception_handler(BankAPIError)
    async def bank_api_error_handler(
        request: Request, exc: BankAPIError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error_type": exc.error_type},
        )
