"""
SQLAlchemy ORM models package.

All models are imported here so that:
  1. Base.metadata knows every table before create_all() runs
  2. Other modules can import from bankapp.models directly
"""

from bankapp.models.user import User  # noqa: F401
from bankapp.models.account import Account, AccountType  # noqa: F401
from bankapp.models.transaction import Transaction, TransactionType  # noqa: F401
from bankapp.models.feature_flag import FeatureFlag  # noqa: F401
from bankapp.models.message import FlashMessage, UserMessage  # noqa: F401
