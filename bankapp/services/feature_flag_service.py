"""
Feature-flag service — system-wide switches for outbound payment families.

The transfer orchestrator never reads flags from global state. It is handed
an object implementing FeatureFlagReader, which makes the flag source
explicit and lets tests substitute a plain in-memory double.

Fail-closed:
  get() returns False for any flag that has no row. A fresh database
  therefore allows no wire, ACH or bill-pay traffic until an admin enables it.
"""

import logging
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.exceptions import ValidationError
from bankapp.ledger import TransferProgress, ledger_unit
from bankapp.models.feature_flag import FeatureFlag, KNOWN_FLAGS

logger = logging.getLogger(__name__)


class FeatureFlagReader(Protocol):
    """The read side the orchestrator depends on."""

    async def get(self, name: str) -> bool: ...


class FeatureFlagStore:
    """SQLAlchemy-backed flag store, bound to one request's session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, name: str) -> bool:
        """Return the flag's value, or False when it was never set."""
        flag = await self.db.get(FeatureFlag, name)
        return bool(flag.value) if flag is not None else False

    async def get_all(self) -> dict[str, bool]:
        """
        All flags as a name -> bool mapping.

        Every known flag is present (False when unset), overlaid with
        whatever rows are stored.
        """
        flags = {name: False for name in KNOWN_FLAGS}
        result = await self.db.execute(select(FeatureFlag))
        for flag in result.scalars().all():
            flags[flag.name] = bool(flag.value)
        return flags

    async def set(self, name: str, value: bool) -> dict[str, bool]:
        """[ADMIN ONLY] Upsert a single flag and commit."""
        return await self.set_many({name: value})

    async def set_many(self, values: dict[str, bool]) -> dict[str, bool]:
        """
        [ADMIN ONLY] Upsert several flags in one commit.

        Raises:
            ValidationError: If the mapping is empty or names an unknown flag.
            PersistenceError: If the store fails; nothing is changed.
        """
        if not values:
            raise ValidationError("No valid settings provided for update.")
        unknown = sorted(set(values) - set(KNOWN_FLAGS))
        if unknown:
            raise ValidationError(f"Unknown feature flag(s): {', '.join(unknown)}")

        async with ledger_unit(self.db, progress=TransferProgress("set_feature_flags")):
            for name, value in values.items():
                flag = await self.db.get(FeatureFlag, name)
                if flag is None:
                    self.db.add(FeatureFlag(name=name, value=value))
                else:
                    flag.value = value

        logger.info("Feature flags updated: %s", values)
        return await self.get_all()
