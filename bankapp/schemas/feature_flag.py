"""
Pydantic schemas for the admin feature-flag endpoints.

Flags are exchanged as a flat name -> bool mapping, e.g.
    {"allow_wire_transfer": true, "allow_ach": false, "allow_bill_pay": true}
"""

from pydantic import BaseModel


class FeatureFlagsUpdateRequest(BaseModel):
    """
    Request body for PUT /admin/feature-flags.

    Every field is optional; only the flags present are changed.
    """
    allow_wire_transfer: bool | None = None
    allow_ach: bool | None = None
    allow_bill_pay: bool | None = None

    def changes(self) -> dict[str, bool]:
        return self.model_dump(exclude_none=True)
