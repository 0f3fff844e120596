from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from .common import PERMISSION_FIELDS, PermissionLevel


class PermissionUpdate(BaseModel):
    """Partial permission change. Only fields that were explicitly set are applied."""

    can_view: Optional[bool] = None
    can_edit: Optional[bool] = None
    can_manage_companions: Optional[bool] = None

    def changes(self) -> dict[str, bool]:
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if v is not None}


class Permissions(BaseModel):
    """Resolved rights of one actor on one entity."""

    model_config = ConfigDict(frozen=True)

    can_view: bool = False
    can_edit: bool = False
    can_manage_companions: bool = False

    @classmethod
    def from_row(cls, row: Any) -> "Permissions":
        """Build from any row carrying the three boolean columns."""
        return cls(
            can_view=bool(row.can_view),
            can_edit=bool(row.can_edit),
            can_manage_companions=bool(row.can_manage_companions),
        )

    def allows(self, level: PermissionLevel) -> bool:
        return getattr(self, PERMISSION_FIELDS[PermissionLevel(level)])


NO_PERMISSIONS = Permissions()
FULL_PERMISSIONS = Permissions(can_view=True, can_edit=True, can_manage_companions=True)
