from datetime import datetime
from typing import Literal

from pydantic import BaseModel

AuditAction = Literal["create", "update", "delete"]


class AuditLogOut(BaseModel):
    """One field-level change. ``field_name`` is empty for whole-row creates and deletes."""
    id: int
    created_at: datetime
    action: AuditAction
    module: str
    entity_type: str
    entity_id: int
    field_name: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    # Reported by the gateway, unset for internal writes (seeding, scripts)
    user_id: int | None = None
    ip_address: str | None = None

    model_config = {"from_attributes": True}


class AuditLogPage(BaseModel):
    items: list[AuditLogOut]
    total: int
    page: int
    per_page: int
    pages: int
