"""
Audit trail helper — for writes that bypass the ORM unit of work.

Core statements (the status upserts, bulk deletes) never reach the
before_flush/after_flush listeners in audit_auto, so the code issuing them
records the change explicitly:

    from app.middleware.audit import audit_log
    await audit_log(s, module="regulations", action="update",
                    entity_type="regulation_statuses", entity_id=regulation.id,
                    changes={"value": (None, "95")})
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.audit_auto import get_audit_context
from app.models.audit import AuditLog


async def audit_log(
    session: AsyncSession,
    *,
    module: str,
    action: str,
    entity_type: str,
    entity_id: int,
    changes: dict[str, tuple[object | None, object | None]] | None = None,
):
    """
    Record one or more audit entries in the caller's transaction.

    changes: dict of field_name -> (old_value, new_value)
    If changes is None, a single entry with no field detail is created.
    User and IP come from the current request's audit context.
    """
    user_id, ip_address = get_audit_context()
    now = datetime.utcnow()
    if changes:
        for field_name, (old_val, new_val) in changes.items():
            session.add(AuditLog(
                user_id=user_id,
                module=module,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                field_name=field_name,
                old_value=str(old_val) if old_val is not None else None,
                new_value=str(new_val) if new_val is not None else None,
                ip_address=ip_address,
                created_at=now,
            ))
    else:
        session.add(AuditLog(
            user_id=user_id,
            module=module,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            ip_address=ip_address,
            created_at=now,
        ))
