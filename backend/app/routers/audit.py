"""
Audit trail viewer — /api/v1/audit-log
Read-only access to the change log of regulations and their statuses.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models.audit import AuditLog
from app.schemas.audit import AuditAction, AuditLogOut, AuditLogPage

router = APIRouter(prefix="/api/v1/audit-log", tags=["Audit Trail"])


@router.get("", response_model=AuditLogPage, summary="Browse change log")
async def list_audit_logs(
    module: str | None = Query(None, description="Module filter (regulations, projects)"),
    entity_type: str | None = Query(None),
    entity_id: int | None = Query(None),
    action: AuditAction | None = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200),
    s: AsyncSession = Depends(get_session),
):
    filters = []
    if module:
        filters.append(AuditLog.module == module)
    if entity_type:
        filters.append(AuditLog.entity_type == entity_type)
    if entity_id is not None:
        filters.append(AuditLog.entity_id == entity_id)
    if action:
        filters.append(AuditLog.action == action)

    total = (await s.execute(select(func.count()).select_from(AuditLog).where(*filters))).scalar() or 0

    q = (
        select(AuditLog)
        .where(*filters)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    logs = (await s.execute(q)).scalars().all()
    return AuditLogPage(
        items=[AuditLogOut.model_validate(log) for log in logs],
        total=total, page=page, per_page=per_page,
        pages=(total + per_page - 1) // per_page,
    )
