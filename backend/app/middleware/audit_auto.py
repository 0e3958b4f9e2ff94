"""
Automatic audit logging for SQLAlchemy model changes.

Hooks into SQLAlchemy ORM events to capture INSERT, UPDATE, and DELETE
operations and persist them as AuditLog entries without requiring manual
calls in every router.

Usage:
    from app.middleware.audit_auto import install_audit_listeners, set_audit_context

    # At application startup (main.py):
    install_audit_listeners()

    # In request middleware or dependency:
    set_audit_context(user_id=int(request.headers["X-User-Id"]), ip_address=request.client.host)
"""
from __future__ import annotations

import contextvars
import logging
from datetime import datetime
from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from app.models.audit import AuditLog
from app.models.base import Base

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Context variables – set per-request so event listeners can read them.
# ---------------------------------------------------------------------------
_ctx_user_id: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "_ctx_user_id", default=None
)
_ctx_ip_address: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "_ctx_ip_address", default=None
)


def set_audit_context(
    *,
    user_id: int | None = None,
    ip_address: str | None = None,
) -> None:
    """Store the current request's user and IP so audit listeners can use them."""
    _ctx_user_id.set(user_id)
    _ctx_ip_address.set(ip_address)


def get_audit_context() -> tuple[int | None, str | None]:
    """Return the (user_id, ip_address) stored for the current request."""
    return _ctx_user_id.get(), _ctx_ip_address.get()


# ---------------------------------------------------------------------------
# Tables to exclude from automatic auditing.
# ---------------------------------------------------------------------------
_EXCLUDED_TABLES: set[str] = {"audit_log", "alembic_version"}

# ---------------------------------------------------------------------------
# Table name -> module name mapping.
#
# Unlisted tables are logged under their own name.
# ---------------------------------------------------------------------------
_TABLE_MODULE_MAP: dict[str, str] = {
    # Regulation engine tables
    "regulation_types": "regulations",
    "regulations": "regulations",
    "regulation_statuses": "regulations",
    # Tables owned by the project side
    "projects": "projects",
    "upload_versions": "projects",
}



def _resolve_module(table_name: str) -> str:
    return _TABLE_MODULE_MAP.get(table_name, table_name)


def _get_entity_id(obj: Any) -> int:
    """Return the primary key value for an ORM instance (first column of composite keys)."""
    pk_cols = inspect(type(obj)).primary_key
    if not pk_cols:
        return 0
    val = getattr(obj, pk_cols[0].key, None)
    return val if val is not None else 0


def _audited(objects) -> list[Any]:
    return [
        obj for obj in objects
        if isinstance(obj, Base) and obj.__tablename__ not in _EXCLUDED_TABLES
    ]


def _entry(obj: Any, action: str, **fields: Any) -> dict[str, Any]:
    table_name = obj.__tablename__
    return {
        "module": _resolve_module(table_name),
        "action": action,
        "entity_type": table_name,
        "entity_id": fields.pop("entity_id", None),
        "field_name": None,
        "old_value": None,
        "new_value": None,
        **fields,
    }


def _column_changes(obj: Any) -> list[tuple[str, Any, Any]]:
    """(column, old, new) for every column attribute changed on ``obj``."""
    insp = inspect(obj)
    column_keys = {c.key for c in insp.mapper.column_attrs}
    changed = []
    for attr in insp.attrs:
        if attr.key not in column_keys:
            continue
        hist = attr.history
        if not hist.has_changes():
            continue
        changed.append((
            attr.key,
            hist.deleted[0] if hist.deleted else None,
            hist.added[0] if hist.added else None,
        ))
    return changed


# ---------------------------------------------------------------------------
# Event listeners
# ---------------------------------------------------------------------------

def _before_flush(session: Session, flush_context: Any, instances: Any) -> None:
    """Collect audit entries while dirty objects still carry their old values."""
    if session.info.get("_flushing_audit"):
        return

    pending: list[dict[str, Any]] = []

    for obj in _audited(session.dirty):
        if not session.is_modified(obj, include_collections=False):
            continue
        entity_id = _get_entity_id(obj)
        for key, old_val, new_val in _column_changes(obj):
            pending.append(_entry(
                obj, "update",
                entity_id=entity_id,
                field_name=key,
                old_value=str(old_val) if old_val is not None else None,
                new_value=str(new_val) if new_val is not None else None,
            ))

    # PK of new rows is only known after the flush
    for obj in _audited(session.new):
        pending.append(_entry(obj, "create", _obj_ref=obj))

    for obj in _audited(session.deleted):
        pending.append(_entry(obj, "delete", entity_id=_get_entity_id(obj)))

    session.info["_audit_pending"] = pending


def _after_flush(session: Session, flush_context: Any) -> None:
    """Turn the collected entries into AuditLog rows (flushed with the next pass)."""
    if session.info.get("_flushing_audit"):
        return

    pending: list[dict[str, Any]] = session.info.pop("_audit_pending", [])
    if not pending:
        return

    user_id, ip_address = get_audit_context()
    now = datetime.utcnow()

    session.info["_flushing_audit"] = True
    try:
        for entry in pending:
            obj_ref = entry.pop("_obj_ref", None)
            if entry["entity_id"] is None:
                entry["entity_id"] = _get_entity_id(obj_ref) if obj_ref is not None else 0
            session.add(AuditLog(user_id=user_id, ip_address=ip_address, created_at=now, **entry))
    except Exception:
        logger.exception("Failed to create automatic audit log entries")
    finally:
        session.info["_flushing_audit"] = False


def install_audit_listeners() -> None:
    """Register SQLAlchemy ORM event listeners for automatic audit logging."""
    if event.contains(Session, "before_flush", _before_flush):
        return
    event.listen(Session, "before_flush", _before_flush)
    event.listen(Session, "after_flush", _after_flush)
    logger.info("Automatic audit logging listeners installed")
