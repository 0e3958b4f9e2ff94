"""
Regulation status store — one row per (regulation, version) pair.

Writes go through a single ``INSERT ... ON CONFLICT`` statement keyed by
``regulation_version_unique_constraint``, so concurrent reporters for the
same pair never create a second row; the last committed write wins for
each field it touches.

``set_status_value`` only records the reported value. It does not derive
``is_compliant``; callers that want a verdict use ``report_status`` (value +
evaluation in one write) or ``set_compliance_status``.
"""
import logging
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.audit import audit_log
from app.models.project import UploadVersion
from app.models.regulation import Regulation, RegulationStatus
from app.schemas.regulation import RegulationStatusOut
from app.services.compliance import evaluate
from app.services.errors import NotFoundError

logger = logging.getLogger(__name__)

_UNIQUE_CONSTRAINT = "regulation_version_unique_constraint"


# ── upsert ──

def _upsert_statement(dialect_name: str, values: dict[str, Any], update_columns: list[str]):
    """Build the dialect's native insert-or-update for a status row."""
    now = datetime.utcnow()
    values = {**values, "created_at": now, "updated_at": now}

    if dialect_name in ("mysql", "mariadb"):
        stmt = mysql.insert(RegulationStatus).values(**values)
        assignments = {c: stmt.inserted[c] for c in update_columns}
        return stmt.on_duplicate_key_update(updated_at=now, **assignments)

    if dialect_name == "postgresql":
        stmt = postgresql.insert(RegulationStatus).values(**values)
        assignments = {c: stmt.excluded[c] for c in update_columns}
        return stmt.on_conflict_do_update(constraint=_UNIQUE_CONSTRAINT, set_={**assignments, "updated_at": now})

    if dialect_name == "sqlite":
        stmt = sqlite.insert(RegulationStatus).values(**values)
        assignments = {c: stmt.excluded[c] for c in update_columns}
        return stmt.on_conflict_do_update(
            index_elements=["regulation_id", "version_id"],
            set_={**assignments, "updated_at": now},
        )

    raise RuntimeError(f"No atomic upsert available for database dialect '{dialect_name}'")


def _pair_filter(regulation: Regulation, version: UploadVersion):
    return (RegulationStatus.regulation_id == regulation.id, RegulationStatus.version_id == version.id)


async def _upsert(session: AsyncSession, regulation: Regulation, version: UploadVersion,
                  fields: dict[str, Any]) -> None:
    # Previous values are only read for the audit trail, the write itself is one statement
    previous = (await session.execute(
        select(*(getattr(RegulationStatus, c) for c in fields)).where(*_pair_filter(regulation, version))
    )).first()
    old = previous._asdict() if previous is not None else {}

    stmt = _upsert_statement(
        session.get_bind().dialect.name,
        {"regulation_id": regulation.id, "version_id": version.id, **fields},
        list(fields),
    )
    await session.execute(stmt)

    status_id = (await session.execute(
        select(RegulationStatus.id).where(*_pair_filter(regulation, version))
    )).scalar_one()
    await audit_log(
        session, module="regulations", action="update" if previous is not None else "create",
        entity_type="regulation_statuses", entity_id=status_id,
        changes={name: (old.get(name), val) for name, val in fields.items()},
    )
    await session.commit()


# ── lookups ──

async def _get_regulation_and_version(session: AsyncSession, project_id: int, regulation_id: int,
                                      version_id: str) -> tuple[Regulation, UploadVersion]:
    logger.debug("Get regulation %s and version %s", regulation_id, version_id)
    regulation = (await session.execute(
        select(Regulation).where(Regulation.id == regulation_id, Regulation.project_id == project_id)
    )).scalar_one_or_none()
    version = (await session.execute(
        select(UploadVersion).where(UploadVersion.catalog_id == version_id, UploadVersion.project_id == project_id)
    )).scalar_one_or_none()

    if version is None:
        raise NotFoundError(f"Version with ID {version_id} not found")
    if regulation is None:
        raise NotFoundError(f"Regulation with ID {regulation_id} for Project ID {project_id} not found")
    return regulation, version


def _status_query(project_id: int):
    return (
        select(RegulationStatus, UploadVersion.catalog_id)
        .join(Regulation, RegulationStatus.regulation_id == Regulation.id)
        .join(UploadVersion, RegulationStatus.version_id == UploadVersion.id)
        .where(Regulation.project_id == project_id, UploadVersion.project_id == project_id)
        .execution_options(populate_existing=True)
    )


def _status_out(status: RegulationStatus, catalog_id: str) -> RegulationStatusOut:
    return RegulationStatusOut(
        id=status.id,
        regulation_id=status.regulation_id,
        version_id=catalog_id,
        value=status.value,
        report_details=status.report_details,
        is_compliant=status.is_compliant,
        created_at=status.created_at,
        updated_at=status.updated_at,
    )


# ── public operations ──

async def get_status(session: AsyncSession, project_id: int, regulation_id: int,
                     version_id: str) -> RegulationStatusOut:
    q = _status_query(project_id).where(
        RegulationStatus.regulation_id == regulation_id,
        UploadVersion.catalog_id == version_id,
    )
    row = (await session.execute(q)).first()
    if row is None:
        raise NotFoundError(
            f"Regulation status with regulationId {regulation_id} for Project ID {project_id} "
            f"and versionId {version_id} not found"
        )
    return _status_out(*row)


async def list_statuses_for_version(session: AsyncSession, project_id: int,
                                    version_id: str) -> list[RegulationStatusOut]:
    """Statuses of a version, ordered by the owning regulation's ``order``."""
    logger.info("Get regulation statuses for project id %s and version id %s", project_id, version_id)
    q = (
        _status_query(project_id)
        .where(UploadVersion.catalog_id == version_id)
        .order_by(Regulation.order, Regulation.id)
    )
    rows = (await session.execute(q)).all()
    logger.debug("Regulation statuses found: %d", len(rows))
    return [_status_out(status, catalog_id) for status, catalog_id in rows]


async def set_status_value(session: AsyncSession, project_id: int, regulation_id: int, version_id: str,
                           value: str, report_details: Any = None) -> RegulationStatusOut:
    """Record the raw reported value; ``is_compliant`` keeps whatever it had."""
    logger.info("Set regulation status value: regulation=%s version=%s", regulation_id, version_id)
    regulation, version = await _get_regulation_and_version(session, project_id, regulation_id, version_id)
    await _upsert(session, regulation, version, {"value": value, "report_details": report_details})
    return await get_status(session, project_id, regulation_id, version_id)


async def set_compliance_status(session: AsyncSession, project_id: int, regulation_id: int,
                                version_id: str, is_compliant: bool) -> RegulationStatusOut:
    """Record the verdict only; value and report details keep whatever they had."""
    logger.info("Set compliance status: regulation=%s version=%s compliant=%s",
                regulation_id, version_id, is_compliant)
    regulation, version = await _get_regulation_and_version(session, project_id, regulation_id, version_id)
    await _upsert(session, regulation, version, {"is_compliant": is_compliant})
    return await get_status(session, project_id, regulation_id, version_id)


async def report_status(session: AsyncSession, project_id: int, regulation_id: int, version_id: str,
                        value: str, report_details: Any = None) -> RegulationStatusOut:
    """Evaluate ``value`` against the regulation and store value and verdict in one write."""
    regulation, version = await _get_regulation_and_version(session, project_id, regulation_id, version_id)
    is_compliant = evaluate(regulation.type.name, regulation.config, value)
    logger.info("Report regulation %s for version %s: value=%s compliant=%s",
                regulation.name, version_id, value, is_compliant)
    await _upsert(session, regulation, version, {
        "value": value,
        "report_details": report_details,
        "is_compliant": is_compliant,
    })
    return await get_status(session, project_id, regulation_id, version_id)


async def delete_status(session: AsyncSession, project_id: int, regulation_id: int, version_id: str) -> None:
    logger.info("Delete regulation status with regulationId %s for Project ID %s and versionId %s",
                regulation_id, project_id, version_id)
    regulation, version = await _get_regulation_and_version(session, project_id, regulation_id, version_id)

    status_id = (await session.execute(
        select(RegulationStatus.id).where(*_pair_filter(regulation, version))
    )).scalar_one_or_none()
    if status_id is None:
        raise NotFoundError(
            f"Regulation status with regulationId {regulation_id} for Project ID {project_id} "
            f"and versionId {version_id} not found"
        )

    await session.execute(delete(RegulationStatus).where(RegulationStatus.id == status_id))
    await audit_log(
        session, module="regulations", action="delete",
        entity_type="regulation_statuses", entity_id=status_id,
    )
    await session.commit()
