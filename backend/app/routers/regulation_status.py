"""
Regulation statuses — per-version results of a project's regulations.

    PUT    .../regulations/{id}/versions/{version_id}/value       raw value only
    PUT    .../regulations/{id}/versions/{version_id}/compliance  verdict only
    POST   .../regulations/{id}/versions/{version_id}/report      value + evaluated verdict
    GET    .../regulations/{id}/versions/{version_id}/status
    DELETE .../regulations/{id}/versions/{version_id}/status
    GET    /api/v1/projects/{project_id}/versions/{version_id}/regulation-statuses

``version_id`` is the version's catalog id.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.schemas.regulation import (
    RegulationComplianceSet,
    RegulationReport,
    RegulationStatusOut,
    RegulationStatusValueSet,
)
from app.services import regulation_status as store

router = APIRouter(tags=["Regulation statuses"])

_PAIR = "/api/v1/projects/{project_id}/regulations/{regulation_id}/versions/{version_id}"


@router.get(
    "/api/v1/projects/{project_id}/versions/{version_id}/regulation-statuses",
    response_model=list[RegulationStatusOut],
    summary="Regulation statuses of a version",
)
async def list_version_statuses(project_id: int, version_id: str, s: AsyncSession = Depends(get_session)):
    return await store.list_statuses_for_version(s, project_id, version_id)


@router.put(_PAIR + "/value", response_model=RegulationStatusOut, summary="Set reported value")
async def set_status_value(project_id: int, regulation_id: int, version_id: str,
                           body: RegulationStatusValueSet, s: AsyncSession = Depends(get_session)):
    return await store.set_status_value(
        s, project_id, regulation_id, version_id, body.value, body.report_details,
    )


@router.put(_PAIR + "/compliance", response_model=RegulationStatusOut, summary="Set compliance verdict")
async def set_compliance_status(project_id: int, regulation_id: int, version_id: str,
                                body: RegulationComplianceSet, s: AsyncSession = Depends(get_session)):
    return await store.set_compliance_status(s, project_id, regulation_id, version_id, body.is_compliant)


@router.post(_PAIR + "/report", response_model=RegulationStatusOut, summary="Report and evaluate a value")
async def report_status(project_id: int, regulation_id: int, version_id: str,
                        body: RegulationReport, s: AsyncSession = Depends(get_session)):
    return await store.report_status(
        s, project_id, regulation_id, version_id, body.value, body.report_details,
    )


@router.get(_PAIR + "/status", response_model=RegulationStatusOut, summary="Get regulation status")
async def get_status(project_id: int, regulation_id: int, version_id: str,
                     s: AsyncSession = Depends(get_session)):
    return await store.get_status(s, project_id, regulation_id, version_id)


@router.delete(_PAIR + "/status", summary="Delete regulation status")
async def delete_status(project_id: int, regulation_id: int, version_id: str,
                        s: AsyncSession = Depends(get_session)):
    await store.delete_status(s, project_id, regulation_id, version_id)
    return {"status": "deleted", "regulation_id": regulation_id, "version_id": version_id}
