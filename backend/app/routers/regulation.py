"""
Regulations module — /api/v1/projects/{project_id}/regulations

CRUD for a project's regulations. A regulation is addressed either by id
or, through the /by-name/ alias used by the upload service, by its name.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.schemas.regulation import (
    EvaluationOut,
    EvaluationRequest,
    RegulationCreate,
    RegulationOut,
    RegulationTypeOut,
    RegulationUpdate,
)
from app.services.compliance import evaluate
from app.services.notifier import RegulationChangeNotifier, get_notifier
from app.services.regulation_service import RegulationService
from app.services.regulation_types import list_regulation_types

router = APIRouter(tags=["Regulations"])

_BASE = "/api/v1/projects/{project_id}/regulations"


def get_regulation_service(
    s: AsyncSession = Depends(get_session),
    notifier: RegulationChangeNotifier = Depends(get_notifier),
) -> RegulationService:
    return RegulationService(s, notifier)


# ── types & evaluation ──

@router.get("/api/v1/regulation-types", response_model=list[RegulationTypeOut], summary="List regulation types")
async def get_regulation_types(s: AsyncSession = Depends(get_session)):
    return await list_regulation_types(s)


@router.post("/api/v1/regulations/evaluate", response_model=EvaluationOut, summary="Evaluate a value")
async def evaluate_value(body: EvaluationRequest):
    """Dry-run verdict for a type/config/value triple; nothing is stored."""
    return EvaluationOut(
        type_name=body.type_name,
        config=body.config,
        value=body.value,
        is_compliant=evaluate(body.type_name, body.config, body.value),
    )


# ── LIST / CREATE ──

@router.get(_BASE, response_model=list[RegulationOut], summary="List project regulations")
async def list_regulations(project_id: int, svc: RegulationService = Depends(get_regulation_service)):
    return await svc.list_regulations(project_id)


@router.post(_BASE, response_model=RegulationOut, status_code=201, summary="Create regulation")
async def create_regulation(project_id: int, body: RegulationCreate,
                            svc: RegulationService = Depends(get_regulation_service)):
    return await svc.create_regulation(project_id, body)


# ── by name ──

@router.get(_BASE + "/by-name/{name}", response_model=RegulationOut, summary="Get regulation by name")
async def get_regulation_by_name(project_id: int, name: str,
                                 svc: RegulationService = Depends(get_regulation_service)):
    return await svc.get_regulation(project_id, name=name)


@router.put(_BASE + "/by-name/{name}", response_model=RegulationOut, summary="Edit regulation by name")
async def update_regulation_by_name(project_id: int, name: str, body: RegulationUpdate,
                                    svc: RegulationService = Depends(get_regulation_service)):
    return await svc.update_regulation(project_id, body, name=name)


@router.delete(_BASE + "/by-name/{name}", summary="Delete regulation by name")
async def delete_regulation_by_name(project_id: int, name: str,
                                    svc: RegulationService = Depends(get_regulation_service)):
    regulation = await svc.delete_regulation(project_id, name=name)
    return {"status": "deleted", "id": regulation.id}


# ── by id ──

@router.get(_BASE + "/{regulation_id}", response_model=RegulationOut, summary="Get regulation")
async def get_regulation(project_id: int, regulation_id: int,
                         svc: RegulationService = Depends(get_regulation_service)):
    return await svc.get_regulation(project_id, regulation_id=regulation_id)


@router.put(_BASE + "/{regulation_id}", response_model=RegulationOut, summary="Edit regulation")
async def update_regulation(project_id: int, regulation_id: int, body: RegulationUpdate,
                            svc: RegulationService = Depends(get_regulation_service)):
    return await svc.update_regulation(project_id, body, regulation_id=regulation_id)


@router.delete(_BASE + "/{regulation_id}", summary="Delete regulation")
async def delete_regulation(project_id: int, regulation_id: int,
                            svc: RegulationService = Depends(get_regulation_service)):
    await svc.delete_regulation(project_id, regulation_id=regulation_id)
    return {"status": "deleted", "id": regulation_id}
