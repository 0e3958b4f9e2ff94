from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


# ── Response ──

class RegulationTypeOut(BaseModel):
    id: int
    name: str
    description: str | None = None

    model_config = {"from_attributes": True}


class RegulationOut(BaseModel):
    id: int
    name: str
    display_name: str | None = None
    description: str | None = None
    config: str | None = None
    order: int = 0
    type: RegulationTypeOut
    project_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RegulationStatusOut(BaseModel):
    id: int
    regulation_id: int
    version_id: str
    value: str | None = None
    report_details: Any = None
    is_compliant: bool | None = None
    created_at: datetime
    updated_at: datetime


class EvaluationOut(BaseModel):
    type_name: str
    config: str | None = None
    value: str | None = None
    is_compliant: bool


# ── Request ──

class RegulationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    display_name: str | None = Field(None, max_length=300)
    description: str | None = None
    type_id: int
    config: str | None = Field(None, max_length=500)
    order: int = 0


class RegulationUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    display_name: str | None = Field(None, max_length=300)
    description: str | None = None
    type_id: int | None = None
    config: str | None = Field(None, max_length=500)
    order: int | None = None


class RegulationStatusValueSet(BaseModel):
    value: str
    report_details: Any = None


class RegulationComplianceSet(BaseModel):
    is_compliant: bool


class RegulationReport(BaseModel):
    value: str
    report_details: Any = None


class EvaluationRequest(BaseModel):
    type_name: str = Field(..., min_length=1)
    config: str | None = None
    value: str | None = None
