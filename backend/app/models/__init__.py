from .base import Base
from .project import Project, UploadVersion
from .regulation import Regulation, RegulationStatus, RegulationType
from .audit import AuditLog

__all__ = [
    "Base",
    "Project", "UploadVersion",
    "RegulationType", "Regulation", "RegulationStatus",
    "AuditLog",
]
