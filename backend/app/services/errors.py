"""
Regulation engine errors.

Services raise these; app.main maps them to HTTP responses with the same
``{"detail": ...}`` body that HTTPException produces.
"""


class RegulationError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RegulationError):
    """Referenced regulation, type, project, version or status does not exist."""

    status_code = 404


class ConflictError(RegulationError):
    """Duplicate regulation name within a project, or a racing duplicate insert."""

    status_code = 409


class RegulationValidationError(RegulationError):
    """Config does not satisfy the grammar of the regulation's type."""

    status_code = 400


class UnsupportedRegulationType(RegulationError):
    """Evaluation requested for a type outside the known set."""

    status_code = 500

    def __init__(self, type_name: str):
        super().__init__(f"Unsupported regulation type: {type_name}")
        self.type_name = type_name
