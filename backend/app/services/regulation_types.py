"""
Regulation type catalog — the closed set of types a regulation can have.

The rows are seeded once at startup (see ``seed_regulation_types``) and are
read-only afterwards. Config and value grammars live in code, keyed by
``RegulationKind``; the table only gives each type an id and description.
"""
import enum
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.regulation import RegulationType
from app.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class RegulationKind(str, enum.Enum):
    BOOLEAN = "Boolean"
    THRESHOLD = "Threshold"
    JUNIT = "JUnit"

    @classmethod
    def lookup(cls, name: str | None) -> "RegulationKind | None":
        """Return the kind for an exact type name, or None for unknown names."""
        try:
            return cls(name)
        except ValueError:
            return None


DEFAULT_REGULATION_TYPES: list[dict[str, str]] = [
    {
        "name": RegulationKind.BOOLEAN.value,
        "description": "A regulation that expects a boolean value, valid values: true",
    },
    {
        "name": RegulationKind.THRESHOLD.value,
        "description": "A regulation that expects a value to meet a threshold",
    },
    {
        "name": RegulationKind.JUNIT.value,
        "description": "A regulation that validates JUnit XML test results, "
                       "valid value is threshold for pass percentage",
    },
]


async def seed_regulation_types(session: AsyncSession) -> list[str]:
    """Insert every well-known type that is missing, keyed by name.

    Existing rows are left as they are (descriptions included), so running
    the seed any number of times yields one row per name. Returns the names
    that were created.
    """
    logger.info("Seeding regulation types")
    existing = set((await session.execute(select(RegulationType.name))).scalars().all())

    created: list[str] = []
    for entry in DEFAULT_REGULATION_TYPES:
        if entry["name"] in existing:
            continue
        logger.debug("Creating regulation type: %s", entry["name"])
        session.add(RegulationType(**entry))
        created.append(entry["name"])

    if created:
        await session.commit()
    return created


async def list_regulation_types(session: AsyncSession) -> list[RegulationType]:
    logger.debug("Get all regulation types")
    q = select(RegulationType).order_by(RegulationType.id)
    return list((await session.execute(q)).scalars().all())


async def get_regulation_type(session: AsyncSession, type_id: int) -> RegulationType:
    rt = await session.get(RegulationType, type_id)
    if rt is None:
        raise NotFoundError(f"Regulation type with id {type_id} not found")
    return rt
