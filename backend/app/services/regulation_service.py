"""
Regulation definitions — create, read, patch and delete rules of a project.

Every mutation validates the config against the (possibly new) type before
writing, commits, and only then schedules the announcement to the upload service.
The response does not wait for delivery, and a failed announcement never
undoes the write.
"""
import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project import Project
from app.models.regulation import Regulation, RegulationStatus
from app.schemas.regulation import RegulationCreate, RegulationUpdate
from app.services.errors import ConflictError, NotFoundError
from app.services.notifier import RegulationChangedEvent, RegulationChangeKind, RegulationChangeNotifier
from app.services.regulation_config import validate_config
from app.services.regulation_types import get_regulation_type

logger = logging.getLogger(__name__)


class RegulationService:
    """Regulation CRUD scoped to one session."""

    def __init__(self, session: AsyncSession, notifier: RegulationChangeNotifier):
        self.session = session
        self.notifier = notifier

    # ── reads ──

    async def list_regulations(self, project_id: int) -> list[Regulation]:
        logger.info("Get all regulations for project with id %s", project_id)
        q = (
            select(Regulation)
            .where(Regulation.project_id == project_id)
            .order_by(Regulation.order, Regulation.id)
        )
        return list((await self.session.execute(q)).scalars().all())

    async def get_regulation(self, project_id: int, *, regulation_id: int | None = None,
                             name: str | None = None) -> Regulation:
        q = select(Regulation).where(Regulation.project_id == project_id)
        if regulation_id is not None:
            q = q.where(Regulation.id == regulation_id)
            ref = f"ID {regulation_id}"
        else:
            q = q.where(Regulation.name == name)
            ref = f"name '{name}'"
        regulation = (await self.session.execute(q)).scalar_one_or_none()
        if regulation is None:
            raise NotFoundError(f"Regulation with {ref} for Project ID {project_id} not found")
        return regulation

    # ── writes ──

    async def create_regulation(self, project_id: int, body: RegulationCreate) -> Regulation:
        logger.info("Create regulation '%s' in project %s", body.name, project_id)

        regulation_type = await get_regulation_type(self.session, body.type_id)
        if await self.session.get(Project, project_id) is None:
            raise NotFoundError(f"Project with id {project_id} not found")

        config = validate_config(regulation_type.name, body.config)
        await self._ensure_name_free(project_id, body.name)

        regulation = Regulation(
            name=body.name,
            display_name=body.display_name,
            description=body.description,
            config=config,
            order=body.order,
            type=regulation_type,
            project_id=project_id,
        )
        self.session.add(regulation)
        await self._commit(project_id, body.name)
        await self.session.refresh(regulation)

        self._announce(RegulationChangeKind.CREATED, regulation)
        return regulation

    async def update_regulation(self, project_id: int, body: RegulationUpdate, *,
                                regulation_id: int | None = None, name: str | None = None) -> Regulation:
        """Patch only the fields present in ``body``; config is re-validated on the merged rule."""
        regulation = await self.get_regulation(project_id, regulation_id=regulation_id, name=name)
        logger.info("Update regulation %s in project %s", regulation.id, project_id)

        changes = body.model_dump(exclude_unset=True)
        # name, type and order are not nullable, an explicit null means "leave as is"
        for key in ("name", "type_id", "order"):
            if key in changes and changes[key] is None:
                del changes[key]

        regulation_type = regulation.type
        if "type_id" in changes:
            regulation_type = await get_regulation_type(self.session, changes.pop("type_id"))

        if "name" in changes and changes["name"] != regulation.name:
            await self._ensure_name_free(project_id, changes["name"])

        merged_config = changes.pop("config", regulation.config)
        config = validate_config(regulation_type.name, merged_config)

        for k, v in changes.items():
            setattr(regulation, k, v)
        regulation.type = regulation_type
        regulation.config = config

        await self._commit(project_id, regulation.name)
        await self.session.refresh(regulation)

        self._announce(RegulationChangeKind.UPDATED, regulation)
        return regulation

    async def delete_regulation(self, project_id: int, *, regulation_id: int | None = None,
                                name: str | None = None) -> Regulation:
        """Delete a regulation together with every status recorded for it."""
        regulation = await self.get_regulation(project_id, regulation_id=regulation_id, name=name)
        logger.info("Delete regulation %s in project %s", regulation.id, project_id)

        await self.session.execute(
            delete(RegulationStatus).where(RegulationStatus.regulation_id == regulation.id)
        )
        await self.session.delete(regulation)
        await self.session.commit()

        self._announce(RegulationChangeKind.DELETED, regulation)
        return regulation

    # ── helpers ──

    async def _ensure_name_free(self, project_id: int, name: str) -> None:
        q = select(Regulation.id).where(Regulation.project_id == project_id, Regulation.name == name)
        if (await self.session.execute(q)).first() is not None:
            raise ConflictError(f"Regulation with name '{name}' already exists in project {project_id}")

    async def _commit(self, project_id: int, name: str) -> None:
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            logger.warning("Regulation write rejected by constraint: %s", exc.orig)
            raise ConflictError(
                f"Regulation with name '{name}' already exists in project {project_id}"
            ) from exc

    def _announce(self, kind: RegulationChangeKind, regulation: Regulation) -> None:
        self.notifier.notify_later(RegulationChangedEvent(
            kind=kind,
            project_id=regulation.project_id,
            regulation_name=regulation.name,
        ))
