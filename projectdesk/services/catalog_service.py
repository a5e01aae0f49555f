"""Read-only project catalog."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from projectdesk.datetime_utils import ensure_utc, utcnow
from projectdesk.exceptions import ProjectNotFoundError
from projectdesk.logging_config import get_logger
from projectdesk.models import Application, Project
from projectdesk.services.access import Operation, Principal, require

logger = get_logger(__name__)


def is_admission_open(project: Project, now: datetime) -> bool:
    """Both the open flag and the window close instant gate self-service apply."""
    return project.is_application_open and now < ensure_utc(
        project.application_window_close
    )


async def load_project(session: AsyncSession, project_id: UUID) -> Project:
    project = await session.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    return project


class ProjectCatalogService:
    """Lists and looks up projects. Projects are never mutated here."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_projects(self, principal: Principal | None = None) -> list[Project]:
        """Return every project in insertion order."""
        require(principal, Operation.LIST_PROJECTS)
        result = await self.session.execute(
            select(Project).order_by(Project.created_at, Project.title)
        )
        return list(result.scalars().all())

    async def get_project(
        self, project_id: UUID, principal: Principal | None = None
    ) -> Project:
        require(principal, Operation.GET_PROJECT)
        return await load_project(self.session, project_id)

    async def list_available(
        self, principal: Principal | None, now: datetime | None = None
    ) -> list[Project]:
        """Projects open for admission that the principal has not applied to."""
        principal = require(principal, Operation.LIST_AVAILABLE_PROJECTS)
        now = ensure_utc(now or utcnow())

        applied = select(Application.project_id).where(
            Application.user_id == principal.id
        )
        result = await self.session.execute(
            select(Project)
            .where(Project.is_application_open.is_(True))
            .where(Project.id.not_in(applied))
            .order_by(Project.created_at, Project.title)
        )
        return [p for p in result.scalars().all() if is_admission_open(p, now)]
