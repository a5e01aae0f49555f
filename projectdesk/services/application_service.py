"""Application admission: self-service apply and the per-user listing."""

from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from projectdesk.config import Settings, get_settings
from projectdesk.datetime_utils import ensure_utc, utcnow
from projectdesk.exceptions import AlreadyAppliedError, ApplicationWindowClosedError
from projectdesk.logging_config import get_logger
from projectdesk.models import Application, Project
from projectdesk.services.access import Operation, Principal, require
from projectdesk.services.catalog_service import is_admission_open, load_project
from projectdesk.services.locks import KeyedLock, application_key, default_locks

logger = get_logger(__name__)


async def find_application(
    session: AsyncSession, user_id: str, project_id: UUID
) -> Application | None:
    result = await session.execute(
        select(Application)
        .where(Application.user_id == user_id, Application.project_id == project_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_application(
    session: AsyncSession,
    *,
    user_id: str,
    project: Project,
    now: datetime,
    deadline_days: int,
    assigned_by: str | None = None,
) -> Application:
    """Insert and commit an Application after the uniqueness check.

    Callers must hold the application lock for ``(user_id, project.id)``.
    The unique constraint catches writers in other processes.
    """
    project_id = project.id
    if await find_application(session, user_id, project_id) is not None:
        raise AlreadyAppliedError(user_id, project_id)

    application = Application(
        user_id=user_id,
        project_id=project_id,
        applied_at=now,
        personal_deadline=now + timedelta(days=deadline_days),
        assigned_by=assigned_by,
    )
    session.add(application)
    try:
        await session.commit()
    except IntegrityError:
        # Rollback expires loaded rows; only plain values are used below.
        await session.rollback()
        raise AlreadyAppliedError(user_id, project_id) from None
    return application


class ApplicationService:
    """Admits users to projects."""

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings | None = None,
        locks: KeyedLock | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.locks = locks or default_locks

    async def apply(
        self,
        principal: Principal | None,
        project_id: UUID,
        now: datetime | None = None,
    ) -> Application:
        """Apply the principal to a project whose admission window is open.

        Raises:
            NotAuthenticatedError: No principal.
            ProjectNotFoundError: Unknown project.
            ApplicationWindowClosedError: Flag off or window close reached.
            AlreadyAppliedError: The principal already has an application.
        """
        principal = require(principal, Operation.APPLY)
        now = ensure_utc(now or utcnow())

        async with self.locks.hold(application_key(principal.id, project_id)):
            project = await load_project(self.session, project_id)
            if not is_admission_open(project, now):
                raise ApplicationWindowClosedError(project_id)

            application = await create_application(
                self.session,
                user_id=principal.id,
                project=project,
                now=now,
                deadline_days=self.settings.personal_deadline_days,
            )

        logger.info(
            "application_created",
            application_id=str(application.id),
            project_id=str(project_id),
            user_id=principal.id,
            personal_deadline=application.personal_deadline.isoformat(),
        )
        return application

    async def list_for_user(self, principal: Principal | None) -> list[Application]:
        """Return only the principal's own applications, oldest first."""
        principal = require(principal, Operation.LIST_OWN_APPLICATIONS)
        result = await self.session.execute(
            select(Application)
            .where(Application.user_id == principal.id)
            .order_by(Application.applied_at)
        )
        return list(result.scalars().all())
