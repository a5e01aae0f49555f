"""Administrator assignment of users to projects."""

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from projectdesk.config import Settings, get_settings
from projectdesk.datetime_utils import ensure_utc, utcnow
from projectdesk.exceptions import ValidationError
from projectdesk.logging_config import get_logger
from projectdesk.models import Application
from projectdesk.services.access import Operation, Principal, require
from projectdesk.services.application_service import create_application
from projectdesk.services.catalog_service import load_project
from projectdesk.services.locks import KeyedLock, application_key, default_locks

logger = get_logger(__name__)


class AdminAssignmentService:
    def __init__(
        self,
        session: AsyncSession,
        settings: Settings | None = None,
        locks: KeyedLock | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.locks = locks or default_locks

    async def assign(
        self,
        principal: Principal | None,
        user_id: str,
        project_id: UUID,
        now: datetime | None = None,
    ) -> Application:
        """Create an application for *user_id*, ignoring the admission window.

        Uniqueness per (user, project) still holds.
        """
        principal = require(principal, Operation.ASSIGN)
        user_id = (user_id or "").strip()
        if not user_id:
            raise ValidationError("userId is required", field="userId")
        now = ensure_utc(now or utcnow())

        async with self.locks.hold(application_key(user_id, project_id)):
            project = await load_project(self.session, project_id)
            application = await create_application(
                self.session,
                user_id=user_id,
                project=project,
                now=now,
                deadline_days=self.settings.personal_deadline_days,
                assigned_by=principal.id,
            )

        logger.info(
            "application_assigned",
            application_id=str(application.id),
            project_id=str(project_id),
            user_id=user_id,
            assigned_by=principal.id,
        )
        return application
