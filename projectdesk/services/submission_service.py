"""Submission filing against an existing application."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from projectdesk.config import Settings, get_settings
from projectdesk.datetime_utils import ensure_utc, utcnow
from projectdesk.exceptions import (
    ApplicationNotFoundError,
    DuplicateSubmissionError,
    SubmissionDeadlinePassedError,
    SubmissionNotFoundError,
    ValidationError,
)
from projectdesk.logging_config import get_logger
from projectdesk.models import Submission
from projectdesk.services.access import Operation, Principal, require
from projectdesk.services.application_service import find_application
from projectdesk.services.locks import KeyedLock, default_locks, submission_key
from projectdesk.services.review_state_machine import PENDING

logger = get_logger(__name__)


@dataclass
class SubmissionPayload:
    description: str
    links: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)


def _clean(values: list[str] | None) -> list[str]:
    """Trim entries and drop the blank ones, keeping order."""
    return [v.strip() for v in values or [] if v and v.strip()]


class SubmissionService:
    def __init__(
        self,
        session: AsyncSession,
        settings: Settings | None = None,
        locks: KeyedLock | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.locks = locks or default_locks

    async def submit(
        self,
        principal: Principal | None,
        project_id: UUID,
        payload: SubmissionPayload,
        now: datetime | None = None,
    ) -> Submission:
        """File the single submission for the principal's application.

        Raises:
            NotAuthenticatedError: No principal.
            ValidationError: Description is blank after trimming.
            ApplicationNotFoundError: The principal never applied.
            DuplicateSubmissionError: A submission already exists.
            SubmissionDeadlinePassedError: Only with ``enforce_personal_deadline``.
        """
        principal = require(principal, Operation.SUBMIT)
        description = (payload.description or "").strip()
        if not description:
            raise ValidationError("Description is required", field="description")
        links = _clean(payload.links)
        files = _clean(payload.files)
        now = ensure_utc(now or utcnow())

        async with self.locks.hold(submission_key(principal.id, project_id)):
            application = await find_application(self.session, principal.id, project_id)
            if application is None:
                raise ApplicationNotFoundError(principal.id, project_id)
            if application.submission_id is not None:
                raise DuplicateSubmissionError(application.id)
            if self.settings.enforce_personal_deadline and now >= ensure_utc(
                application.personal_deadline
            ):
                raise SubmissionDeadlinePassedError(application.id)

            submission = Submission(
                id=uuid4(),
                application_id=application.id,
                project_id=application.project_id,
                user_id=principal.id,
                description=description,
                links=links,
                files=files,
                submitted_at=now,
                status=PENDING,
            )
            self.session.add(submission)
            application_id = application.id
            application.submission_id = submission.id
            try:
                await self.session.commit()
            except IntegrityError:
                await self.session.rollback()
                raise DuplicateSubmissionError(application_id) from None

        logger.info(
            "submission_created",
            submission_id=str(submission.id),
            application_id=str(application_id),
            project_id=str(project_id),
            links=len(links),
            files=len(files),
        )
        return submission

    async def get_own(
        self, principal: Principal | None, project_id: UUID
    ) -> Submission:
        """The principal's submission for a project, with its review status."""
        principal = require(principal, Operation.GET_OWN_SUBMISSION)
        application = await find_application(self.session, principal.id, project_id)
        if application is None:
            raise ApplicationNotFoundError(principal.id, project_id)
        if application.submission_id is None:
            raise SubmissionNotFoundError(f"for application {application.id}")
        submission = await self.session.get(
            Submission, application.submission_id, populate_existing=True
        )
        if submission is None:
            raise SubmissionNotFoundError(application.submission_id)
        return submission
