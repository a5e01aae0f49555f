"""Administrator review of submissions."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from projectdesk.datetime_utils import ensure_utc, utcnow
from projectdesk.exceptions import (
    InvalidTransitionError,
    SubmissionNotFoundError,
    ValidationError,
)
from projectdesk.logging_config import get_logger
from projectdesk.models import Submission
from projectdesk.services.access import Operation, Principal, require
from projectdesk.services.locks import KeyedLock, default_locks, review_key
from projectdesk.services.review_state_machine import (
    APPROVED,
    REJECTED,
    validate_transition,
)

logger = get_logger(__name__)


class ReviewService:
    """Moves pending submissions to approved or rejected."""

    def __init__(self, session: AsyncSession, locks: KeyedLock | None = None):
        self.session = session
        self.locks = locks or default_locks

    async def list_submissions(
        self, principal: Principal | None, project_id: UUID | None = None
    ) -> list[Submission]:
        require(principal, Operation.LIST_SUBMISSIONS)
        query = select(Submission)
        if project_id is not None:
            query = query.where(Submission.project_id == project_id)
        result = await self.session.execute(query.order_by(Submission.submitted_at))
        return list(result.scalars().all())

    async def approve(
        self,
        principal: Principal | None,
        submission_id: UUID,
        feedback: str | None = None,
        now: datetime | None = None,
    ) -> Submission:
        """Approve a pending submission; blank feedback is stored as None."""
        principal = require(principal, Operation.APPROVE)
        return await self._transition(
            principal,
            submission_id,
            APPROVED,
            (feedback or "").strip() or None,
            now,
        )

    async def reject(
        self,
        principal: Principal | None,
        submission_id: UUID,
        feedback: str | None,
        now: datetime | None = None,
    ) -> Submission:
        """Reject a pending submission. Feedback is mandatory."""
        principal = require(principal, Operation.REJECT)
        feedback = (feedback or "").strip()
        if not feedback:
            raise ValidationError("Feedback is required to reject", field="feedback")
        return await self._transition(principal, submission_id, REJECTED, feedback, now)

    async def _transition(
        self,
        principal: Principal,
        submission_id: UUID,
        target: str,
        feedback: str | None,
        now: datetime | None,
    ) -> Submission:
        now = ensure_utc(now or utcnow())

        async with self.locks.hold(review_key(submission_id)):
            result = await self.session.execute(
                select(Submission)
                .where(Submission.id == submission_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            submission = result.scalar_one_or_none()
            if submission is None:
                await self.session.rollback()
                raise SubmissionNotFoundError(submission_id)

            try:
                validate_transition(submission.status, target)
            except InvalidTransitionError:
                # Release the row lock taken by FOR UPDATE.
                await self.session.rollback()
                raise

            submission.status = target
            submission.feedback = feedback
            submission.reviewed_by = principal.id
            submission.reviewed_at = now
            await self.session.commit()

        logger.info(
            f"submission_{target}",
            submission_id=str(submission_id),
            reviewed_by=principal.id,
            has_feedback=feedback is not None,
        )
        return submission
