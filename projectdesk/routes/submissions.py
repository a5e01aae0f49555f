"""Submission review endpoints (admin)."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projectdesk.auth import get_current_principal
from projectdesk.database import get_db
from projectdesk.schemas import ApproveRequest, RejectRequest, SubmissionResponse
from projectdesk.services import Principal, ReviewService

router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.get("", response_model=list[SubmissionResponse])
async def list_submissions(
    project_id: UUID | None = Query(None, alias="projectId"),
    principal: Principal | None = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List submissions, optionally for one project."""
    return await ReviewService(db).list_submissions(principal, project_id)


@router.post("/{submission_id}/approve", response_model=SubmissionResponse)
async def approve_submission(
    submission_id: UUID,
    body: ApproveRequest | None = None,
    principal: Principal | None = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    feedback = body.feedback if body else None
    return await ReviewService(db).approve(principal, submission_id, feedback)


@router.post("/{submission_id}/reject", response_model=SubmissionResponse)
async def reject_submission(
    submission_id: UUID,
    body: RejectRequest,
    principal: Principal | None = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await ReviewService(db).reject(principal, submission_id, body.feedback)


__all__ = ["router"]
