"""Administrator endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from projectdesk.auth import get_current_principal
from projectdesk.database import get_db
from projectdesk.schemas import ApplicationResponse, AssignRequest
from projectdesk.services import AdminAssignmentService, Principal

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/projects/add-user",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_user_to_project(
    body: AssignRequest,
    principal: Principal | None = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Assign a user to a project regardless of its admission window."""
    return await AdminAssignmentService(db).assign(
        principal, body.user_id, body.project_id
    )


__all__ = ["router"]
