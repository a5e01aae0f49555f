"""Project endpoints: catalog, apply, submit."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from projectdesk.auth import get_current_principal
from projectdesk.database import get_db
from projectdesk.schemas import (
    ApplicationResponse,
    ProjectResponse,
    SubmissionResponse,
    SubmitRequest,
)
from projectdesk.services import (
    ApplicationService,
    Principal,
    ProjectCatalogService,
    SubmissionService,
)
from projectdesk.services.submission_service import SubmissionPayload

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    principal: Principal | None = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List every project in the catalog."""
    return await ProjectCatalogService(db).list_projects(principal)


@router.get("/available", response_model=list[ProjectResponse])
async def list_available_projects(
    principal: Principal | None = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Open projects the caller has not applied to yet."""
    return await ProjectCatalogService(db).list_available(principal)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: UUID,
    principal: Principal | None = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectCatalogService(db).get_project(project_id, principal)


@router.post(
    "/{project_id}/apply",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def apply_to_project(
    project_id: UUID,
    principal: Principal | None = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Apply to a project while its admission window is open."""
    return await ApplicationService(db).apply(principal, project_id)


@router.post(
    "/{project_id}/submit",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_project(
    project_id: UUID,
    body: SubmitRequest,
    principal: Principal | None = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """File the caller's single submission for a project."""
    payload = SubmissionPayload(
        description=body.description, links=body.links, files=body.files
    )
    return await SubmissionService(db).submit(principal, project_id, payload)


@router.get("/{project_id}/submission", response_model=SubmissionResponse)
async def get_own_submission(
    project_id: UUID,
    principal: Principal | None = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """The caller's submission for a project, with review status and feedback."""
    return await SubmissionService(db).get_own(principal, project_id)


__all__ = ["router"]
