"""Endpoints scoped to the calling user."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectdesk.auth import get_current_principal
from projectdesk.database import get_db
from projectdesk.schemas import ApplicationResponse
from projectdesk.services import ApplicationService, Principal

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/projects", response_model=list[ApplicationResponse])
async def list_my_applications(
    principal: Principal | None = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """The caller's applications, each with its personal deadline."""
    return await ApplicationService(db).list_for_user(principal)


__all__ = ["router"]
