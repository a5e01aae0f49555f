"""Pydantic request/response schemas for the REST binding.

Wire field names are camelCase; requests also accept snake_case.
"""

from datetime import datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from projectdesk.datetime_utils import ensure_utc

UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
        alias_generator=to_camel,
    )


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class SubmitRequest(BaseSchema):
    description: str = ""
    links: list[str] = Field(default_factory=list)
    files: list[str] = Field(default_factory=list)


class ApproveRequest(BaseSchema):
    feedback: str | None = None


class RejectRequest(BaseSchema):
    feedback: str | None = None


class AssignRequest(BaseSchema):
    user_id: str = Field(..., min_length=1)
    project_id: UUID


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ProjectResponse(BaseSchema):
    id: UUID
    title: str
    description: str
    project_deadline: UTCDateTime
    application_window_close: UTCDateTime
    is_application_open: bool
    created_at: UTCDateTime


class ApplicationResponse(BaseSchema):
    id: UUID
    user_id: str
    project_id: UUID
    applied_at: UTCDateTime
    personal_deadline: UTCDateTime
    submission_id: UUID | None = None
    assigned_by: str | None = None


class SubmissionResponse(BaseSchema):
    id: UUID
    application_id: UUID
    project_id: UUID
    user_id: str
    description: str
    links: list[str]
    files: list[str]
    submitted_at: UTCDateTime
    status: Literal["pending", "approved", "rejected"]
    feedback: str | None = None
    reviewed_by: str | None = None
    reviewed_at: UTCDateTime | None = None


class HealthResponse(BaseSchema):
    status: str
    service: str
