"""Exception hierarchy for projectdesk core operations.

Every error carries a machine-readable ``error_type`` and the HTTP status
the REST binding answers with.  The core raises these; only
:func:`problem_detail` knows how they look on the wire.
"""

from typing import Any


class ProjectDeskError(Exception):
    """Base exception for all projectdesk errors."""

    status_code: int = 400

    def __init__(self, message: str, error_type: str = "projectdesk_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(message)


# ---------------------------------------------------------------------------
# Access
# ---------------------------------------------------------------------------


class NotAuthenticatedError(ProjectDeskError):
    """No principal was supplied for an operation that needs one."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message, error_type="not_authenticated")


class NotAuthorizedError(ProjectDeskError):
    """The principal's role is not allowed to perform the operation."""

    status_code = 403

    def __init__(self, operation: str, role: str):
        self.operation = operation
        self.role = role
        super().__init__(
            message=f"Role '{role}' may not perform '{operation}'",
            error_type="not_authorized",
        )


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


class NotFoundError(ProjectDeskError):
    status_code = 404

    def __init__(self, message: str, error_type: str = "not_found"):
        super().__init__(message=message, error_type=error_type)


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: Any):
        self.project_id = project_id
        super().__init__(
            message=f"Project {project_id} not found",
            error_type="project_not_found",
        )


class ApplicationNotFoundError(NotFoundError):
    def __init__(self, user_id: str, project_id: Any):
        self.user_id = user_id
        self.project_id = project_id
        super().__init__(
            message=f"No application by {user_id} for project {project_id}",
            error_type="application_not_found",
        )


class SubmissionNotFoundError(NotFoundError):
    def __init__(self, submission_id: Any):
        self.submission_id = submission_id
        super().__init__(
            message=f"Submission {submission_id} not found",
            error_type="submission_not_found",
        )


# ---------------------------------------------------------------------------
# Lifecycle conflicts
# ---------------------------------------------------------------------------


class AlreadyAppliedError(ProjectDeskError):
    status_code = 409

    def __init__(self, user_id: str, project_id: Any):
        self.user_id = user_id
        self.project_id = project_id
        super().__init__(
            message=f"User {user_id} already has an application for project {project_id}",
            error_type="already_applied",
        )


class ApplicationWindowClosedError(ProjectDeskError):
    status_code = 409

    def __init__(self, project_id: Any):
        self.project_id = project_id
        super().__init__(
            message=f"Applications for project {project_id} are closed",
            error_type="application_window_closed",
        )


class DuplicateSubmissionError(ProjectDeskError):
    status_code = 409

    def __init__(self, application_id: Any):
        self.application_id = application_id
        super().__init__(
            message=f"Application {application_id} already has a submission",
            error_type="duplicate_submission",
        )


class SubmissionDeadlinePassedError(ProjectDeskError):
    """Raised only when the personal deadline policy is enforced."""

    status_code = 409

    def __init__(self, application_id: Any):
        self.application_id = application_id
        super().__init__(
            message=f"Personal deadline for application {application_id} has passed",
            error_type="submission_deadline_passed",
        )


class InvalidTransitionError(ProjectDeskError):
    status_code = 409

    def __init__(self, current: str, target: str, allowed: list[str]):
        self.current = current
        self.target = target
        self.allowed = allowed
        super().__init__(
            message=(
                f"Cannot transition submission from '{current}' to '{target}'. "
                f"Allowed from '{current}': {allowed}"
            ),
            error_type="invalid_transition",
        )


class ValidationError(ProjectDeskError):
    status_code = 422

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message=message, error_type="validation_error")


def problem_detail(error: ProjectDeskError) -> dict[str, Any]:
    """Render an error as an RFC 7807 problem body."""
    return {
        "type": f"/errors/{error.error_type}",
        "title": error.error_type.replace("_", " ").title(),
        "status": error.status_code,
        "detail": error.message,
    }
