"""Core lifecycle services.

Every operation takes an explicit :class:`Principal` and, for time-dependent
checks, an optional ``now`` supplied by the caller.
"""

from projectdesk.services.access import Operation, Principal, Role, require
from projectdesk.services.admin_service import AdminAssignmentService
from projectdesk.services.application_service import ApplicationService
from projectdesk.services.catalog_service import ProjectCatalogService
from projectdesk.services.review_service import ReviewService
from projectdesk.services.submission_service import SubmissionService

__all__ = [
    "AdminAssignmentService",
    "ApplicationService",
    "Operation",
    "Principal",
    "ProjectCatalogService",
    "ReviewService",
    "Role",
    "SubmissionService",
    "require",
]
