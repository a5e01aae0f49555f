"""Central capability guard.

Each operation declares the roles allowed to run it in ``REQUIRED_ROLES``;
services call :func:`require` before touching any data.
"""

from dataclasses import dataclass
from enum import Enum

from projectdesk.exceptions import NotAuthenticatedError, NotAuthorizedError


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """The authenticated actor behind a call."""

    id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Operation(str, Enum):
    LIST_PROJECTS = "list_projects"
    GET_PROJECT = "get_project"
    LIST_AVAILABLE_PROJECTS = "list_available_projects"
    APPLY = "apply"
    LIST_OWN_APPLICATIONS = "list_own_applications"
    SUBMIT = "submit"
    GET_OWN_SUBMISSION = "get_own_submission"
    LIST_SUBMISSIONS = "list_submissions"
    APPROVE = "approve"
    REJECT = "reject"
    ASSIGN = "assign"


PUBLIC: frozenset[Role] = frozenset()
AUTHENTICATED: frozenset[Role] = frozenset({Role.USER, Role.ADMIN})
ADMIN_ONLY: frozenset[Role] = frozenset({Role.ADMIN})

REQUIRED_ROLES: dict[Operation, frozenset[Role]] = {
    Operation.LIST_PROJECTS: PUBLIC,
    Operation.GET_PROJECT: PUBLIC,
    Operation.LIST_AVAILABLE_PROJECTS: AUTHENTICATED,
    Operation.APPLY: AUTHENTICATED,
    Operation.LIST_OWN_APPLICATIONS: AUTHENTICATED,
    Operation.SUBMIT: AUTHENTICATED,
    Operation.GET_OWN_SUBMISSION: AUTHENTICATED,
    Operation.LIST_SUBMISSIONS: ADMIN_ONLY,
    Operation.APPROVE: ADMIN_ONLY,
    Operation.REJECT: ADMIN_ONLY,
    Operation.ASSIGN: ADMIN_ONLY,
}


def is_public(operation: Operation) -> bool:
    return not REQUIRED_ROLES[operation]


def require(principal: Principal | None, operation: Operation) -> Principal | None:
    """Check *principal* against the role table for *operation*.

    Returns the principal unchanged. Public operations accept ``None``.

    Raises:
        NotAuthenticatedError: No principal for a non-public operation.
        NotAuthorizedError: The principal's role is not in the allowed set.
    """
    allowed = REQUIRED_ROLES[operation]
    if not allowed:
        return principal
    if principal is None:
        raise NotAuthenticatedError()
    if Role(principal.role) not in allowed:
        raise NotAuthorizedError(operation.value, Role(principal.role).value)
    return principal
