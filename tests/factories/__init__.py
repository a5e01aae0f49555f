"""Test data factories for projectdesk."""

from tests.factories.principal_factory import PrincipalFactory, auth_header, make_token
from tests.factories.project_factory import ProjectFactory

__all__ = [
    "PrincipalFactory",
    "ProjectFactory",
    "auth_header",
    "make_token",
]
