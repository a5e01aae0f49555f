"""Bearer-token adapter that turns an Authorization header into a Principal.

Tokens are issued elsewhere; this module only verifies them.
"""

from typing import Any

import jwt
from fastapi import Depends, Request

from projectdesk.config import Settings, get_settings
from projectdesk.exceptions import NotAuthenticatedError
from projectdesk.logging_config import bind_request_context, get_logger
from projectdesk.services.access import Principal, Role

logger = get_logger(__name__)


def decode_jwt(token: str, settings: Settings) -> dict[str, Any]:
    """Decode and validate a JWT token. Raises NotAuthenticatedError on failure."""
    try:
        return jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise NotAuthenticatedError("Token expired")
    except jwt.InvalidTokenError:
        raise NotAuthenticatedError("Invalid token")


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    subject = payload.get("sub")
    if not subject:
        raise NotAuthenticatedError("Token has no subject")
    try:
        role = Role(payload.get("role", Role.USER.value))
    except ValueError:
        raise NotAuthenticatedError("Token carries an unknown role")
    return Principal(id=str(subject), role=role)


async def get_current_principal(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Principal | None:
    """
    FastAPI dependency: resolve the caller from a Bearer token.

    Returns None when no Authorization header is sent, so that public
    operations work anonymously and the access guard decides the rest.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    if not auth_header.startswith("Bearer "):
        raise NotAuthenticatedError("Missing or invalid Authorization header")

    token = auth_header.removeprefix("Bearer ").strip()
    if not token:
        raise NotAuthenticatedError("Empty token")

    principal = principal_from_claims(decode_jwt(token, settings))
    bind_request_context(
        getattr(request.state, "request_id", "-"), principal_id=principal.id
    )
    return principal
