"""
Authenticated-user context.

Sign-in is handled by the upstream identity provider, which forwards
the authenticated subject id in a request header. This module only
reads that header; it never verifies credentials itself.
"""

from starlette.requests import HTTPConnection

from fxdesk.core.config import settings


class AuthenticationRequiredError(Exception):
    """Raised when a protected endpoint is called without an identity."""


def get_current_user_id(connection: HTTPConnection) -> str:
    """FastAPI dependency returning the caller's user id.

    Raises:
        AuthenticationRequiredError: If the identity header is missing or blank.
    """
    user_id = connection.headers.get(settings.auth_user_header, "").strip()
    if not user_id:
        raise AuthenticationRequiredError()
    return user_id
