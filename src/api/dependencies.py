"""
FastAPI dependencies - Container access and the current user.
"""

from typing import Optional

from fastapi import Header, Request

from src.infrastructure.container import Container
from src.infrastructure.logging import bind_request_context


def get_app_container(request: Request) -> Container:
    """Get the container attached to the running app."""
    return request.app.state.container


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> str:
    """
    Resolve the bearer token to a user id.

    Raises:
        AuthenticationError: Missing or invalid token (rendered as 401).
    """
    token = ""
    if authorization:
        token = authorization.removeprefix("Bearer ").strip()

    user_id = get_app_container(request).identity.resolve_user_id(token)
    bind_request_context(user_id=user_id)
    return user_id
