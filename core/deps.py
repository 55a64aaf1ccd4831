# core/deps.py
"""
FastAPI dependencies for request context.

Authentication happens upstream; handlers receive an already-validated
user id either in the body (``userId``) or in the ``X-User-Id`` header.
"""
from typing import Annotated

from fastapi import Depends, Header

# Used when neither the body nor the header names who made a change
SYSTEM_USER_ID = "00000000-0000-0000-0000-000000000000"


async def get_request_user_id(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> str | None:
    """Return the caller id forwarded by the gateway, if any."""
    if x_user_id is None or not x_user_id.strip():
        return None
    return x_user_id.strip()


# Type alias for cleaner endpoint signatures
RequestUserId = Annotated[str | None, Depends(get_request_user_id)]
