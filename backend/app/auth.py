"""Request identity dependency.

Authentication happens upstream; the backend only reads the resolved user id.
"""

from fastapi import Header, HTTPException


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Return the caller's user id or reject the request as unauthenticated."""

    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(status_code=401, detail={"error": "Unauthorized", "error_type": "unauthorized"})
    return x_user_id.strip()
