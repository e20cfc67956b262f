"""Request identity. Authentication itself happens upstream; the provider forwards the user id."""

from fastapi import Header, HTTPException


async def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Dependency returning the authenticated user id, 401 when absent."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id
