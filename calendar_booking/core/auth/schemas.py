# calendar_booking/core/auth/schemas.py

from __future__ import annotations

from pydantic import BaseModel, Field


class TokenData(BaseModel):
    """
    Claims read from a bearer token.
    The standard 'sub' claim carries the numeric user id.
    """
    user_id: int = Field(..., description="User ID within our application")
