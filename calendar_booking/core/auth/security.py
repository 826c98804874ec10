# calendar_booking/core/auth/security.py
"""
Bearer-token authentication for the booking API.

Tokens are issued by the account service; this module only checks the
signature and expiry and maps the ``sub`` claim to a booking owner.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from calendar_booking.config import settings
from calendar_booking.core.users.models import User
from calendar_booking.db.base import get_async_db_session

from .schemas import TokenData

log = logging.getLogger(__name__)

# tokenUrl only feeds the OpenAPI docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/auth/login")


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str) -> TokenData:
    """
    Decodes a bearer token and returns the owner id it carries.

    Args:
        token (str): Encoded JWT.

    Returns:
        TokenData: Claims with the numeric ``user_id`` taken from ``sub``.

    Raises:
        HTTPException: 401 for a bad signature, an expired token or a
            missing / non-numeric ``sub``.
    """
    try:
        claims: dict[str, Any] = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        log.info("Rejected bearer token: %s", exc)
        raise _unauthenticated() from exc

    subject = claims.get("sub")
    if subject is None:
        log.info("Rejected bearer token without 'sub'")
        raise _unauthenticated()
    try:
        return TokenData(user_id=subject)
    except ValidationError as exc:
        log.info("Rejected bearer token with sub=%r", subject)
        raise _unauthenticated() from exc


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_async_db_session),
) -> User:
    """
    FastAPI dependency: the booking owner behind the bearer token.

    Raises:
        HTTPException: 401 when the token is invalid,
                       404 when it names an unknown user.
    """
    token_data = verify_token(token)
    owner = await db.get(User, token_data.user_id)
    if owner is None:
        log.warning("Valid token for unknown user id %s", token_data.user_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {token_data.user_id} not found",
        )
    return owner
