from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.core.config import get_settings
from bookburst.core.db import get_session
from bookburst.core.exceptions import (
    InvalidToken,
    TokenExpired,
    UnauthorizedException,
)
from bookburst.core.security import decode_access_token
from bookburst.logging.setup import get_logger
from bookburst.models.user import User
from bookburst.repositories.user_repo import UserRepository

settings = get_settings()
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/users/login", auto_error=False
)
logger = get_logger("bookburst.auth")


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Resolve the bearer token to a user.

    Raises:
        UnauthorizedException: Missing, malformed, expired or invalid token, or
            the user no longer exists
    """
    if not token:
        raise UnauthorizedException(detail="No token, authorization denied")

    try:
        user_id = decode_access_token(token)
    except TokenExpired:
        raise UnauthorizedException(detail="Token has expired", code="token_expired")
    except InvalidToken as e:
        logger.warning(f"Rejected token: {e}")
        raise UnauthorizedException(detail="Token is not valid", code="invalid_token")

    user = await UserRepository(db).get_by_id(user_id)
    if not user:
        raise UnauthorizedException(detail="Token is not valid", code="invalid_token")

    return user
