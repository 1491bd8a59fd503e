"""
Security helpers: password hashing and access tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from jose import jwt, ExpiredSignatureError, JWTError
from passlib.context import CryptContext

from bookburst.core.config import get_settings
from bookburst.core.exceptions import InvalidToken, TokenExpired

settings = get_settings()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hash a user's password.

    Args:
        password: Plain password

    Returns:
        Hash string
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a plain password against a stored hash.

    Args:
        plain_password: Plain password
        hashed_password: Stored hash

    Returns:
        True if the password matches
    """
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed JWT access token.

    Args:
        subject: Token subject (the user id)
        expires_delta: Lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta

    to_encode = {"exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> int:
    """
    Verify a token and return the user id it was issued for.

    Raises:
        TokenExpired: The signature is valid but the token has expired
        InvalidToken: Bad signature, malformed token or missing subject
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except ExpiredSignatureError as e:
        raise TokenExpired(str(e)) from e
    except JWTError as e:
        raise InvalidToken(str(e)) from e

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError) as e:
        raise InvalidToken("Token subject is not a user id") from e

