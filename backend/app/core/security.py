"""Access tokens (JWT, HS256) and password hashing (bcrypt)."""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from jwt.exceptions import InvalidTokenError
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"


class InvalidAccessTokenError(ValueError):
    """Token is malformed, expired, wrongly signed or names no user id."""


def create_access_token(user_id: uuid.UUID, expires_delta: timedelta) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(
        {"exp": expire, "sub": str(user_id)}, settings.SECRET_KEY, algorithm=ALGORITHM
    )


def read_access_token(token: str) -> uuid.UUID:
    """Return the user id a valid token was issued for."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except InvalidTokenError as e:
        raise InvalidAccessTokenError(str(e)) from e
    try:
        return uuid.UUID(str(payload["sub"]))
    except (KeyError, ValueError) as e:
        raise InvalidAccessTokenError("token subject is not a user id") from e


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)
