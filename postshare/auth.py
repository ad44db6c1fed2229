import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from . import crud
from .config import settings
from .database import get_db
from .exceptions import UnauthorizedError
from .models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=settings.password_schemes, deprecated="auto")

# Bearer token extractor; missing headers are reported as UnauthorizedError below.
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed token bound to ``user.id``."""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: Optional[str]) -> int:
    """
    Validate a token and return the user id it was issued for.

    Raises:
        UnauthorizedError: if the token is missing, malformed, expired or
            signed with a different key.
    """
    if not token:
        raise UnauthorizedError("Missing authentication token")

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid token")

    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else None
    user_id = decode_access_token(token)
    user = crud.get_user_by_id(db, user_id)
    if user is None:
        logger.warning("Token presented for unknown user id=%s", user_id)
        raise UnauthorizedError("Invalid token")
    return user
